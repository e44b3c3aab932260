# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
APK metadata reader.

`read_apk` opens one package through a `ManifestSource`, normalizes the fields
the update manifest needs, and always releases the package handle. Any failure
while reading is logged and reported as `None` so callers can skip the file.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from takinf.apk_source import ManifestNode, ManifestSource, SourceOpener, is_resource_ref, open_source

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
DEFAULT_MIN_SDK = "1"
DESC_META_NAME = "app_desc"


@dataclass(frozen=True)
class ApkInfo:
	app_id: str
	name: str
	version: str
	version_code: int
	min_sdk: str
	description: str
	icon: bytes | None
	icon_path: str
	sha256: str
	size: int
	filename: str


def sha256_hex(data: bytes) -> str:
	return hashlib.sha256(data).hexdigest()


def sanitize_description(text: str) -> str:
	"""Collapse every whitespace run (newlines included) to one space."""
	return " ".join(text.split())


def first_of(steps: Iterable[Callable[[], Optional[str]]]) -> str | None:
	"""Run `steps` in order and return the first non-empty result."""
	for step in steps:
		value = step()
		if value:
			return value
	return None


def resolve_value(source: ManifestSource, value: str | None) -> str | None:
	"""
Resolve a manifest attribute value.

Literal values are returned as-is; `@XXXXXXXX` references go through the
resource table and yield the first configured value (or None).
	"""
	if value is None:
		return None
	if not is_resource_ref(value):
		return value
	resolved = source.resolve(value)
	return resolved[0] if resolved else None


def _application(source: ManifestSource) -> ManifestNode | None:
	return source.raw.child("application")


def resolve_label(source: ManifestSource) -> str:
	app = _application(source)
	label = app.attr("label") if app is not None else None
	name = first_of(
		(
			lambda: label if label and not is_resource_ref(label) else None,
			lambda: resolve_value(source, label) if label else None,
			lambda: source.package.split(".")[-1],
		)
	)
	return name or ""


def resolve_min_sdk(source: ManifestSource) -> str:
	uses_sdk = source.raw.child("uses-sdk")
	value = uses_sdk.attr("minSdkVersion") if uses_sdk is not None else None
	return value or DEFAULT_MIN_SDK


def _meta_description(source: ManifestSource) -> str | None:
	app = _application(source)
	if app is None:
		return None
	for meta in app.children.get("meta-data") or []:
		if meta.attr("name") == DESC_META_NAME:
			return resolve_value(source, meta.attr("value") or meta.attr("resource"))
	return None


def _attr_description(source: ManifestSource) -> str | None:
	app = _application(source)
	if app is None:
		return None
	return resolve_value(source, app.attr("description"))


def resolve_description(source: ManifestSource) -> str:
	text = first_of(
		(
			lambda: _meta_description(source),
			lambda: _attr_description(source),
		)
	)
	return sanitize_description(text) if text else ""


def extract_icon(source: ManifestSource) -> tuple[bytes | None, str]:
	"""Return (icon bytes, entry path); failures are logged and yield no icon."""
	app = _application(source)
	icon_ref = app.attr("icon") if app is not None else None
	if not icon_ref:
		return None, ""
	try:
		icon_path = resolve_value(source, icon_ref)
		if not icon_path:
			return None, ""
		return source.extract(icon_path), icon_path
	except Exception as err:
		logger.warning("could not extract icon for %s: %s", source.package, err)
		return None, ""


def _read_info(apk_path: Path, source: ManifestSource) -> ApkInfo:
	icon, icon_path = extract_icon(source)

	st = apk_path.stat()
	data = apk_path.read_bytes()

	# Prefer the manifest's integer versionCode; the mtime fallback is only a
	# best-effort ordinal and is not comparable across machines.
	version_code = source.version_code or int(st.st_mtime)

	return ApkInfo(
		app_id=source.package,
		name=resolve_label(source),
		version=source.version_name or DEFAULT_VERSION,
		version_code=version_code,
		min_sdk=resolve_min_sdk(source),
		description=resolve_description(source),
		icon=icon,
		icon_path=icon_path,
		sha256=sha256_hex(data),
		size=st.st_size,
		filename=apk_path.name,
	)


def _release(apk_path: Path, source: ManifestSource) -> None:
	try:
		source.close()
	except Exception as err:
		logger.warning("could not release APK %s: %s", apk_path, err)


def read_apk(apk_path: Path, *, opener: SourceOpener = open_source) -> ApkInfo | None:
	source: ManifestSource | None = None
	try:
		source = opener(apk_path)
		return _read_info(apk_path, source)
	except Exception as err:
		logger.error("error reading APK %s: %s", apk_path, err)
		return None
	finally:
		if source is not None:
			_release(apk_path, source)
