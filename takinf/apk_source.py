# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Manifest sources: the boundary between takinf and an APK parsing library.

The reader only needs a handful of capabilities from an opened package:
- identity fields (package id, version name, integer version code),
- the raw manifest element tree (`uses-sdk`, `application`, `meta-data`),
- resource-table resolution of `@XXXXXXXX` attribute references,
- byte extraction of an arbitrary entry inside the package,
- an explicit `close()`.

`ManifestSource` pins that contract. `AndroguardSource` implements it on top
of androguard; tests substitute their own sources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

from androguard.core.apk import APK


@dataclass(frozen=True)
class ManifestNode:
	"""One manifest element with namespace-stripped attribute names."""

	tag: str
	attributes: dict[str, str] = field(default_factory=dict)
	children: dict[str, list["ManifestNode"]] = field(default_factory=dict)

	def child(self, tag: str, index: int = 0) -> ManifestNode | None:
		nodes = self.children.get(tag) or []
		if index >= len(nodes):
			return None
		return nodes[index]

	def attr(self, name: str) -> str | None:
		return self.attributes.get(name)


class ManifestSource(Protocol):
	package: str
	version_name: str | None
	version_code: int | None
	raw: ManifestNode

	def resolve(self, ref: str) -> list[str]:
		...

	def extract(self, entry_path: str) -> bytes:
		...

	def close(self) -> None:
		...


SourceOpener = Callable[[Path], ManifestSource]


def is_resource_ref(value: str) -> bool:
	return value.startswith("@")


def parse_resource_id(ref: str) -> int | None:
	"""
Decode an androguard-style reference (`@7F010000`) into a resource id.

Framework references (`@android:...`) are not resolvable against the
package's own resource table and yield None.
	"""
	if not is_resource_ref(ref):
		return None
	body = ref[1:]
	if body.startswith("android:"):
		return None
	try:
		return int(body, 16)
	except ValueError:
		return None


def parse_version_code(raw: str | int | None) -> int | None:
	if raw is None or raw == "":
		return None
	if isinstance(raw, int):
		return raw
	text = raw.strip()
	try:
		if text.lower().startswith("0x"):
			return int(text, 16)
		return int(text)
	except ValueError:
		return None


def _local_name(key: str) -> str:
	return key.rsplit("}", 1)[-1]


def node_from_element(elem: Any) -> ManifestNode:
	"""Convert an lxml/ElementTree element into a `ManifestNode` tree."""
	attrs = {_local_name(str(k)): str(v) for k, v in elem.attrib.items()}
	children: dict[str, list[ManifestNode]] = {}
	for sub in elem:
		# Skip comments/processing instructions.
		if not isinstance(sub.tag, str):
			continue
		node = node_from_element(sub)
		children.setdefault(node.tag, []).append(node)
	return ManifestNode(tag=_local_name(str(elem.tag)), attributes=attrs, children=children)


class AndroguardSource:
	"""`ManifestSource` backed by `androguard.core.apk.APK`."""

	def __init__(self, apk_path: Path) -> None:
		self.path = apk_path
		self._apk = APK(str(apk_path))
		self._arsc = None
		try:
			self.package = str(self._apk.get_package() or "")
			if not self.package:
				raise ValueError(f"manifest has no package name: {apk_path}")
			self.version_name = self._apk.get_androidversion_name() or None
			self.version_code = parse_version_code(self._apk.get_androidversion_code())
			self.raw = node_from_element(self._apk.get_android_manifest_xml())
		except Exception:
			self.close()
			raise

	def _resources(self) -> Any:
		if self._arsc is None:
			self._arsc = self._apk.get_android_resources()
		return self._arsc

	def resolve(self, ref: str) -> list[str]:
		rid = parse_resource_id(ref)
		if rid is None:
			return []
		arsc = self._resources()
		if arsc is None:
			return []
		out: list[str] = []
		for _config, value in arsc.get_resolved_res_configs(rid):
			if value is not None and value != "":
				out.append(str(value))
		return out

	def extract(self, entry_path: str) -> bytes:
		return self._apk.get_file(entry_path)

	def close(self) -> None:
		"""
Release the in-memory archive held by the APK object.

androguard 4.1 keeps an apkInspector `ZipEntry` (no `close()`) whose `.zip`
is the BytesIO of the whole file; older releases keep a `zipfile.ZipFile`.
Safe to call more than once.
		"""
		apk, self._apk = self._apk, None
		self._arsc = None
		if apk is None:
			return
		entry = getattr(apk, "zip", None)
		stream = getattr(entry, "zip", entry)
		closer = getattr(stream, "close", None)
		if callable(closer):
			closer()


def open_source(apk_path: Path) -> ManifestSource:
	return AndroguardSource(apk_path)
