# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package classification for TAK update manifests.

Two pure functions live here:
- `classify_role` maps a package identifier to its role in the TAK ecosystem,
- `infer_tak_prereq` guesses which TAK host build a package needs.

Both are deterministic and evaluate their rules in a fixed priority order.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Optional

SYSTEM_PLUGIN_PREFIX = "com.atakmap.app.flavor."
PLUGIN_PREFIX = "com.atakmap.android"
PLUGIN_SUFFIX = ".plugin"

TAK_APP_ID = "com.atakmap.app"

_BRACKET_VERSION_RE = re.compile(r"\[([\d.]+)\]")
_FILENAME_VERSION_RE = re.compile(r"-([\d.]+)-(civ|mil|CIV|MIL)-")
_APP_ID_VERSION_RE = re.compile(r"@([\d.]+)\.(CIV|MIL)")


class PackageRole(str, Enum):
	APP = "app"
	PLUGIN = "plugin"
	SYSTEM_PLUGIN = "systemplugin"


def classify_role(app_id: str) -> PackageRole:
	if app_id.startswith(SYSTEM_PLUGIN_PREFIX):
		return PackageRole.SYSTEM_PLUGIN
	if app_id.startswith(PLUGIN_PREFIX) and app_id.endswith(PLUGIN_SUFFIX):
		return PackageRole.PLUGIN
	return PackageRole.APP


# Each stage sees (app_id, version_name, filename) and returns a dotted
# version or None.
PrereqStage = Callable[[str, str, str], Optional[str]]


def version_from_version_name(app_id: str, version_name: str, filename: str) -> str | None:
	"""e.g. "3.5.27 (1ad526bf) - [5.4.0]" -> "5.4.0" (first bracket only)."""
	m = _BRACKET_VERSION_RE.search(version_name)
	return m.group(1) if m else None


def version_from_filename(app_id: str, version_name: str, filename: str) -> str | None:
	"""e.g. "ATAK-Plugin-datasync-3.5.27-...-5.4.0-civ-release.apk" -> "5.4.0"."""
	m = _FILENAME_VERSION_RE.search(filename)
	return m.group(1) if m else None


def version_from_app_id(app_id: str, version_name: str, filename: str) -> str | None:
	"""e.g. "com.example@5.4.0.MIL" -> "5.4.0"."""
	m = _APP_ID_VERSION_RE.search(app_id)
	return m.group(1) if m else None


PREREQ_STAGES: tuple[PrereqStage, ...] = (
	version_from_version_name,
	version_from_filename,
	version_from_app_id,
)


def _is_mil(app_id: str, filename: str) -> bool:
	return "mil" in app_id or "MIL" in app_id or "-mil-" in filename or "-MIL-" in filename


def _is_civ(app_id: str, filename: str) -> bool:
	return "civ" in app_id or "CIV" in app_id or "-civ-" in filename or "-CIV-" in filename


def tak_flavor(app_id: str, filename: str) -> str | None:
	"""Return "MIL" or "CIV"; military cues win when both are present."""
	if _is_mil(app_id, filename):
		return "MIL"
	if _is_civ(app_id, filename):
		return "CIV"
	return None


def infer_tak_prereq(app_id: str, version_name: str, filename: str) -> str:
	"""
Infer the TAK prerequisite token (`com.atakmap.app@<ver>.<MIL|CIV>`).

The version comes from the first stage in `PREREQ_STAGES` that yields one.
An empty string means "no prerequisite": either no stage matched, or no
flavor cue was found in the package id or filename.
	"""
	tak_version: str | None = None
	for stage in PREREQ_STAGES:
		tak_version = stage(app_id, version_name, filename)
		if tak_version:
			break
	if not tak_version:
		return ""

	flavor = tak_flavor(app_id, filename)
	if flavor is None:
		return ""
	return f"{TAK_APP_ID}@{tak_version}.{flavor}"
