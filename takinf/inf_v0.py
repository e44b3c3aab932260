# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
TAK `product.inf` update manifest (v0).

One line per package, 13 comma-separated fields, lines joined by `\\n` with no
trailing newline. This is the format TAK devices read to decide which updates
are available:

	platform, type, package id, name, version, version code, apk filename,
	icon filename, description, sha256, os requirement (min SDK),
	tak prereq, apk size

Pinned format limitation: fields are neither quoted nor escaped, so a comma
inside any field corrupts the line. Descriptions are sanitized for line
breaks only.
"""

from __future__ import annotations

from dataclasses import dataclass

from takinf.classify import PackageRole

PRODUCT_INF = "product.inf"
PLATFORM_ANDROID = "Android"
FIELD_COUNT = 13


@dataclass(frozen=True)
class PackageRecord:
	record_id: int
	platform: str
	role: PackageRole
	app_id: str
	name: str
	version: str
	version_code: int
	filename: str
	icon: bytes | None
	description: str
	sha256: str
	os_requirement: str
	tak_prereq: str
	size: int

	@property
	def icon_name(self) -> str:
		return f"icon_{self.record_id}.png" if self.icon else ""


def format_line(rec: PackageRecord) -> str:
	fields = [
		rec.platform,
		rec.role.value,
		rec.app_id,
		rec.name,
		rec.version,
		str(rec.version_code),
		rec.filename or "",
		rec.icon_name,
		rec.description or "",
		rec.sha256 or "",
		rec.os_requirement or "",
		rec.tak_prereq or "",
		str(rec.size) if rec.size > 0 else "-1",
	]
	return ",".join(fields)


def render_product_inf(records: list[PackageRecord]) -> str:
	return "\n".join(format_line(rec) for rec in records)


def encode_product_inf(text: str) -> bytes:
	return text.encode("utf-8")


def parse_product_inf(text: str) -> list[list[str]]:
	"""
Split a product.inf blob back into per-line field lists.

Lines with the wrong field count are rejected; since the format has no
escaping, that is the only corruption this can detect.
	"""
	rows: list[list[str]] = []
	if not text:
		return rows
	for lineno, line in enumerate(text.split("\n"), start=1):
		fields = line.split(",")
		if len(fields) != FIELD_COUNT:
			raise ValueError(f"product.inf line {lineno}: expected {FIELD_COUNT} fields, got {len(fields)}")
		rows.append(fields)
	return rows
