# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import zipfile
import zlib
from pathlib import Path

from takinf.classify import PackageRole
from takinf.inf_v0 import PackageRecord, render_product_inf
from takinf.infz_v0 import build_infz_bytes, write_infz


def _rec(record_id: int, icon: bytes | None) -> PackageRecord:
	return PackageRecord(
		record_id=record_id,
		platform="Android",
		role=PackageRole.APP,
		app_id=f"com.example.app{record_id}",
		name=f"App {record_id}",
		version="1.0.0",
		version_code=record_id,
		filename=f"app{record_id}.apk",
		icon=icon,
		description="",
		sha256="00" * 32,
		os_requirement="21",
		tak_prereq="",
		size=100,
	)


def test_manifest_first_then_icons_by_record_id() -> None:
	records = [_rec(2, b"two"), _rec(1, b"one"), _rec(3, None)]
	text = render_product_inf(records)
	with zipfile.ZipFile(io.BytesIO(build_infz_bytes(text, records))) as zf:
		assert zf.namelist() == ["product.inf", "icon_1.png", "icon_2.png"]
		assert zf.read("product.inf") == text.encode("utf-8")
		assert zf.read("icon_2.png") == b"two"
		assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())


def test_bundle_bytes_are_deterministic() -> None:
	records = [_rec(1, b"\x89PNG" * 50)]
	text = render_product_inf(records)
	assert build_infz_bytes(text, records) == build_infz_bytes(text, records)


def test_write_infz_creates_file(tmp_path: Path) -> None:
	records = [_rec(1, None)]
	text = render_product_inf(records)
	out = tmp_path / "out" / "product.infz"
	write_infz(out, text, records)
	with zipfile.ZipFile(out) as zf:
		assert zf.namelist() == ["product.inf"]


def test_entries_use_maximum_deflate_level() -> None:
	icon = bytes(range(256)) * 8 + b"\x00" * 4096
	records = [_rec(1, icon)]
	text = render_product_inf(records) * 20
	data = build_infz_bytes(text, records)

	def _level9_size(payload: bytes) -> int:
		c = zlib.compressobj(9, zlib.DEFLATED, -15)
		return len(c.compress(payload) + c.flush())

	with zipfile.ZipFile(io.BytesIO(data)) as zf:
		assert zf.getinfo("product.inf").compress_size == _level9_size(text.encode("utf-8"))
		assert zf.getinfo("icon_1.png").compress_size == _level9_size(icon)
