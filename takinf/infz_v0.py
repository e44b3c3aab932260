# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
TAK `product.infz` bundle (v0).

A zip archive holding `product.inf` followed by one `icon_<id>.png` entry per
package that has an icon. Entries are written in record order with fixed
timestamps and permissions so identical inputs give identical bytes.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

from takinf.inf_v0 import PRODUCT_INF, PackageRecord, encode_product_inf

PRODUCT_INFZ = "product.infz"
COMPRESS_LEVEL = 9

# Earliest timestamp representable in a zip header.
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _entry(name: str) -> zipfile.ZipInfo:
	zi = zipfile.ZipInfo(filename=name, date_time=_FIXED_DATE_TIME)
	zi.compress_type = zipfile.ZIP_DEFLATED
	zi.external_attr = 0o644 << 16
	return zi


def build_infz_bytes(inf_text: str, records: list[PackageRecord]) -> bytes:
	buf = io.BytesIO()
	with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=COMPRESS_LEVEL) as zf:
		zf.writestr(_entry(PRODUCT_INF), encode_product_inf(inf_text), compresslevel=COMPRESS_LEVEL)
		for rec in sorted(records, key=lambda r: r.record_id):
			if rec.icon:
				zf.writestr(_entry(rec.icon_name), rec.icon, compresslevel=COMPRESS_LEVEL)
	return buf.getvalue()


def write_infz(path: Path, inf_text: str, records: list[PackageRecord]) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_bytes(build_infz_bytes(inf_text, records))
