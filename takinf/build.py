# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build TAK update files (`product.inf` + `product.infz`) from a folder of APKs.

This is an offline, one-shot operation:
- every `*.apk` in `apk_dir` is read (names matched case-insensitively),
- unreadable APKs are logged and skipped,
- the surviving packages are classified and numbered 1..N in listing order,
- both outputs are written into `apk_dir` only once the record list is final.

Pinned rule: no output is written when there are no APKs or when every APK
failed to read.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from takinf.apk_source import SourceOpener, open_source
from takinf.classify import classify_role, infer_tak_prereq
from takinf.inf_v0 import PLATFORM_ANDROID, PRODUCT_INF, PackageRecord, encode_product_inf, render_product_inf
from takinf.infz_v0 import PRODUCT_INFZ, write_infz
from takinf.reader import ApkInfo, read_apk

logger = logging.getLogger(__name__)

APK_SUFFIX = ".apk"


class BuildError(ValueError):
	pass


@dataclass(frozen=True)
class BuildOptions:
	apk_dir: Path
	inf_path: Path
	infz_path: Path
	jobs: int = 1
	platform: str = PLATFORM_ANDROID

	@classmethod
	def for_dir(cls, apk_dir: Path, *, jobs: int = 1) -> BuildOptions:
		return cls(
			apk_dir=apk_dir,
			inf_path=apk_dir / PRODUCT_INF,
			infz_path=apk_dir / PRODUCT_INFZ,
			jobs=jobs,
		)


@dataclass(frozen=True)
class BuildResult:
	records: list[PackageRecord]
	inf_text: str
	inf_path: Path
	infz_path: Path


def discover_apks(apk_dir: Path) -> list[Path]:
	"""APK files directly under `apk_dir`, in directory-listing order."""
	if not apk_dir.is_dir():
		raise BuildError(f"not a directory: {apk_dir}")
	out: list[Path] = []
	for name in os.listdir(apk_dir):
		path = apk_dir / name
		if name.lower().endswith(APK_SUFFIX) and path.is_file():
			out.append(path)
	return out


def make_record(record_id: int, info: ApkInfo, *, platform: str = PLATFORM_ANDROID) -> PackageRecord:
	return PackageRecord(
		record_id=record_id,
		platform=platform,
		role=classify_role(info.app_id),
		app_id=info.app_id,
		name=info.name,
		version=info.version,
		version_code=info.version_code,
		filename=info.filename,
		icon=info.icon,
		description=info.description,
		sha256=info.sha256,
		os_requirement=info.min_sdk,
		tak_prereq=infer_tak_prereq(info.app_id, info.version, info.filename),
		size=info.size,
	)


def _read_all(apk_paths: list[Path], *, jobs: int, opener: SourceOpener) -> list[ApkInfo | None]:
	if jobs <= 1 or len(apk_paths) <= 1:
		return [read_apk(p, opener=opener) for p in apk_paths]
	# map() yields results in submission order, so ids stay stable for any
	# worker count.
	with ThreadPoolExecutor(max_workers=jobs) as executor:
		return list(executor.map(lambda p: read_apk(p, opener=opener), apk_paths))


def collect_records(
	apk_paths: list[Path],
	*,
	jobs: int = 1,
	platform: str = PLATFORM_ANDROID,
	opener: SourceOpener = open_source,
) -> list[PackageRecord]:
	infos = _read_all(apk_paths, jobs=jobs, opener=opener)

	records: list[PackageRecord] = []
	next_id = 1
	for apk_path, info in zip(apk_paths, infos):
		logger.info("processing: %s", apk_path.name)
		if info is None:
			logger.error("failed to process %s", apk_path.name)
			continue
		rec = make_record(next_id, info, platform=platform)
		next_id += 1
		records.append(rec)
		logger.info("  %s (%s)", rec.name, rec.app_id)
		logger.info("    type: %s, version: %s", rec.role.value, rec.version)
	return records


def build_update_v0(opts: BuildOptions, *, opener: SourceOpener = open_source) -> BuildResult:
	logger.info("scanning folder: %s", opts.apk_dir)
	apk_paths = discover_apks(opts.apk_dir)
	if not apk_paths:
		raise BuildError(f"no APK files found in {opts.apk_dir}")
	logger.info("found %d APK file(s)", len(apk_paths))

	records = collect_records(apk_paths, jobs=opts.jobs, platform=opts.platform, opener=opener)
	if not records:
		raise BuildError("no packages were successfully processed")

	inf_text = render_product_inf(records)
	opts.inf_path.parent.mkdir(parents=True, exist_ok=True)
	opts.inf_path.write_bytes(encode_product_inf(inf_text))
	logger.info("created %s", opts.inf_path)

	write_infz(opts.infz_path, inf_text, records)
	logger.info("created %s", opts.infz_path)

	return BuildResult(records=records, inf_text=inf_text, inf_path=opts.inf_path, infz_path=opts.infz_path)
