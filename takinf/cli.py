# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from takinf.build import BuildError, BuildOptions, build_update_v0
from takinf.log import configure_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="tak-update-builder",
		description="Build TAK update files (product.inf, product.infz) from a folder of APKs",
	)
	p.add_argument(
		"apk_dir",
		nargs="?",
		type=Path,
		default=None,
		help="Folder containing *.apk files; outputs are written here too (default: current directory)",
	)
	p.add_argument("-j", "--jobs", type=int, default=1, help="Read up to N APKs in parallel (default: 1)")
	verbosity = p.add_mutually_exclusive_group()
	verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
	p.add_argument("--log-file", type=Path, default=None, help="Write log output to this file instead of stderr")
	return p


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)

	level = logging.INFO
	if args.verbose:
		level = logging.DEBUG
	elif args.quiet:
		level = logging.WARNING
	configure_logging(level, filename=args.log_file)

	if args.jobs < 1:
		p.error("--jobs must be at least 1")

	apk_dir: Path = args.apk_dir if args.apk_dir is not None else Path.cwd()
	opts = BuildOptions.for_dir(apk_dir, jobs=args.jobs)
	try:
		result = build_update_v0(opts)
	except BuildError as err:
		logger.error("%s", err)
		return 1
	except Exception:
		logger.exception("fatal error")
		return 1

	logger.info("successfully processed %d package(s)", len(result.records))
	logger.info("files created:")
	logger.info("  - %s", result.inf_path)
	logger.info("  - %s", result.infz_path)
	return 0
