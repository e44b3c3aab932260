# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger as loguru_logger

DEFAULT_FORMAT = "%(levelname)s: %(message)s"


class _PropagateHandler(logging.Handler):
	"""Hand loguru records (androguard's logger) to stdlib logging."""

	def emit(self, record: logging.LogRecord) -> None:
		logging.getLogger(record.name).handle(record)


def library_level(level: int) -> int:
	"""androguard chatter is shown at WARNING and up unless debugging."""
	if level <= logging.DEBUG:
		return level
	return max(level, logging.WARNING)


def configure_logging(level: int = logging.INFO, *, filename: Path | None = None, fmt: str = DEFAULT_FORMAT) -> None:
	"""
Configure root logging for the `tak-update-builder` CLI.

Logs go to stderr unless `filename` is given. Safe to call more than once;
later calls replace earlier handlers.

androguard logs through loguru, whose default sink writes DEBUG lines to
stderr. That sink is replaced so library output follows the same level and
destination as ours.
	"""
	handlers: list[logging.Handler] = []
	if filename is not None:
		handlers.append(logging.FileHandler(filename, encoding="utf-8"))
	else:
		handlers.append(logging.StreamHandler(sys.stderr))
	logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)

	loguru_logger.remove()
	loguru_logger.add(_PropagateHandler(), level=library_level(level), format="{message}")
