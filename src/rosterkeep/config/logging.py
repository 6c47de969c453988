"""Logging setup for the command line entry points."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_LEVEL_ENV = "ROSTERKEEP_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def level_from_environment(default: int = logging.INFO) -> int:
    """Resolve ``ROSTERKEEP_LOG_LEVEL`` (a level name such as ``DEBUG``)."""

    raw = os.getenv(LOG_LEVEL_ENV)
    if raw is None or not raw.strip():
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level in {LOG_LEVEL_ENV}: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger once.

    ``level`` defaults to ``ROSTERKEEP_LOG_LEVEL``. Per-request ``httpx`` lines
    only show up at DEBUG. Pass ``force=True`` to reconfigure in tests.
    """

    effective = level_from_environment() if level is None else level
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    if effective > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
