"""Logging setup shared by the CLI and embedding applications."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LIBRARY_LOGGERS = ("scm_snapshot_core", "scm_snapshot_ops", "scm_snapshot_cli", "scm_snapshot")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
_DISABLED = {"off", "none", "disabled"}


def resolve_level(verbosity: str) -> Optional[int]:
    """Map a verbosity name to a logging level (``None`` means off)."""
    normalized = verbosity.strip().lower()
    if normalized in _DISABLED:
        return None
    if normalized not in _LEVELS:
        raise ValueError(f"Unknown log verbosity: {verbosity}")
    return _LEVELS[normalized]


def configure_logging(verbosity: str = "info", console: Optional[Console] = None) -> None:
    """Route library logs through a rich handler on stderr."""
    level = resolve_level(verbosity)
    handler = RichHandler(console=console or Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    for name in LIBRARY_LOGGERS:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if isinstance(existing, RichHandler):
                logger.removeHandler(existing)
        logger.propagate = False
        if level is None:
            logger.disabled = True
            continue
        logger.disabled = False
        logger.setLevel(level)
        logger.addHandler(handler)
