"""Logger setup shared by every pagesmith module and the CLI."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "pagesmith"


def get_logger(name: str | None = None) -> logging.Logger:
    """`pagesmith.<name>`, or the package logger itself when no name is given."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """
    Route build messages to stderr, prefixed with `[pagesmith]`, and optionally
    to a timestamped log file. `verbose` adds per-file scan and skip details.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # main() may run several times in one process (tests); start from no handlers each time.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[pagesmith] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
