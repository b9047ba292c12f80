"""Logger hierarchy shared by the CLI, the service and the library modules.

Console output stays terse (``[agentmeter] LEVEL message``). A log file, when
requested, always records DEBUG detail with timestamps and logger names so a
gate or tracking run can be audited after the fact.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import StorageError

_LOGGER_NAME = "agentmeter"
_CONSOLE_FORMAT = "[agentmeter] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``agentmeter.<name>``, or the package logger itself."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False
    _reset_handlers(logger)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is None:
        logger.setLevel(console_level)
        return logger

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot open log file {log_file}: {exc}") from exc
    sink.setLevel(logging.DEBUG)
    sink.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(sink)
    logger.setLevel(logging.DEBUG)
    return logger


def _reset_handlers(logger: logging.Logger) -> None:
    # Repeated CLI invocations in one process must not stack handlers or leak files.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["configure_logging", "get_logger"]
