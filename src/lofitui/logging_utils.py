"""Logging helpers for :mod:`lofitui`."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

__all__ = [
    "configure_logging",
    "detach_console_logging",
    "get_log_file_path",
    "get_logger",
]

_ENV_LEVEL = "LOFITUI_LOG_LEVEL"
_ENV_FILE = "LOFITUI_LOG_FILE"
_DEFAULT_LOG_PATH = Path.home() / ".cache" / "lofitui.log"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOGGER_NAME = "lofitui"


def _create_formatter() -> logging.Formatter:
    return logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)


def _coerce_level(value: str) -> int:
    """Return a logging level derived from *value*."""

    normalized = value.strip().upper()
    if normalized.isdigit():
        level = int(normalized)
        if 0 <= level <= logging.CRITICAL:
            return level
    level = logging.getLevelName(normalized)
    if isinstance(level, int):
        return level
    return logging.INFO


def _apply_log_level(logger: logging.Logger, level: int) -> None:
    """Update the logger and all attached handlers to ``level``."""

    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.setLevel(level)


def _configure_file_logging(
    logger: logging.Logger,
    formatter: logging.Formatter,
    level: int,
    destination: Optional[str],
) -> None:
    """Attach or replace the file handler based on ``destination``."""

    existing: Optional[logging.Handler] = getattr(
        configure_logging, "_file_handler", None
    )
    if existing is not None:
        logger.removeHandler(existing)
        existing.close()
        configure_logging._file_handler = None  # type: ignore[attr-defined]

    if not destination:
        configure_logging._log_path = None  # type: ignore[attr-defined]
        return

    log_path = Path(destination).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf8")
    except OSError:
        logger.warning("Failed to set up file logging at %s", log_path)
        configure_logging._log_path = None  # type: ignore[attr-defined]
        return

    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
    configure_logging._file_handler = file_handler  # type: ignore[attr-defined]
    configure_logging._log_path = log_path  # type: ignore[attr-defined]
    logger.debug("File logging enabled at %s", log_path)


def configure_logging(
    *,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger if it hasn't been set up yet.

    Explicit arguments win over ``LOFITUI_LOG_LEVEL`` and ``LOFITUI_LOG_FILE``.
    An empty log file value disables file logging. Calling this again after
    the first configuration only adjusts the level and, when a destination is
    given, swaps the file handler.
    """

    logger = logging.getLogger(_LOGGER_NAME)
    configured = getattr(configure_logging, "_configured", False)
    env_level = os.getenv(_ENV_LEVEL)
    env_file = os.getenv(_ENV_FILE)
    formatter = _create_formatter()

    if configured:
        if level is not None:
            log_level = _coerce_level(level)
        elif env_level is not None:
            log_level = _coerce_level(env_level)
        else:
            log_level = getattr(configure_logging, "_level", logging.INFO)
        if log_file is not None:
            _configure_file_logging(logger, formatter, log_level, log_file)
    else:
        log_level = _coerce_level(level or env_level or "INFO")
        logger.propagate = False

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
        configure_logging._stream_handler = stream_handler  # type: ignore[attr-defined]

        if log_file is not None:
            destination = log_file
        elif env_file is not None:
            destination = env_file
        else:
            destination = str(_DEFAULT_LOG_PATH)
        _configure_file_logging(logger, formatter, log_level, destination)
        configure_logging._configured = True  # type: ignore[attr-defined]

    _apply_log_level(logger, log_level)
    configure_logging._level = log_level  # type: ignore[attr-defined]
    return logger


def detach_console_logging() -> None:
    """Stop writing log records to the terminal.

    Called once the full-screen application owns the terminal; records keep
    flowing to the log file.
    """

    logger = logging.getLogger(_LOGGER_NAME)
    handler: Optional[logging.Handler] = getattr(
        configure_logging, "_stream_handler", None
    )
    if handler is None:
        return
    if handler in logger.handlers:
        logger.removeHandler(handler)
    configure_logging._stream_handler = None  # type: ignore[attr-defined]
    if getattr(configure_logging, "_file_handler", None) is None and not any(
        isinstance(existing, logging.NullHandler) for existing in logger.handlers
    ):
        # Keep records away from logging.lastResort while the screen is in use.
        logger.addHandler(logging.NullHandler())


def get_log_file_path() -> Optional[Path]:
    """Return the active log file path, if file logging is enabled."""

    return getattr(configure_logging, "_log_path", None)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger."""

    base = configure_logging()
    if not name or name == base.name:
        return base
    if name.startswith(base.name + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{base.name}.{name}")
