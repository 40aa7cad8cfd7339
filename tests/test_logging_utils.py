"""Tests for :mod:`lofitui.logging_utils`."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def logging_utils(monkeypatch: pytest.MonkeyPatch):
    """Reload the module and strip handler state left behind by other tests."""

    monkeypatch.setenv("LOFITUI_LOG_FILE", "")
    monkeypatch.delenv("LOFITUI_LOG_LEVEL", raising=False)
    from lofitui import logging_utils as module

    module = importlib.reload(module)
    monkeypatch.setattr(module.configure_logging, "_configured", False, raising=False)
    monkeypatch.delattr(module.configure_logging, "_stream_handler", raising=False)
    monkeypatch.delattr(module.configure_logging, "_file_handler", raising=False)
    monkeypatch.delattr(module.configure_logging, "_log_path", raising=False)
    monkeypatch.delattr(module.configure_logging, "_level", raising=False)

    logger = logging.getLogger("lofitui")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    yield module
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_configure_logging_updates_level(logging_utils: Any) -> None:
    """Runtime calls should be able to update the log level."""

    logger = logging_utils.configure_logging(level="INFO")
    assert logger.getEffectiveLevel() == logging.INFO

    logging_utils.configure_logging(level="DEBUG")
    assert logger.getEffectiveLevel() == logging.DEBUG
    assert all(handler.level == logging.DEBUG for handler in logger.handlers)


def test_level_read_from_environment(
    logging_utils: Any, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOFITUI_LOG_LEVEL", "warning")
    logger = logging_utils.configure_logging()
    assert logger.getEffectiveLevel() == logging.WARNING


def test_empty_log_file_disables_file_logging(logging_utils: Any) -> None:
    logger = logging_utils.configure_logging()
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert logging_utils.get_log_file_path() is None


def test_configure_logging_changes_file_destination(
    logging_utils: Any, tmp_path: Path
) -> None:
    """Switching log files should replace the active file handler."""

    logger = logging_utils.configure_logging(level="INFO")
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    log_path = tmp_path / "runtime.log"
    logging_utils.configure_logging(log_file=str(log_path))

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert file_handlers and Path(file_handlers[-1].baseFilename) == log_path
    assert log_path.exists()
    assert logging_utils.get_log_file_path() == log_path


def test_log_file_from_environment(
    logging_utils: Any, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    log_path = tmp_path / "nested" / "lofitui.log"
    monkeypatch.setenv("LOFITUI_LOG_FILE", str(log_path))

    logger = logging_utils.configure_logging()
    logger.info("hello from the test")

    assert log_path.exists()
    assert "hello from the test" in log_path.read_text(encoding="utf8")


def test_detach_console_logging_keeps_file_handler(
    logging_utils: Any, tmp_path: Path
) -> None:
    log_path = tmp_path / "app.log"
    logger = logging_utils.configure_logging(log_file=str(log_path))
    assert any(type(h) is logging.StreamHandler for h in logger.handlers)

    logging_utils.detach_console_logging()

    assert not any(type(h) is logging.StreamHandler for h in logger.handlers)
    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    # Detaching twice is harmless.
    logging_utils.detach_console_logging()


def test_detach_console_logging_installs_null_handler(logging_utils: Any) -> None:
    logger = logging_utils.configure_logging()
    logging_utils.detach_console_logging()
    assert not any(type(h) is logging.StreamHandler for h in logger.handlers)
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_get_logger_namespaces_children(logging_utils: Any) -> None:
    assert logging_utils.get_logger().name == "lofitui"
    assert logging_utils.get_logger("lofitui.menu").name == "lofitui.menu"
    assert logging_utils.get_logger("player").name == "lofitui.player"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), (" ERROR ", logging.ERROR), ("30", 30), ("bogus", logging.INFO)],
)
def test_coerce_level(logging_utils: Any, value: str, expected: int) -> None:
    assert logging_utils._coerce_level(value) == expected
