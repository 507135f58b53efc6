import logging

import pytest
from rich.logging import RichHandler

from sheetline.utils.logging_setup import (
    LOG_ACTION,
    LOG_FORMAT,
    LOG_ROW,
    RowContextFilter,
    configure_logging,
    log_context,
    resolve_level,
)


def _record():
    return logging.LogRecord("test.logger", logging.INFO, __file__, 1, "hello", (), None)


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_flag = getattr(root, "_sheetline_logging_configured", False)
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    root._sheetline_logging_configured = saved_flag


def test_row_filter_defaults():
    record = _record()
    RowContextFilter().filter(record)
    assert record.action == "-"
    assert record.row == "-"


def test_log_context_injects_and_resets():
    with log_context(action="update", row=5):
        record = _record()
        RowContextFilter().filter(record)
        assert record.action == "update"
        assert record.row == "5"
    assert LOG_ACTION.get() is None
    assert LOG_ROW.get() is None


def test_blank_row_is_not_recorded():
    with log_context(action="create", row=""):
        assert LOG_ROW.get() is None


def test_formatting_uses_expected_fields():
    record = _record()
    RowContextFilter().filter(record)
    formatted = logging.Formatter(LOG_FORMAT).format(record)
    assert "test.logger" in formatted
    assert "hello" in formatted
    assert "|" in formatted


def test_resolve_level_accepts_names_in_any_case():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("verbose")


def test_configure_logging_writes_context_to_file(tmp_path, restore_root):
    log_file = tmp_path / "logs" / "app.log"
    configure_logging(log_file=str(log_file), level="debug", force=True)
    assert restore_root.level == logging.DEBUG
    with log_context(action="delete", row=7):
        logging.getLogger("sheetline.test").info("removed")
    for handler in restore_root.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "| delete | 7 | removed" in text


def test_console_output_uses_rich_handler(tmp_path, restore_root):
    configure_logging(log_file=str(tmp_path / "app.log"), enable_console=True, force=True)
    assert any(isinstance(h, RichHandler) for h in restore_root.handlers)
