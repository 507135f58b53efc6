from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(action)s | %(row)s | %(message)s"
CONSOLE_FORMAT = "[%(action)s row=%(row)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_ACTION: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("log_action", default=None)
LOG_ROW: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("log_row", default=None)


def resolve_level(level: Union[int, str]) -> int:
    """Numeric level for ``level``; names are case-insensitive."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    name = str(level).strip().upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LEVEL_NAMES)}")
    return logging.getLevelName(name)


class RowContextFilter(logging.Filter):
    """Stamps each record with the store action and sheet row being handled."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.action = LOG_ACTION.get() or "-"
        record.row = LOG_ROW.get() or "-"
        return True


@contextmanager
def log_context(action: Optional[str] = None, row: Optional[object] = None) -> Iterator[None]:
    action_token = LOG_ACTION.set(action) if action is not None else None
    row_token = LOG_ROW.set(str(row)) if row is not None and row != "" else None
    try:
        yield
    finally:
        if row_token is not None:
            LOG_ROW.reset(row_token)
        if action_token is not None:
            LOG_ACTION.reset(action_token)


def _clear_root(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)


def configure_logging(
    log_file: str = "logs/sheetline.log",
    level: Union[int, str] = logging.INFO,
    enable_console: bool = False,
    force: bool = False,
) -> logging.Logger:
    """
    Send sheetline logs to ``log_file`` and, when asked, to a rich console handler.

    Runs once per process unless ``force`` is set. Every handler gets its own
    RowContextFilter since root filters skip records from child loggers.
    """
    root = logging.getLogger()
    if getattr(root, "_sheetline_logging_configured", False) and not force:
        return root
    if force:
        _clear_root(root)

    numeric_level = resolve_level(level)
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    handlers = [file_handler]

    if enable_console:
        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(console_handler)

    for handler in handlers:
        handler.addFilter(RowContextFilter())
        root.addHandler(handler)

    root.setLevel(numeric_level)
    logging.captureWarnings(True)
    root._sheetline_logging_configured = True
    return root


def setup_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
