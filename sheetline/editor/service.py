from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from sheetline.store.client import SheetStoreClient, StoreTransportError
from sheetline.store.models import Item, ViewState, row_of
from sheetline.store.rows import DEFAULT_HEADER_ROWS, parse_rows, sample_items
from sheetline.timeline.bounds import calculate_bounds
from sheetline.timeline.layout import sort_items
from sheetline.utils.logging_setup import setup_logger

logger = setup_logger(__name__)


def build_view_state(items: List[Item], source: str = "remote") -> ViewState:
    return ViewState(items=tuple(sort_items(items)), bounds=calculate_bounds(items), source=source)


@dataclass
class TimelineService:
    """
    Load/write cycle around the remote store.

    Every load returns a fresh ViewState; nothing is cached between loads.
    Writes for the same row index are serialized.
    """

    client: SheetStoreClient
    header_rows: int = DEFAULT_HEADER_ROWS
    use_sample_on_error: bool = True
    _in_flight: int = field(default=0, init=False, repr=False)
    _flag_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _row_locks: Dict[int, threading.Lock] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "TimelineService":
        client = SheetStoreClient(config["endpoint"], timeout_sec=config.get("request_timeout_sec"))
        return cls(
            client=client,
            header_rows=int(config.get("header_rows", DEFAULT_HEADER_ROWS)),
            use_sample_on_error=bool(config.get("use_sample_on_error", True)),
        )

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @contextmanager
    def _loading(self) -> Iterator[None]:
        with self._flag_lock:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._flag_lock:
                self._in_flight -= 1

    @contextmanager
    def _row_guard(self, row: Optional[int]) -> Iterator[None]:
        if row is None:
            yield
            return
        with self._flag_lock:
            lock = self._row_locks.setdefault(row, threading.Lock())
        with lock:
            yield

    def load(self) -> ViewState:
        """Fetch, parse and bound the remote rows; StoreError propagates."""
        with self._loading():
            try:
                headers, rows = self.client.read()
            except StoreTransportError as e:
                if not self.use_sample_on_error:
                    raise
                logger.warning(f"Using sample data due to fetch error: {e}")
                return build_view_state(sample_items(), source="sample")

        items = parse_rows(headers, rows, header_rows=self.header_rows)
        logger.debug(f"Parsed items: {[item.to_dict() for item in items]}")
        return build_view_state(items)

    def save(self, fields: Dict[str, Any]) -> str:
        """Create or update, returning the action that was sent."""
        with self._loading(), self._row_guard(row_of(fields)):
            action, _ = self.client.save(fields)
            return action

    def delete(self, row: int) -> None:
        with self._loading(), self._row_guard(row):
            self.client.delete(row)
