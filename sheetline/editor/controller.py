from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from sheetline.store.client import StoreError, StoreTransportError
from sheetline.store.models import ITEM_FIELDS, ROW_FIELD, Item, ViewState
from sheetline.timeline.layout import RenderDescriptor, render
from sheetline.utils.logging_setup import log_context, setup_logger

from .service import TimelineService

logger = setup_logger(__name__)

CLOSED = "closed"
ADD = "add"
EDIT = "edit"

DELETE_PROMPT = "Are you sure you want to delete this item?"
LOAD_FAILED = "Failed to load data. Please check console."
SAVE_FAILED = "Failed to save. Check console."
DELETE_FAILED = "Failed to delete."


def empty_form() -> Dict[str, str]:
    form = {name: "" for name in ITEM_FIELDS}
    form[ROW_FIELD] = ""
    return form


class EditorController:
    """
    Modal/form state machine for adding, editing and deleting timeline items.

    ``alert`` shows a blocking message to the user and ``confirm`` asks a
    yes/no question; presentation layers supply both. Without an ``alert``
    callback messages are queued and handed out by ``pop_alerts()``.
    """

    def __init__(
        self,
        service: TimelineService,
        viewport_width: float = 1280,
        alert: Optional[Callable[[str], None]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.service = service
        self.viewport_width = viewport_width
        self.view: Optional[ViewState] = None
        self.mode = CLOSED
        self.form = empty_form()
        self.item: Optional[Item] = None
        self._alerts: List[str] = []
        self._alert = alert or self._alerts.append
        self._confirm = confirm or (lambda message: False)

    @property
    def title(self) -> str:
        return "Edit Item" if self.mode == EDIT else "Add New Item"

    @property
    def delete_visible(self) -> bool:
        return self.mode == EDIT

    @property
    def loading(self) -> bool:
        return self.service.loading

    def pop_alerts(self) -> List[str]:
        alerts = list(self._alerts)
        self._alerts.clear()
        return alerts

    def alert(self, message: str) -> None:
        self._alert(message)

    def reload(self) -> Optional[ViewState]:
        """Replace the view with a fresh load; on failure keep the stale one."""
        with log_context(action="read"):
            try:
                view = self.service.load()
            except (StoreError, StoreTransportError) as e:
                logger.error(f"Error loading data: {e}")
                self.alert(LOAD_FAILED)
                return None
        self.view = view
        return view

    def descriptors(self, viewport_width: Optional[float] = None) -> List[RenderDescriptor]:
        if self.view is None:
            return []
        if viewport_width is not None:
            self.viewport_width = viewport_width
        return render(self.view.items, self.view.bounds, self.viewport_width)

    def open(self, item: Optional[Item] = None) -> None:
        if item is None:
            self.mode = ADD
            self.item = None
            self.form = empty_form()
        else:
            self.mode = EDIT
            self.item = item
            self.form = item.form_values()

    def open_row(self, row: int) -> Item:
        item = self.view.find(row) if self.view else None
        if item is None:
            raise KeyError(f"No item at row {row}")
        self.open(item)
        return item

    def close(self) -> None:
        self.mode = CLOSED

    def click_backdrop(self, on_backdrop: bool) -> None:
        # Clicks inside the form bubble up to the backdrop; only direct hits close.
        if on_backdrop:
            self.close()

    def submit(self, form: Dict[str, Any], reload: bool = True) -> bool:
        """Send the form as create or update, then reload unless told not to; True on success."""
        data = {key: "" if value is None else value for key, value in form.items()}
        action = "update" if str(data.get(ROW_FIELD, "")).strip() else "create"
        self.close()
        with log_context(action=action, row=data.get(ROW_FIELD)):
            try:
                self.service.save(data)
            except StoreError as e:
                self.alert(f"Error: {e}")
                return False
            except Exception:
                logger.exception("Save error")
                self.alert(SAVE_FAILED)
                return False
        if reload:
            self.reload()
        return True

    def delete(
        self,
        row: Optional[int] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        reload: bool = True,
    ) -> bool:
        """Delete ``row`` (default: the item being edited) after confirmation."""
        if row is None:
            if self.mode != EDIT or self.item is None:
                raise ValueError("delete needs a row or an item open for editing")
            row = self.item.row
        if not (confirm or self._confirm)(DELETE_PROMPT):
            return False

        self.close()
        with log_context(action="delete", row=row):
            try:
                self.service.delete(row)
            except StoreError as e:
                self.alert(f"Error: {e}")
                return False
            except Exception:
                logger.exception("Delete error")
                self.alert(DELETE_FAILED)
                return False
        if reload:
            self.reload()
        return True
