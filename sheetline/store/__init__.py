from .client import SheetStoreClient, StoreError, StoreTransportError
from .models import Bounds, Item, ViewState
from .rows import parse_rows

__all__ = ["SheetStoreClient", "StoreError", "StoreTransportError", "Bounds", "Item", "ViewState", "parse_rows"]
