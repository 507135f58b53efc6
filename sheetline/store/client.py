from typing import Any, Dict, List, Optional, Tuple

import requests

from sheetline.utils.logging_setup import log_context, setup_logger

from .models import ROW_FIELD, clean_form, row_of

logger = setup_logger(__name__)


class StoreError(RuntimeError):
    """The store answered with a non-success status."""


class StoreTransportError(RuntimeError):
    """The store could not be reached or answered with something other than JSON."""


class SheetStoreClient:
    def __init__(self, endpoint: str, timeout_sec: Optional[float] = None, session: Optional[requests.Session] = None):
        if not endpoint:
            raise ValueError("endpoint must be non-empty")
        self.endpoint = endpoint
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()

    def read(self) -> Tuple[List[str], List[List[Any]]]:
        with log_context(action="read"):
            envelope = self._request("GET", "read")
            data = envelope.get("data") or {}
            headers = list(data.get("headers") or [])
            rows = list(data.get("rows") or [])
            logger.info(f"Read {len(rows)} rows")
            logger.debug(f"Raw rows: {rows}")
            return headers, rows

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("create", fields)

    def update(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if row_of(fields) is None:
            raise ValueError(f"update requires a non-empty {ROW_FIELD}")
        return self._write("update", fields)

    def save(self, fields: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """Create or update depending on whether ``_row`` is filled in."""
        if row_of(fields) is not None:
            return "update", self.update(fields)
        return "create", self.create(fields)

    def delete(self, row: int) -> Dict[str, Any]:
        return self._write("delete", {ROW_FIELD: row})

    def _write(self, action: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with log_context(action=action, row=fields.get(ROW_FIELD)):
            envelope = self._request("POST", action, data=clean_form(fields))
            logger.info(f"{action} succeeded")
            return envelope

    def _request(self, method: str, action: str, data: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        try:
            resp = self.session.request(
                method,
                self.endpoint,
                params={"action": action},
                data=data,
                timeout=self.timeout_sec,
            )
            envelope = resp.json()
        except requests.RequestException as e:
            raise StoreTransportError(f"{action} request failed: {e}") from e
        except ValueError as e:
            raise StoreTransportError(f"{action} returned a non-JSON body ({resp.status_code})") from e

        if not isinstance(envelope, dict):
            raise StoreTransportError(f"{action} returned an unexpected payload: {envelope!r}")
        if envelope.get("status") != "success":
            message = envelope.get("message") or f"unexpected status {envelope.get('status')!r}"
            logger.error(f"{action} failed: {message}")
            raise StoreError(message)
        return envelope
