from unittest.mock import MagicMock

import pytest
import requests

from sheetline.editor.service import TimelineService
from sheetline.store.client import SheetStoreClient

HEADERS = ["Nation", "Category", "Yr", "Item", "Info", "Link", "Cite"]


class FakeSheet:
    """In-memory stand-in for the sheet web app, driven through session.request."""

    def __init__(self, rows=None):
        self.rows = [list(r) for r in (rows or [])]
        self.calls = []
        self.fail_with = None
        self.read_error = None
        self.offline = False

    def request(self, method, url, params=None, data=None, timeout=None):
        action = params["action"]
        self.calls.append((method, action, dict(data or {})))
        if self.offline:
            raise requests.ConnectionError("CORS rejected")
        if self.read_error and action == "read":
            return self._resp({"status": "error", "message": self.read_error})
        if self.fail_with and action != "read":
            return self._resp({"status": "error", "message": self.fail_with})
        if action == "read":
            return self._resp({"status": "success", "data": {"headers": HEADERS, "rows": self.rows}})
        if action == "create":
            self.rows.append([data.get(h.lower(), "") for h in HEADERS])
        elif action == "update":
            index = int(data["_row"]) - 2
            self.rows[index] = [data.get(h.lower(), "") for h in HEADERS]
        elif action == "delete":
            del self.rows[int(data["_row"]) - 2]
        return self._resp({"status": "success"})

    def actions(self):
        return [action for _, action, _ in self.calls]

    @staticmethod
    def _resp(payload):
        resp = MagicMock()
        resp.status_code = 200
        resp.json.return_value = payload
        return resp


@pytest.fixture
def sheet():
    return FakeSheet(rows=[
        ["Korea", "서체", "1443", "Hunminjeongeum", "Creation of Hangul", "", "Annals"],
        ["China", "기술", "1040", "Bi Sheng", "Movable Type", "", "History"],
        ["Japan", "서체", "1957", "Helvetica", "Not Asian but test", "", "Wiki"],
        ["Korea", "경향", "2000", "Digital Era", "Web fonts", "", "News"],
    ])


@pytest.fixture
def service(sheet):
    session = MagicMock()
    session.request.side_effect = sheet.request
    return TimelineService(client=SheetStoreClient("https://script.example.com/exec", session=session))
