from unittest.mock import MagicMock, patch

import pytest
import requests

from sheetline.store.client import SheetStoreClient, StoreError, StoreTransportError

ENDPOINT = "https://script.example.com/exec"


def _mock_resp(payload, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def _client(payload):
    session = MagicMock()
    session.request.return_value = _mock_resp(payload)
    return SheetStoreClient(ENDPOINT, session=session), session


def test_read_returns_headers_and_rows():
    client, session = _client({
        "status": "success",
        "data": {"headers": ["Nation", "Yr"], "rows": [["Korea", "1443"]]},
    })
    headers, rows = client.read()
    assert headers == ["Nation", "Yr"]
    assert rows == [["Korea", "1443"]]
    session.request.assert_called_once_with(
        "GET", ENDPOINT, params={"action": "read"}, data=None, timeout=None
    )


def test_read_error_status_raises_store_error():
    client, _ = _client({"status": "error", "message": "Sheet not found"})
    with pytest.raises(StoreError, match="Sheet not found"):
        client.read()


def test_unknown_status_is_an_error():
    client, _ = _client({"status": "pending"})
    with pytest.raises(StoreError):
        client.read()


def test_connection_failure_is_transport_error():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("blocked")
    client = SheetStoreClient(ENDPOINT, session=session)
    with pytest.raises(StoreTransportError):
        client.read()


def test_non_json_body_is_transport_error():
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = 200
    resp.json.side_effect = ValueError("not json")
    session.request.return_value = resp
    client = SheetStoreClient(ENDPOINT, session=session)
    with pytest.raises(StoreTransportError):
        client.read()


def test_save_with_row_sends_update():
    client, session = _client({"status": "success"})
    action, _ = client.save({"_row": "5", "item": "Hangul", "yr": 1443})
    assert action == "update"
    args, kwargs = session.request.call_args
    assert args == ("POST", ENDPOINT)
    assert kwargs["params"] == {"action": "update"}
    assert kwargs["data"] == {"_row": "5", "item": "Hangul", "yr": "1443"}


def test_save_with_blank_row_sends_create():
    client, session = _client({"status": "success"})
    action, _ = client.save({"_row": "", "item": "Hangul"})
    assert action == "create"
    assert session.request.call_args.kwargs["params"] == {"action": "create"}


def test_update_without_row_is_rejected():
    client, session = _client({"status": "success"})
    with pytest.raises(ValueError):
        client.update({"item": "Hangul"})
    session.request.assert_not_called()


def test_delete_posts_row_only():
    client, session = _client({"status": "success"})
    client.delete(5)
    kwargs = session.request.call_args.kwargs
    assert kwargs["params"] == {"action": "delete"}
    assert kwargs["data"] == {"_row": "5"}


def test_timeout_is_passed_through():
    session = MagicMock()
    session.request.return_value = _mock_resp({"status": "success", "data": {"headers": [], "rows": []}})
    client = SheetStoreClient(ENDPOINT, timeout_sec=3.5, session=session)
    client.read()
    assert session.request.call_args.kwargs["timeout"] == 3.5


def test_empty_endpoint_rejected():
    with pytest.raises(ValueError):
        SheetStoreClient("")


def test_create_posts_fields_with_create_action():
    client, session = _client({"status": "success"})
    client.create({"nation": "Korea", "yr": 1443, "item": "Hangul"})
    kwargs = session.request.call_args.kwargs
    assert kwargs["params"] == {"action": "create"}
    assert kwargs["data"] == {"nation": "Korea", "yr": "1443", "item": "Hangul"}


def test_save_delegates_to_create_and_update():
    client, _ = _client({"status": "success"})
    with patch.object(client, "create") as create, patch.object(client, "update") as update:
        client.save({"_row": " ", "item": "a"})
        client.save({"_row": "4", "item": "b"})
    create.assert_called_once_with({"_row": " ", "item": "a"})
    update.assert_called_once_with({"_row": "4", "item": "b"})
