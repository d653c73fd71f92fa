from unittest.mock import MagicMock

import pytest
import requests

from backend import BackendClient, BackendError


def _response(status=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return BackendClient("http://backend.test/", timeout=3, session=session)


def test_list_reports_sends_only_given_filters(client, session):
    session.request.return_value = _response(body={"results": [{"_id": "a"}]})

    page = client.list_reports(skip=4, limit=2, severity="High")

    session.request.assert_called_once_with(
        "GET", "http://backend.test/api/waste/reports",
        timeout=3, params={"skip": 4, "limit": 2, "severity": "High"},
    )
    assert page["count"] == 1


def test_list_reports_rejects_unexpected_shape(client, session):
    session.request.return_value = _response(body=[{"_id": "a"}])
    with pytest.raises(BackendError):
        client.list_reports()


def test_error_status_prefers_detail(client, session):
    session.request.return_value = _response(401, {"detail": "Invalid credentials"})

    with pytest.raises(BackendError) as err:
        client.authority_login("admin", "nope")

    assert err.value.status == 401
    assert err.value.detail == "Invalid credentials"
    assert err.value.message == "Invalid credentials"


def test_error_status_without_json_body(client, session):
    session.request.return_value = _response(503, ValueError("no json"))

    with pytest.raises(BackendError) as err:
        client.get_wallet("u1")

    assert err.value.message == "API unavailable (503)"
    assert err.value.detail is None


def test_network_error_is_wrapped(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(BackendError) as err:
        client.list_pickups()

    assert err.value.message == "Network error"
    assert err.value.status is None


def test_invalid_json_on_success(client, session):
    session.request.return_value = _response(200, ValueError("html"), text="<html>")
    with pytest.raises(BackendError, match="invalid response"):
        client.list_benefits()


def test_validate_waste_is_multipart(client, session):
    session.request.return_value = _response(body={"is_valid": True})

    client.validate_waste(b"jpeg", "w.jpg", "Pune", "bags", "2025-01-01T00:00:00Z")

    _, kwargs = session.request.call_args
    assert kwargs["files"] == {"image": ("w.jpg", b"jpeg", "image/jpeg")}
    assert kwargs["data"]["location"] == "Pune"


def test_register_forces_authority_role(client, session):
    session.request.return_value = _response(body={"ok": True})

    client.authority_register("ops", "ops@example.org", "pw")

    _, kwargs = session.request.call_args
    assert kwargs["json"]["role"] == "authority"


def test_pickup_status_path(client, session):
    session.request.return_value = _response(body={})
    client.update_pickup_status("pickup_1", "completed")
    args, _ = session.request.call_args
    assert args == ("PUT", "http://backend.test/api/pickup/pickup_1/status/completed")


def test_google_login_url(client):
    assert client.google_login_url() == "http://backend.test/auth/google/login"


def test_ping(client, session):
    session.get.return_value = _response(404)
    assert client.ping() is True
    session.get.return_value = _response(503)
    assert client.ping() is False
    session.get.side_effect = requests.exceptions.Timeout()
    assert client.ping() is False
