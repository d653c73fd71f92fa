from unittest.mock import MagicMock

import pytest
import requests
from twilio.base.exceptions import TwilioException


@pytest.fixture
def twilio(app):
    app.config["TWILIO_PHONE_NUMBER"] = "+15550001111"
    mock = MagicMock()
    mock.messages.create.return_value.sid = "SM123"
    app.extensions["ecotrack_twilio"] = mock
    return mock


def test_send_sms(client, twilio):
    resp = client.post("/api/send-sms", json={"phone": "+919800000000", "message": "Pickup tomorrow"})

    assert resp.get_json() == {"success": True, "messageSid": "SM123"}
    twilio.messages.create.assert_called_once_with(
        body="Pickup tomorrow", from_="+15550001111", to="+919800000000",
    )


def test_missing_fields(client, twilio):
    assert client.post("/api/send-sms", json={"phone": "+91"}).status_code == 400
    twilio.messages.create.assert_not_called()


def test_twilio_failure(client, twilio):
    twilio.messages.create.side_effect = TwilioException("Unable to create record")
    resp = client.post("/api/send-sms", json={"phone": "+91", "message": "hi"})
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Unable to create record"}


def test_not_configured(client):
    resp = client.post("/api/send-sms", json={"phone": "+91", "message": "hi"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Twilio sender number is not configured"


def test_missing_credentials(app, client):
    app.config["TWILIO_PHONE_NUMBER"] = "+15550001111"
    resp = client.post("/api/send-sms", json={"phone": "+91", "message": "hi"})
    assert resp.get_json()["error"] == "Twilio credentials are not configured"


def test_transport_failure(client, twilio):
    twilio.messages.create.side_effect = requests.exceptions.ConnectionError("conn refused")
    resp = client.post("/api/send-sms", json={"phone": "+91", "message": "hi"})
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "conn refused"}


def test_other_methods_not_allowed(client):
    resp = client.get("/api/send-sms")
    assert resp.status_code == 405
    assert resp.get_json()["message"] == "Method Not Allowed"
