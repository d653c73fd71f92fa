# sms.py
import logging

import requests
from flask import Blueprint, current_app, jsonify
from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from auth import request_payload

_LOGGER = logging.getLogger(__name__)

sms_bp = Blueprint("sms", __name__)


class SmsError(Exception):
    pass


def _client() -> Client:
    client = current_app.extensions.get("ecotrack_twilio")
    if client is None:
        sid = current_app.config["TWILIO_ACCOUNT_SID"]
        token = current_app.config["TWILIO_AUTH_TOKEN"]
        if not sid or not token:
            raise SmsError("Twilio credentials are not configured")
        client = Client(sid, token)
        current_app.extensions["ecotrack_twilio"] = client
    return client


def send_sms(phone: str, message: str) -> str:
    """Send one SMS and return the Twilio message SID."""
    sender = current_app.config["TWILIO_PHONE_NUMBER"]
    if not sender:
        raise SmsError("Twilio sender number is not configured")
    try:
        msg = _client().messages.create(body=message, from_=sender, to=phone)
    except (TwilioException, requests.exceptions.RequestException) as e:
        raise SmsError(str(e) or "Failed to send SMS") from e
    _LOGGER.info("SMS %s queued for %s", msg.sid, phone)
    return msg.sid


@sms_bp.route("/api/send-sms", methods=["POST"])
def api_send_sms():
    data = request_payload()
    phone = (data.get("phone") or "").strip()
    message = (data.get("message") or "").strip()
    if not phone or not message:
        return jsonify({"success": False, "error": "phone and message are required"}), 400
    try:
        sid = send_sms(phone, message)
    except SmsError as e:
        _LOGGER.error("SMS to %s failed: %s", phone, e)
        return jsonify({"success": False, "error": str(e)}), 500
    return jsonify({"success": True, "messageSid": sid})
