# wallet.py
# Digital wallet: balances and benefit redemption.
import logging

from flask import Blueprint, current_app, jsonify

import fallbacks
from auth import request_payload
from backend import BackendError, get_backend
from models import iso_now

_LOGGER = logging.getLogger(__name__)

wallet_bp = Blueprint("wallet", __name__)

MOCK_NOTICE = "API unavailable. Using mock data for demonstration."


def _load_wallet(user_id: str) -> tuple[dict, str | None]:
    """Wallet for user_id plus an optional notice; raises BackendError when nothing is available."""
    try:
        return get_backend().get_wallet(user_id), None
    except BackendError:
        if fallbacks.enabled() and user_id == current_app.config["DEMO_WALLET_USER_ID"]:
            return fallbacks.demo_wallet(user_id), MOCK_NOTICE
        raise


def _load_benefits() -> list:
    try:
        return get_backend().list_benefits()
    except BackendError as e:
        _LOGGER.warning("Failed to fetch benefits: %s", e)
        return fallbacks.demo_benefits()


def apply_redemption(wallet: dict, coins: int) -> dict:
    balance = wallet.get("balance") or 0
    spent = wallet.get("total_spent") or 0
    return {**wallet, "balance": balance - coins, "total_spent": spent + coins, "updated_at": iso_now()}


# registered before /<user_id> so "benefits" is never taken for an id
@wallet_bp.route("/api/wallet/benefits", methods=["GET"])
def list_benefits():
    return jsonify({"ok": True, "benefits": _load_benefits()})


@wallet_bp.route("/api/wallet/<user_id>", methods=["GET"])
def get_wallet(user_id):
    user_id = user_id.strip()
    if not user_id:
        return jsonify({"ok": False, "error": "Please enter a valid user ID"}), 400
    try:
        wallet, notice = _load_wallet(user_id)
    except BackendError:
        return jsonify({"ok": False, "error": "Failed to load wallet data. "
                                              "Please check the ID and try again."}), 502
    return jsonify({"ok": True, "wallet": wallet, "notice": notice})


@wallet_bp.route("/api/wallet/redeem", methods=["POST"])
def redeem():
    data = request_payload()
    user_id = (data.get("user_id") or "").strip()
    benefit_id = (data.get("benefit_id") or "").strip()
    if not user_id or not benefit_id:
        return jsonify({"ok": False, "error": "user_id and benefit_id are required"}), 400

    try:
        wallet, _ = _load_wallet(user_id)
    except BackendError:
        return jsonify({"ok": False, "error": "Failed to load wallet data. "
                                              "Please check the ID and try again."}), 502

    benefit = next((b for b in _load_benefits() if str(b.get("id")) == benefit_id), None)
    if benefit is None:
        return jsonify({"ok": False, "error": "Benefit not found"}), 404

    coins = int(benefit.get("coins_required") or 0)
    if (wallet.get("balance") or 0) < coins:
        return jsonify({"ok": False, "error": "You don't have enough coins to redeem this benefit"}), 400

    simulated = False
    try:
        get_backend().redeem_benefit(wallet.get("user_id") or user_id, benefit_id)
    except BackendError as e:
        if not fallbacks.enabled():
            return jsonify({"ok": False, "error": "Failed to redeem benefit. Please try again."}), 502
        _LOGGER.info("Redeem backend unavailable (%s); applying locally for demo", e)
        simulated = True

    return jsonify({
        "ok": True,
        "simulated": simulated,
        "benefit": benefit,
        "wallet": apply_redemption(wallet, coins),
    })
