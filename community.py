# community.py
# City leaderboard and user profiles; scores and badges come from the backend as-is.
import logging

from flask import Blueprint, jsonify, request

import fallbacks
from auth import current_identity
from backend import BackendError, get_backend

_LOGGER = logging.getLogger(__name__)

community_bp = Blueprint("community", __name__)


@community_bp.route("/api/cities/leaderboard", methods=["GET"])
def city_leaderboard():
    try:
        limit = min(max(int(request.args.get("limit", 10)), 1), 100)
    except ValueError:
        limit = 10

    error = None
    try:
        data = get_backend().city_leaderboard(limit)
    except BackendError as e:
        if not fallbacks.enabled():
            return jsonify({"ok": False, "error": f"Failed to fetch leaderboard data: {e.message}"}), 502
        error = f"Failed to fetch leaderboard data: {e.message}"
        data = fallbacks.demo_leaderboard()

    cities = sorted(data.get("cities") or [], key=lambda c: c.get("rank") or float("inf"))
    return jsonify({
        "ok": True,
        "cities": cities[:limit],
        "last_updated": data.get("last_updated"),
        "error": error,
    })


def _profile_response(user_id: str):
    try:
        profile = get_backend().user_profile(user_id)
    except BackendError as e:
        _LOGGER.error("Error fetching profile %s: %s", user_id, e)
        return jsonify({"ok": False, "error": "Failed to load profile. Please try again later."}), 502
    return jsonify({"ok": True, "profile": profile})


@community_bp.route("/api/users/<user_id>/profile", methods=["GET"])
def user_profile(user_id):
    return _profile_response(user_id)


@community_bp.route("/api/profile", methods=["GET"])
def my_profile():
    return _profile_response(current_identity().user_id)
