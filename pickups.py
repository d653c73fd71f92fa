# pickups.py
import logging
from datetime import date, datetime, timezone

from flask import Blueprint, jsonify, request

import fallbacks
from auth import admin_required, current_identity, request_payload
from backend import BackendError, get_backend
from extensions import db
from models import PickupRequest, iso_now

_LOGGER = logging.getLogger(__name__)

pickups_bp = Blueprint("pickups", __name__)

PICKUP_STATUSES = ("pending", "in_progress", "completed", "cancelled")
DATE_FIELDS = ("pickup_date", "created_at", "updated_at")
PAGE_SIZE = 10


# ---------------- helpers ----------------
def _ts(raw: str | None) -> float:
    if not raw:
        return 0.0
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def filter_pickups(pickups: list, status: str = "all", query: str = "") -> list:
    q = (query or "").strip().lower()
    out = []
    for p in pickups:
        if status and status != "all" and p.get("status") != status:
            continue
        if q:
            haystack = [p.get(k) or "" for k in ("description", "location", "id", "user_id")]
            if not any(q in str(h).lower() for h in haystack):
                continue
        out.append(p)
    return out


def sort_pickups(pickups: list, field: str = "pickup_date", direction: str = "asc") -> list:
    if field in DATE_FIELDS:
        key = lambda p: _ts(p.get(field))
    else:
        key = lambda p: str(p.get(field) or "").lower()
    return sorted(pickups, key=key, reverse=(direction == "desc"))


def paginate(items: list, page: int, size: int = PAGE_SIZE) -> tuple[list, int, int]:
    last_page = max(1, -(-len(items) // size))
    page = min(max(1, page), last_page)
    return items[(page - 1) * size: page * size], page, last_page


# ---------------- Citizen / admin pickups ----------------
@pickups_bp.route("/api/pickups", methods=["GET"])
def list_pickups():
    ident = current_identity()
    error = None
    try:
        backend = get_backend()
        pickups = backend.list_pickups() if ident.is_admin else backend.list_user_pickups(ident.user_id)
    except BackendError as e:
        if not fallbacks.enabled():
            return jsonify({"ok": False, "error": f"Failed to fetch pickups: {e.message}"}), 502
        error = f"Failed to fetch pickups: {e.message}"
        pickups = fallbacks.demo_pickups(ident.is_admin)

    try:
        page = int(request.args.get("page", 1))
    except ValueError:
        page = 1
    rows = filter_pickups(pickups or [], request.args.get("status", "all"), request.args.get("q", ""))
    rows = sort_pickups(rows, request.args.get("sort", "pickup_date"),
                        "desc" if request.args.get("direction") == "desc" else "asc")
    items, page, last_page = paginate(rows, page)
    return jsonify({
        "ok": True,
        "pickups": items,
        "total": len(rows),
        "page": page,
        "last_page": last_page,
        "is_admin": ident.is_admin,
        "error": error,
    })


@pickups_bp.route("/api/pickups", methods=["POST"])
def schedule_pickup():
    ident = current_identity()
    if ident.is_admin:
        return jsonify({"ok": False, "error": "Administrators cannot schedule pickups. "
                                              "Please use a regular user account."}), 403

    data = request_payload()
    description = (data.get("description") or "").strip()
    location = (data.get("location") or "").strip()
    pickup_date = (data.get("pickup_date") or "").strip()
    pickup_time = (data.get("pickup_time") or "10:00").strip()
    if not description or not location or not pickup_date:
        return jsonify({"ok": False, "error": "Missing fields"}), 400

    try:
        when = datetime.strptime(f"{pickup_date}T{pickup_time}", "%Y-%m-%dT%H:%M")
    except ValueError:
        return jsonify({"ok": False, "error": "Invalid pickup date or time"}), 400
    if when.date() <= date.today():
        return jsonify({"ok": False, "error": "Pickup date must be after today"}), 400

    now = iso_now()
    payload = {
        "id": f"pickup_{int(datetime.now(timezone.utc).timestamp() * 1000)}",
        "user_id": ident.user_id,
        "description": description,
        "location": location,
        "pickup_date": when.isoformat(),
        "status": "pending",
        "created_at": now,
        "updated_at": now,
        "notes": data.get("notes") or "",
    }

    try:
        created = get_backend().schedule_pickup(payload)
    except BackendError as e:
        if not fallbacks.enabled():
            return jsonify({"ok": False, "error": f"Failed to schedule pickup: {e.message}"}), 502
        _LOGGER.info("Pickup backend unavailable; simulating schedule of %s", payload["id"])
        return jsonify({"ok": True, "simulated": True, "pickup": payload, "error": e.message}), 201

    return jsonify({"ok": True, "simulated": False, "pickup": created or payload}), 201


@pickups_bp.route("/api/pickups/<pickup_id>/status/<status>", methods=["PUT"])
@admin_required
def update_pickup_status(pickup_id, status):
    if status not in PICKUP_STATUSES:
        return jsonify({"ok": False, "error": f"Invalid status '{status}'"}), 400
    try:
        get_backend().update_pickup_status(pickup_id, status)
    except BackendError as e:
        return jsonify({"ok": False, "error": f"Failed to update status: {e.message}"}), 502
    return jsonify({"ok": True, "id": pickup_id, "status": status, "updated_at": iso_now()})


# ---------------- Authority pickup board ----------------
def _seed_requests() -> None:
    if PickupRequest.query.first() is not None:
        return
    for item in fallbacks.demo_pickup_requests():
        db.session.add(PickupRequest(**item))
    db.session.commit()


@pickups_bp.route("/api/pickup-requests", methods=["GET"])
@admin_required
def list_pickup_requests():
    _seed_requests()
    rows = PickupRequest.query.order_by(PickupRequest.id).all()
    return jsonify({"ok": True, "requests": [r.to_dict() for r in rows]})


@pickups_bp.route("/api/pickup-requests/<request_id>/schedule", methods=["POST"])
@admin_required
def schedule_pickup_request(request_id):
    data = request_payload()
    when_date = (data.get("date") or "").strip()
    when_time = (data.get("time") or "").strip()
    if not when_date or not when_time:
        return jsonify({"ok": False, "error": "Please select both date and time"}), 400

    row = db.session.get(PickupRequest, request_id)
    if row is None:
        return jsonify({"ok": False, "error": "Pickup request not found"}), 404
    row.date, row.time = when_date, when_time
    row.status = "scheduled"
    row.verification_status = "pending"
    db.session.commit()
    return jsonify({"ok": True, "request": row.to_dict()})


@pickups_bp.route("/api/pickup-requests/<request_id>/verify", methods=["POST"])
@admin_required
def verify_pickup_request(request_id):
    row = db.session.get(PickupRequest, request_id)
    if row is None:
        return jsonify({"ok": False, "error": "Pickup request not found"}), 404
    row.status = "verified"
    row.verification_status = "verified"
    db.session.commit()
    return jsonify({"ok": True, "request": row.to_dict()})
