# reports.py
# Waste reporting, validation, tickets and cleanup verification.
import logging

from flask import Blueprint, jsonify, request

import fallbacks
from auth import admin_required, current_identity, request_payload
from backend import BackendError, get_backend
from extensions import db
from geo import GeoError, get_geo
from images import ImageError, lighting_condition, load_upload
from models import REPORT_STATUSES, SavedReport, iso_now

_LOGGER = logging.getLogger(__name__)

reports_bp = Blueprint("reports", __name__)

MAX_PAGE = 100
SORT_FIELDS = ("type", "location", "severity", "status", "requester", "date")


def _int_arg(name: str, default: int, lo: int = 0, hi: int | None = None) -> int:
    try:
        val = int(request.args.get(name, default))
    except (TypeError, ValueError):
        val = default
    val = max(lo, val)
    return min(val, hi) if hi is not None else val


# ---------------- Filtering & sorting ----------------
def _matches(report: dict, severity: str | None, status: str | None, location: str | None) -> bool:
    if severity and (report.get("severity") or "").lower() != severity.lower():
        return False
    if status and (report.get("status") or "") != status:
        return False
    if location and location.lower() not in (report.get("location") or "").lower():
        return False
    return True


def _sort_key(field: str):
    def key(r: dict) -> str:
        if field == "type":
            return (r.get("waste_types") or "").split(",")[0].strip().lower()
        if field == "requester":
            return ((r.get("submitted_by") or {}).get("username") or "").lower()
        if field == "date":
            return r.get("timestamp") or ""
        return str(r.get(field) or "").lower()
    return key


def sort_reports(reports: list, field: str | None, direction: str = "asc") -> list:
    if field not in SORT_FIELDS:
        return list(reports)
    return sorted(reports, key=_sort_key(field), reverse=(direction == "desc"))


def _saved_dicts(severity=None, status=None, location=None) -> list:
    rows = SavedReport.query.order_by(SavedReport.created_at.desc()).all()
    reports = [r.to_dict() for r in rows]
    return [r for r in reports if _matches(r, severity, status, location)]


# ---------------- Validation ----------------
@reports_bp.route("/api/waste/validate", methods=["POST"])
def validate_waste():
    try:
        image = load_upload(request.files.get("image"))
    except ImageError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    description = (request.form.get("description") or "").strip()
    timestamp = request.form.get("timestamp") or iso_now()
    location = (request.form.get("location") or "").strip()
    if not location:
        lat, lon = request.form.get("latitude"), request.form.get("longitude")
        if lat is None or lon is None:
            return jsonify({"ok": False, "error": "Location is required"}), 400
        try:
            location = get_geo().reverse_geocode(lat, lon).place_name
        except GeoError as e:
            _LOGGER.warning("Reverse geocoding failed: %s", e)
            return jsonify({"ok": False, "error": "Could not determine your location name. "
                                                  "Please ensure GPS is enabled and try again."}), 502

    source, notice = "backend", None
    try:
        result = get_backend().validate_waste(image.data, image.filename, location, description, timestamp)
    except BackendError as e:
        if not fallbacks.enabled():
            return jsonify({"ok": False, "error": "Failed to validate waste report. Please try again."}), 502
        _LOGGER.info("Validation backend unavailable (%s); using offline result", e)
        result = fallbacks.offline_validation(location, description, lighting_condition(image.data))
        source, notice = "offline", f"Automatic validation unavailable. {e.message}"

    return jsonify({
        "ok": True,
        "source": source,
        "notice": notice,
        "location": location,
        "description": description,
        "timestamp": timestamp,
        "validation": result,
    })


@reports_bp.route("/api/reports", methods=["POST"])
def save_report():
    data = request_payload()
    validation = data.get("validation")
    location = (data.get("location") or "").strip()
    if not isinstance(validation, dict) or not location:
        return jsonify({"ok": False, "error": "Validation result and location are required"}), 400

    ident = current_identity()
    report = SavedReport.from_validation(
        validation,
        location=location,
        description=data.get("description") or "",
        timestamp=data.get("timestamp") or iso_now(),
        user_id=ident.user_id,
        username=ident.name or "current_user",
    )
    db.session.add(report)
    db.session.commit()
    _LOGGER.info("Saved report %s for %s", report.id, ident.user_id)
    return jsonify({"ok": True, "report": report.to_dict()}), 201


# ---------------- Tickets ----------------
@reports_bp.route("/api/reports", methods=["GET"])
def list_reports():
    skip = _int_arg("skip", 0)
    limit = _int_arg("limit", 10, lo=1, hi=MAX_PAGE)
    severity = request.args.get("severity") or None
    status = request.args.get("status") or None
    location = request.args.get("location") or None
    sort = request.args.get("sort") or None
    direction = "desc" if request.args.get("direction") == "desc" else "asc"

    saved = _saved_dicts(severity, status, location)
    notice, source = None, "backend"
    try:
        page = get_backend().list_reports(skip, limit, severity, status, location)
        known = {r.get("_id") for r in page["results"]}
        extra = [r for r in saved if r["_id"] not in known]
        results = extra + page["results"]
        count = int(page["count"]) + len(extra)
    except BackendError as e:
        if saved:
            results, count = saved[skip:skip + limit], len(saved)
            notice, source = f"Using locally saved reports. {e.message}", "local"
        elif fallbacks.enabled():
            demo = [r for r in fallbacks.demo_reports() if _matches(r, severity, status, location)]
            results, count = demo[skip:skip + limit], len(demo)
            notice, source = f"Using demo data. {e.message}", "demo"
        else:
            return jsonify({"ok": False, "error": "Failed to load waste reports. Please try again."}), 502

    return jsonify({
        "ok": True,
        "results": sort_reports(results, sort, direction),
        "count": count,
        "skip": skip,
        "limit": limit,
        "notice": notice,
        "source": source,
    })


@reports_bp.route("/api/reports/recent", methods=["GET"])
def recent_reports():
    limit = _int_arg("limit", 3, lo=1, hi=20)
    try:
        results = get_backend().list_reports(0, limit)["results"]
    except BackendError:
        results = _saved_dicts()[:limit]
    return jsonify({"ok": True, "results": results})


@reports_bp.route("/api/reports/<report_id>", methods=["GET"])
def get_report(report_id):
    saved = db.session.get(SavedReport, report_id)
    if saved is not None:
        return jsonify(saved.to_dict())
    try:
        return jsonify(get_backend().get_report(report_id))
    except BackendError as e:
        if e.status == 404:
            return jsonify({"ok": False, "error": "Report not found"}), 404
        return jsonify({"ok": False, "error": e.message}), 502


@reports_bp.route("/api/reports/<report_id>/status", methods=["POST"])
@admin_required
def update_report_status(report_id):
    data = request_payload()
    status = data.get("status") or "in_progress"
    if status not in REPORT_STATUSES:
        return jsonify({"ok": False, "error": f"Invalid status '{status}'"}), 400
    report = db.session.get(SavedReport, report_id)
    if report is None:
        return jsonify({"ok": False, "error": "Report not found"}), 404
    report.status = status
    db.session.commit()
    return jsonify({"ok": True, "report": report.to_dict()})


# ---------------- Cleanup verification ----------------
@reports_bp.route("/api/reports/<report_id>/verify-cleanup", methods=["POST"])
def verify_cleanup(report_id):
    try:
        image = load_upload(request.files.get("after_image"), "after-cleanup.jpg")
    except ImageError:
        return jsonify({"ok": False, "error": "Please upload an after-cleanup image"}), 400

    try:
        data = get_backend().verify_cleanup(report_id, image.data, image.filename)
    except BackendError as e:
        return jsonify({"ok": False, "error": f"Failed to verify cleanup. {e.message}"}), 502

    return jsonify({
        "ok": True,
        "status": data.get("status", "unverified"),
        "is_same_location": bool(data.get("is_same_location")),
        "is_clean": bool(data.get("is_clean")),
        "improvement_percentage": data.get("improvement_percentage", 0),
    })


# ---------------- Recycling analyzer ----------------
@reports_bp.route("/api/waste/analyze", methods=["POST"])
def analyze_waste():
    try:
        image = load_upload(request.files.get("image"))
    except ImageError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    try:
        result = get_backend().analyze_waste(image.data, image.filename)
    except BackendError:
        return jsonify({"ok": False, "error": "Failed to analyze waste. Please try again."}), 502
    return jsonify({"ok": True, "analysis": result})
