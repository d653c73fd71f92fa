# deposits.py
# Waste-dump map: locations, reverse geocoding and route planning.
import logging

from flask import Blueprint, jsonify, request

import fallbacks
from auth import request_payload
from geo import GeoError, Waypoint, check_coordinates, get_geo

_LOGGER = logging.getLogger(__name__)

deposits_bp = Blueprint("deposits", __name__)


class RouteRequestError(ValueError):
    pass


def _dump_index() -> dict:
    return {d["id"]: d for d in fallbacks.waste_dumps()}


def resolve_route(origin: dict | None, destination_id: str | None, stop_ids) -> tuple:
    """
    Turn a route request into (origin, destination, stops) waypoints.
    Stops keep the order the user added them in.
    """
    if not isinstance(origin, dict) or not origin:
        raise RouteRequestError("User location not available")
    try:
        lat, lon = check_coordinates(origin.get("latitude"), origin.get("longitude"))
    except GeoError:
        raise RouteRequestError("User location not available")

    dumps = _dump_index()
    dest = dumps.get(str(destination_id)) if destination_id is not None else None
    if dest is None:
        raise RouteRequestError("Selected waste dump not found")

    stops, seen = [], set()
    for sid in stop_ids or []:
        sid = str(sid)
        if sid == dest["id"]:
            raise RouteRequestError("Cannot add final destination as intermediate stop")
        if sid in seen:
            raise RouteRequestError("This location is already added as a stop")
        dump = dumps.get(sid)
        if dump is None:
            raise RouteRequestError("Waste dump not found")
        seen.add(sid)
        stops.append(Waypoint(dump["latitude"], dump["longitude"], dump["id"], dump["name"]))

    return (
        Waypoint(lat, lon),
        Waypoint(dest["latitude"], dest["longitude"], dest["id"], dest["name"]),
        stops,
    )


@deposits_bp.route("/api/deposits", methods=["GET"])
def list_deposits():
    status = request.args.get("status")
    dumps = fallbacks.waste_dumps()
    if status in ("full", "empty"):
        dumps = [d for d in dumps if d["status"] == status]
    return jsonify({"ok": True, "deposits": dumps})


@deposits_bp.route("/api/geocode/reverse", methods=["GET"])
def reverse_geocode():
    try:
        lat, lon = check_coordinates(request.args.get("lat"), request.args.get("lon"))
    except GeoError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    try:
        loc = get_geo().reverse_geocode(lat, lon)
    except GeoError as e:
        return jsonify({"ok": False, "error": f"Could not fetch location details. {e}"}), 502
    return jsonify({"ok": True, "location": loc.to_dict()})


@deposits_bp.route("/api/route", methods=["POST"])
def plan_route():
    data = request_payload()
    try:
        origin, dest, stops = resolve_route(data.get("origin"), data.get("destination_id"), data.get("stop_ids"))
    except RouteRequestError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    try:
        route = get_geo().plan_route(origin, dest, stops)
    except GeoError as e:
        _LOGGER.error("Route calculation error: %s", e)
        return jsonify({"ok": False, "error": str(e) or "Failed to calculate route"}), 502

    body = route.to_dict()
    body.update({
        "ok": True,
        "destination": {"id": dest.id, "name": dest.name},
        "stops": [{"id": s.id, "name": s.name, "latitude": s.latitude, "longitude": s.longitude} for s in stops],
    })
    return jsonify(body)


# ---------------- Ola Maps proxies ----------------
@deposits_bp.route("/api/directions", methods=["GET"])
def directions():
    try:
        return jsonify(get_geo().ola_directions(request.args.get("origin"), request.args.get("destination")))
    except GeoError as e:
        _LOGGER.error("Directions fetch failed: %s", e)
        return jsonify({"error": str(e)}), 500


@deposits_bp.route("/api/places/autocomplete", methods=["GET"])
def places_autocomplete():
    try:
        return jsonify(get_geo().ola_autocomplete(request.args.get("input", "")))
    except GeoError as e:
        _LOGGER.error("Autocomplete fetch failed: %s", e)
        return jsonify({"error": str(e)}), 500
