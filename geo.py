# geo.py
# Nominatim reverse geocoding, OSRM routing and the Ola Maps proxies.
import logging
from dataclasses import dataclass, field

import requests
from flask import current_app

_LOGGER = logging.getLogger(__name__)

OLA_DEFAULT_ORIGIN = "12.9352,77.6245"
OLA_DEFAULT_DESTINATION = "12.9766,77.5993"


class GeoError(Exception):
    pass


@dataclass
class Location:
    latitude: float
    longitude: float
    place_name: str = "Unknown Location"

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "placeName": self.place_name}


@dataclass
class Waypoint:
    latitude: float
    longitude: float
    id: str | None = None
    name: str | None = None

    def osrm(self) -> str:
        return f"{self.longitude},{self.latitude}"


@dataclass
class Route:
    summary: str
    distance_m: float
    duration_s: float
    coordinates: list = field(default_factory=list)  # [lat, lon] pairs

    @property
    def distance(self) -> str:
        return format_distance(self.distance_m)

    @property
    def duration(self) -> str:
        return format_duration(self.duration_s)

    def bounds(self) -> list | None:
        if not self.coordinates:
            return None
        lats = [c[0] for c in self.coordinates]
        lons = [c[1] for c in self.coordinates]
        return [[min(lats), min(lons)], [max(lats), max(lons)]]

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "distance": self.distance,
            "duration": self.duration,
            "coordinates": self.coordinates,
            "bounds": self.bounds(),
        }


def check_coordinates(lat, lon) -> tuple[float, float]:
    try:
        lat, lon = float(lat), float(lon)
    except (TypeError, ValueError):
        raise GeoError("Latitude and longitude must be numbers")
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise GeoError("Coordinates out of range")
    return lat, lon


def format_distance(meters: float) -> str:
    if meters > 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"


def format_duration(seconds: float) -> str:
    if seconds > 3600:
        return f"{int(seconds // 3600)} hr {int((seconds % 3600) // 60)} min"
    if seconds > 60:
        return f"{int(seconds // 60)} min"
    return f"{round(seconds)} sec"


def route_summary(stop_count: int) -> str:
    if stop_count <= 0:
        return "Fastest route"
    return f"Fastest route with {stop_count} additional stop{'s' if stop_count > 1 else ''}"


class GeoClient:

    def __init__(self, nominatim_url: str, osrm_url: str, olamaps_url: str = "",
                 olamaps_key: str = "", user_agent: str = "ecotrack-portal",
                 timeout: float = 10.0, session=None):
        self.nominatim_url = nominatim_url.rstrip("/")
        self.osrm_url = osrm_url.rstrip("/")
        self.olamaps_url = olamaps_url.rstrip("/")
        self.olamaps_key = olamaps_key
        self.timeout = timeout
        self.session = session or requests.Session()
        # Nominatim's usage policy requires an identifying agent
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})

    def _get_json(self, url: str, params: dict | None = None, service: str = "geo"):
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            _LOGGER.warning("%s request failed: %r", service, exc)
            raise GeoError(f"{service} unreachable") from exc
        if not resp.ok:
            _LOGGER.error("%s error (%s): %s", service, resp.status_code, resp.text[:200])
            raise GeoError(f"{service} API returned status {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise GeoError(f"{service} returned invalid JSON") from exc

    # ---------------- Nominatim ----------------
    def reverse_geocode(self, lat, lon, zoom: int = 18) -> Location:
        lat, lon = check_coordinates(lat, lon)
        data = self._get_json(
            f"{self.nominatim_url}/reverse",
            params={"format": "json", "lat": lat, "lon": lon, "zoom": zoom, "addressdetails": 1},
            service="Nominatim",
        )
        return Location(lat, lon, (data or {}).get("display_name") or "Unknown Location")

    # ---------------- OSRM ----------------
    def plan_route(self, origin: Waypoint, destination: Waypoint, stops=()) -> Route:
        """
        Route from origin through the stops, in the order given, to destination.
        OSRM returns [lon, lat]; the route coordinates come back as [lat, lon].
        """
        waypoints = ";".join(w.osrm() for w in [origin, *stops, destination])
        data = self._get_json(
            f"{self.osrm_url}/route/v1/driving/{waypoints}",
            params={"overview": "full", "geometries": "geojson"},
            service="OSRM",
        )
        if data.get("code") != "Ok" or not data.get("routes"):
            raise GeoError("No route found")

        best = data["routes"][0]
        coords = [[c[1], c[0]] for c in best.get("geometry", {}).get("coordinates", [])]
        return Route(
            summary=route_summary(len(stops)),
            distance_m=float(best.get("distance") or 0),
            duration_s=float(best.get("duration") or 0),
            coordinates=coords,
        )

    # ---------------- Ola Maps ----------------
    def _ola_key(self) -> str:
        if not self.olamaps_key:
            raise GeoError("API key is missing")
        return self.olamaps_key

    def ola_directions(self, origin: str | None = None, destination: str | None = None) -> dict:
        key = self._ola_key()
        return self._get_json(
            f"{self.olamaps_url}/routing/v1/directions",
            params={
                "origin": origin or OLA_DEFAULT_ORIGIN,
                "destination": destination or OLA_DEFAULT_DESTINATION,
                "api_key": key,
            },
            service="Ola Maps",
        )

    def ola_autocomplete(self, text: str) -> dict:
        key = self._ola_key()
        if not text or not text.strip():
            return {"predictions": []}
        return self._get_json(
            f"{self.olamaps_url}/places/v1/autocomplete",
            params={"input": text.strip(), "api_key": key},
            service="Ola Maps",
        )


def get_geo() -> GeoClient:
    client = current_app.extensions.get("ecotrack_geo")
    if client is None:
        cfg = current_app.config
        client = GeoClient(
            cfg["NOMINATIM_URL"], cfg["OSRM_URL"], cfg["OLAMAPS_URL"], cfg["OLAMAPS_API_KEY"],
            user_agent=cfg["GEO_USER_AGENT"], timeout=cfg["GEO_TIMEOUT"],
        )
        current_app.extensions["ecotrack_geo"] = client
    return client
