# backend.py
"""
Thin client for the EcoTrack REST backend.

Every call either returns decoded JSON or raises BackendError; callers decide
whether a failure falls back to demo data or surfaces as a 502.
"""
import logging

import requests
from flask import current_app

_LOGGER = logging.getLogger(__name__)


class BackendError(Exception):
    def __init__(self, message: str, status: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.detail = detail


class BackendClient:

    def __init__(self, base_url: str, timeout: float = 10.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------------- plumbing ----------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs):
        url = self._url(path)
        _LOGGER.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            _LOGGER.warning("Backend unreachable for %s %s: %r", method, path, exc)
            raise BackendError("Network error") from exc

        if not resp.ok:
            detail = None
            try:
                body = resp.json()
                if isinstance(body, dict):
                    detail = body.get("detail") or body.get("error")
            except ValueError:
                pass
            _LOGGER.warning("Backend %s %s responded with status %s", method, path, resp.status_code)
            raise BackendError(detail or f"API unavailable ({resp.status_code})", resp.status_code, detail)

        try:
            return resp.json()
        except ValueError as exc:
            _LOGGER.error("Invalid JSON from %s %s: %r", method, path, resp.text[:100])
            raise BackendError("The API returned an invalid response", resp.status_code) from exc

    @staticmethod
    def _file(field: str, data: bytes, filename: str, mimetype: str = "image/jpeg") -> dict:
        return {field: (filename, data, mimetype)}

    # ---------------- waste reports ----------------
    def list_reports(self, skip: int = 0, limit: int = 10, severity: str | None = None,
                     status: str | None = None, location: str | None = None) -> dict:
        params = {"skip": skip, "limit": limit}
        if severity: params["severity"] = severity
        if status: params["status"] = status
        if location: params["location"] = location
        data = self._request("GET", "/api/waste/reports", params=params)
        if not isinstance(data, dict) or "results" not in data:
            raise BackendError("Unexpected report listing shape")
        data.setdefault("count", len(data["results"]))
        return data

    def get_report(self, report_id: str) -> dict:
        return self._request("GET", f"/api/waste/reports/{report_id}")

    def validate_waste(self, image: bytes, filename: str, location: str,
                       description: str, timestamp: str) -> dict:
        return self._request(
            "POST", "/api/waste/validate",
            files=self._file("image", image, filename),
            data={"location": location, "description": description, "timestamp": timestamp},
        )

    def verify_cleanup(self, report_id: str, image: bytes, filename: str) -> dict:
        return self._request(
            "POST", f"/api/waste/reports/{report_id}/verify-cleanup",
            files=self._file("after_image", image, filename),
        )

    def analyze_waste(self, image: bytes, filename: str) -> dict:
        return self._request(
            "POST", "/waste-categorization/analyze",
            files=self._file("image", image, filename),
        )

    # ---------------- pickups ----------------
    def list_pickups(self) -> list:
        return self._request("GET", "/api/pickup/all")

    def list_user_pickups(self, user_id: str) -> list:
        return self._request("GET", f"/api/pickup/user/{user_id}")

    def schedule_pickup(self, payload: dict) -> dict:
        return self._request("POST", "/api/pickup/schedule", json=payload)

    def update_pickup_status(self, pickup_id: str, status: str) -> dict:
        return self._request("PUT", f"/api/pickup/{pickup_id}/status/{status}")

    # ---------------- wallet ----------------
    def get_wallet(self, user_id: str) -> dict:
        return self._request("GET", f"/api/digital-wallet/{user_id}")

    def list_benefits(self) -> list:
        return self._request("GET", "/api/digital-wallet/benefits")

    def redeem_benefit(self, user_id: str, benefit_id: str) -> dict:
        return self._request("POST", "/api/digital-wallet/redeem",
                             json={"user_id": user_id, "benefit_id": benefit_id})

    # ---------------- community ----------------
    def city_leaderboard(self, limit: int = 10) -> dict:
        return self._request("GET", "/api/cities/leaderboard", params={"limit": limit})

    def user_profile(self, user_id: str) -> dict:
        return self._request("GET", f"/api/users/{user_id}/profile")

    # ---------------- auth ----------------
    def authority_login(self, username: str, password: str) -> dict:
        return self._request("POST", "/auth/authority/login",
                             json={"username": username, "password": password})

    def authority_register(self, username: str, email: str, password: str) -> dict:
        return self._request("POST", "/auth/authority/register", json={
            "username": username,
            "email": email,
            "role": "authority",
            "password": password,
        })

    def google_callback(self, code: str) -> dict:
        return self._request("POST", "/api/auth/google/callback", json={"code": code})

    def google_login_url(self) -> str:
        return self._url("/auth/google/login")

    def ping(self) -> bool:
        try:
            resp = self.session.get(self._url("/"), timeout=self.timeout)
        except requests.exceptions.RequestException:
            return False
        return resp.status_code < 500


def get_backend() -> BackendClient:
    """Client bound to the current app; created once per app."""
    client = current_app.extensions.get("ecotrack_backend")
    if client is None:
        client = BackendClient(current_app.config["BACKEND_URL"], current_app.config["BACKEND_TIMEOUT"])
        current_app.extensions["ecotrack_backend"] = client
    return client
