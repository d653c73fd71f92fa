"""Shared pytest fixtures.

app        - fresh portal app on an in-memory SQLite database
client     - Flask test client for ``app``
backend    - MagicMock standing in for the REST backend client
geo        - MagicMock standing in for the geo services client
admin      - logs the test client in as an administrator
png_bytes  - a small valid PNG image
"""

from __future__ import annotations

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from app import create_app
from backend import BackendClient, BackendError
from geo import GeoClient


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "BACKEND_URL": "http://backend.test",
        "DEMO_FALLBACKS": True,
        "DEFAULT_USER_ID": "user_123",
        "TWILIO_ACCOUNT_SID": "",
        "TWILIO_AUTH_TOKEN": "",
        "TWILIO_PHONE_NUMBER": "",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def backend(app):
    mock = MagicMock(spec=BackendClient)
    app.extensions["ecotrack_backend"] = mock
    return mock


@pytest.fixture
def geo(app):
    mock = MagicMock(spec=GeoClient)
    app.extensions["ecotrack_geo"] = mock
    return mock


@pytest.fixture
def offline():
    """A BackendError as raised when the backend cannot be reached."""
    return BackendError("Network error")


@pytest.fixture
def admin(client):
    resp = client.post("/auth/demo", json={"user_id": "admin_1", "role": "admin"})
    assert resp.status_code == 200
    return client


def make_png(size=(32, 32), color=(200, 200, 200)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
