from backend import BackendError
from extensions import db
from models import User


def _session(client):
    return client.get("/api/session").get_json()


def test_anonymous_default_identity(client):
    assert _session(client) == {"user_id": "user_123", "role": "user", "is_admin": False, "authenticated": False}


def test_demo_login_and_logout(client):
    client.post("/auth/demo", json={"user_id": "officer", "role": "authority"})
    assert _session(client)["is_admin"] is True

    assert client.post("/api/logout").get_json() == {"ok": True}
    assert _session(client)["user_id"] == "user_123"


def test_demo_login_unknown_role(client):
    assert client.post("/auth/demo", json={"user_id": "x", "role": "root"}).status_code == 400


def test_logout_get_redirects_home(client):
    client.post("/auth/demo", json={"user_id": "u1"})
    resp = client.get("/logout")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/"


def test_login_page(client):
    resp = client.get("/login?error=auth_failed")
    assert resp.status_code == 200


def test_google_login_redirects_to_backend(client, backend):
    backend.google_login_url.return_value = "http://backend.test/auth/google/login"
    resp = client.get("/auth/google/login")
    assert resp.headers["Location"] == "http://backend.test/auth/google/login"


def test_google_callback(app, client, backend):
    backend.google_callback.return_value = {"user": {"id": "g-1", "name": "Asha", "email": "asha@example.org"}}

    resp = client.get("/auth/google/callback?code=abc")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "/?success=true"
    backend.google_callback.assert_called_once_with("abc")
    assert _session(client)["user_id"] == "g-1"
    with app.app_context():
        assert db.session.get(User, "g-1").email == "asha@example.org"


def test_google_callback_errors(client, backend):
    assert client.get("/auth/google/callback").headers["Location"] == "/login?error=no_code"
    assert client.get("/auth/google/callback?error=denied").headers["Location"] == "/login?error=auth_failed"

    backend.google_callback.side_effect = BackendError("Network error")
    assert client.get("/auth/google/callback?code=abc").headers["Location"] == "/login?error=auth_failed"


def test_google_callback_without_user(client, backend):
    backend.google_callback.return_value = {}
    assert client.get("/auth/google/callback?code=abc").headers["Location"] == "/login?error=auth_failed"


def test_authority_login(client, backend):
    backend.authority_login.return_value = {"user": {"_id": "a-7", "username": "ops"}}

    body = client.post("/auth/authority/login", json={"username": "ops", "password": "pw"}).get_json()

    assert body["redirect"] == "/admin"
    assert _session(client) == {"user_id": "a-7", "role": "authority", "is_admin": True, "authenticated": True}


def test_authority_login_rejected(client, backend):
    backend.authority_login.side_effect = BackendError("Invalid credentials", 401, "Invalid credentials")
    resp = client.post("/auth/authority/login", json={"username": "ops", "password": "bad"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid credentials"

    backend.authority_login.side_effect = BackendError("Network error")
    assert client.post("/auth/authority/login", json={"username": "ops", "password": "bad"}).get_json()["error"] \
        == "Login failed"


def test_authority_login_missing_fields(client, backend):
    assert client.post("/auth/authority/login", json={"username": "ops"}).status_code == 400
    backend.authority_login.assert_not_called()


def test_authority_register(client, backend):
    resp = client.post("/auth/authority/register", json={
        "username": "ops", "email": "Ops@Example.org", "password": "pw", "confirm_password": "pw",
    })
    assert resp.status_code == 201
    backend.authority_register.assert_called_once_with("ops", "ops@example.org", "pw")


def test_authority_register_password_mismatch(client, backend):
    resp = client.post("/auth/authority/register", json={
        "username": "ops", "email": "o@example.org", "password": "pw", "confirm_password": "other",
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Passwords do not match"
    backend.authority_register.assert_not_called()


def test_authority_register_backend_detail(client, backend):
    backend.authority_register.side_effect = BackendError("Username taken", 400, "Username taken")
    resp = client.post("/auth/authority/register", json={
        "username": "ops", "email": "o@example.org", "password": "pw", "confirm_password": "pw",
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Username taken"


def test_logout_post_returns_json(client):
    client.post("/auth/demo", json={"user_id": "u1"})
    assert client.post("/logout").get_json() == {"ok": True}
    assert _session(client)["authenticated"] is False


def test_non_object_json_is_ignored(client):
    resp = client.post("/auth/demo", json=["officer", "admin"])
    assert resp.status_code == 200
    assert _session(client)["user_id"] == "user_123"
