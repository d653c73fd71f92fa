# auth.py
# Session identity only: credentials are checked by the backend, never here.
import logging
from dataclasses import dataclass
from functools import wraps

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from backend import BackendError, get_backend
from models import ADMIN_ROLES, User

_LOGGER = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

ROLES = ("user", "admin", "authority")


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str = "user"
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def current_identity() -> Identity:
    """The signed-in user, or the anonymous default citizen."""
    if current_user.is_authenticated:
        return Identity(current_user.id, current_user.role, current_user.name)
    return Identity(current_app.config["DEFAULT_USER_ID"], "user", None)


def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_identity().is_admin:
            return jsonify({"ok": False, "error": "Administrator access required"}), 403
        return view(*args, **kwargs)
    return wrapped


def request_payload():
    """JSON object body, else the submitted form. Non-object JSON counts as no body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else request.form


# ---------------- Pages ----------------
@auth_bp.route("/login", methods=["GET"])
def login():
    error = request.args.get("error")
    success = "Login successful!" if request.args.get("success") else None
    return render_template("login.html", error=error, success=success)


# ---------------- Google (via backend) ----------------
@auth_bp.route("/auth/google/login")
def google_login():
    return redirect(get_backend().google_login_url())


@auth_bp.route("/auth/google/callback")
def google_callback():
    if request.args.get("error"):
        _LOGGER.warning("Google sign-in returned error %r", request.args.get("error"))
        return redirect(url_for("auth.login", error="auth_failed"))
    code = request.args.get("code")
    if not code:
        return redirect(url_for("auth.login", error="no_code"))

    try:
        data = get_backend().google_callback(code)
        user = User.upsert(data.get("user") or {}, role="user")
    except (BackendError, ValueError) as e:
        _LOGGER.error("Google callback failed: %s", e)
        return redirect(url_for("auth.login", error="auth_failed"))

    login_user(user)
    return redirect(url_for("pages.index", success="true"))


# ---------------- Authority ----------------
@auth_bp.route("/auth/authority/login", methods=["POST"])
def authority_login():
    data = request_payload()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    if not username or not password:
        return jsonify({"ok": False, "error": "Missing fields"}), 400

    try:
        resp = get_backend().authority_login(username, password)
    except BackendError as e:
        msg = e.detail or "Login failed"
        return jsonify({"ok": False, "error": msg}), 401

    account = resp.get("user") or resp
    account = {**account, "id": account.get("id") or account.get("_id") or username,
               "name": account.get("name") or account.get("username") or username}
    user = User.upsert(account, role="authority")
    login_user(user)
    return jsonify({"ok": True, "message": "Admin login successful!", "redirect": url_for("pages.admin")})


@auth_bp.route("/auth/authority/register", methods=["POST"])
def authority_register():
    data = request_payload()
    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not username or not email or not password:
        return jsonify({"ok": False, "error": "Missing fields"}), 400
    if password != (data.get("confirm_password") or ""):
        return jsonify({"ok": False, "error": "Passwords do not match"}), 400

    try:
        get_backend().authority_register(username, email, password)
    except BackendError as e:
        msg = e.detail or "Registration failed"
        return jsonify({"ok": False, "error": msg}), 400
    return jsonify({"ok": True, "message": "Admin registration successful! You can now log in."}), 201


# ---------------- Mocked sign-in ----------------
@auth_bp.route("/auth/demo", methods=["POST"])
def demo_login():
    data = request_payload()
    user_id = (data.get("user_id") or "").strip() or current_app.config["DEFAULT_USER_ID"]
    role = data.get("role") or "user"
    if role not in ROLES:
        return jsonify({"ok": False, "error": f"Unknown role '{role}'"}), 400
    user = User.upsert({"id": user_id, "name": data.get("name") or user_id}, role=role)
    login_user(user)
    return jsonify({"ok": True, "user": {"id": user.id, "role": user.role}})


@auth_bp.route("/api/session", methods=["GET"])
def api_session():
    ident = current_identity()
    return jsonify({
        "user_id": ident.user_id,
        "role": ident.role,
        "is_admin": ident.is_admin,
        "authenticated": bool(current_user.is_authenticated),
    })


# ---------------- Sign-out ----------------
def _sign_out() -> None:
    _LOGGER.info("Signing out %s", current_user.get_id())
    logout_user()


@auth_bp.route("/api/logout", methods=["POST"])
@login_required
def api_logout():
    _sign_out()
    return jsonify({"ok": True})


# GET comes from the nav link, POST from scripts
@auth_bp.route("/logout", methods=["GET", "POST"])
@login_required
def logout():
    _sign_out()
    if request.method == "POST":
        return jsonify({"ok": True})
    return redirect(url_for("pages.index"))
