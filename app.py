# app.py
import logging

from flask import Blueprint, Flask, jsonify, redirect, render_template, request, url_for
from sqlalchemy import inspect, text
from werkzeug.exceptions import HTTPException

# Local modules
import fallbacks
from auth import auth_bp, current_identity
from backend import get_backend
from community import community_bp
from config import configure_logging, load_config
from deposits import deposits_bp
from extensions import db, login_manager
from pickups import pickups_bp
from reports import reports_bp
from sms import sms_bp
from wallet import wallet_bp
import models  # noqa: F401  (registers tables and the user loader)

_LOGGER = logging.getLogger(__name__)

pages_bp = Blueprint("pages", __name__)


# ---------------- SQLite schema repair ----------------
def _cols(conn, name: str) -> set[str]:
    rows = conn.execute(text(f"PRAGMA table_info({name})")).fetchall()
    return {r[1] for r in rows}  # r[1] = column name


def ensure_sqlite_schema(app: Flask):
    """
    Make an existing ecotrack.db compatible with the models without losing data.
    - Create missing tables.
    - Add any missing nullable columns on existing tables.
    """
    with app.app_context():
        db.create_all()
        if db.engine.dialect.name != "sqlite":
            return
        with db.engine.begin() as conn:
            existing = set(inspect(conn).get_table_names())
            for table in db.metadata.sorted_tables:
                if table.name not in existing:
                    continue
                have = _cols(conn, table.name)
                for col in table.columns:
                    if col.name in have or col.primary_key:
                        continue
                    ddl = col.type.compile(dialect=conn.dialect)
                    conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {col.name} {ddl}"))
                    _LOGGER.info("Added column %s.%s", table.name, col.name)


# ---------------- Pages ----------------
@pages_bp.route("/", endpoint="index")
def home():
    return render_template("home.html", success=request.args.get("success"))


@pages_bp.route("/dashboard")
def dashboard():
    return render_template("dashboard.html", identity=current_identity())


@pages_bp.route("/admin")
def admin():
    if not current_identity().is_admin:
        return redirect(url_for("auth.login", error="admin_required"))
    return render_template("admin.html", identity=current_identity())


@pages_bp.route("/authority/pickups")
def authority_pickups():
    if not current_identity().is_admin:
        return redirect(url_for("auth.login", error="admin_required"))
    return render_template("authority_pickups.html")


@pages_bp.route("/report")
def report():
    return render_template("report.html")


@pages_bp.route("/tickets")
def tickets():
    return render_template("tickets.html")


@pages_bp.route("/recycler")
def recycler():
    return render_template("recycler.html")


@pages_bp.route("/schedule-pickups")
def schedule_pickups():
    return render_template("pickups.html", identity=current_identity())


@pages_bp.route("/schedule-pickups/new")
def schedule_new_pickup():
    ident = current_identity()
    if ident.is_admin:
        return render_template("pickup_new.html", denied=True), 403
    return render_template("pickup_new.html", denied=False)


@pages_bp.route("/wallet")
def wallet():
    return render_template("wallet.html")


@pages_bp.route("/waste-deposits")
def waste_deposits():
    return render_template("deposits.html", deposits=fallbacks.waste_dumps())


@pages_bp.route("/profile")
def profile():
    return render_template("profile.html", identity=current_identity())


@pages_bp.route("/verify-cleanup/<report_id>")
def verify_cleanup(report_id):
    return render_template("verify_cleanup.html", report_id=report_id)


# ---------------- Health ----------------
@pages_bp.route("/health")
def health():
    up = get_backend().ping()
    return jsonify({
        "status": "ok",
        "backend": "up" if up else "down",
        "demo_fallbacks": fallbacks.enabled(),
    })


# ---------------- Errors ----------------
def _handle_http_error(e: HTTPException):
    if request.path.startswith("/api/"):
        body = {"ok": False, "error": e.name}
        if e.code == 405:
            body["message"] = "Method Not Allowed"
        return jsonify(body), e.code
    return e


def _handle_unexpected(e: Exception):
    _LOGGER.exception("Unhandled error on %s", request.path)
    db.session.rollback()
    if request.path.startswith("/api/"):
        return jsonify({"ok": False, "error": "Internal server error"}), 500
    return "Internal server error", 500


# ---------------- App & Config ----------------
def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)
    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"  # type: ignore[assignment]

    app.register_blueprint(auth_bp)  # /login, /auth/*, /api/logout
    app.register_blueprint(pages_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(pickups_bp)
    app.register_blueprint(wallet_bp)
    app.register_blueprint(community_bp)
    app.register_blueprint(deposits_bp)
    app.register_blueprint(sms_bp)

    app.register_error_handler(HTTPException, _handle_http_error)
    if not app.testing:
        app.register_error_handler(Exception, _handle_unexpected)

    ensure_sqlite_schema(app)
    return app


# ---------------- Main ----------------
if __name__ == "__main__":
    create_app().run(debug=True)
