# config.py
import logging
import os

_TRUTHY = {"1", "true", "yes", "on"}


def _bool(raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _float(raw: str | None, default: float) -> float:
    try:
        return float(raw) if raw not in (None, "") else default
    except ValueError:
        return default


def load_config(env=None) -> dict:
    """
    Build the Flask config mapping from environment variables.
    Unset variables fall back to local-development defaults.
    """
    env = os.environ if env is None else env
    return {
        "SECRET_KEY": env.get("SECRET_KEY", "change-me"),  # set via env var in prod
        "SQLALCHEMY_DATABASE_URI": env.get("DATABASE_URL", "sqlite:///ecotrack.db"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,

        # external REST backend
        "BACKEND_URL": env.get("BACKEND_URL", "http://127.0.0.1:8000").rstrip("/"),
        "BACKEND_TIMEOUT": _float(env.get("BACKEND_TIMEOUT"), 10.0),

        # geo services
        "NOMINATIM_URL": env.get("NOMINATIM_URL", "https://nominatim.openstreetmap.org").rstrip("/"),
        "OSRM_URL": env.get("OSRM_URL", "https://router.project-osrm.org").rstrip("/"),
        "OLAMAPS_URL": env.get("OLAMAPS_URL", "https://api.olamaps.io").rstrip("/"),
        "OLAMAPS_API_KEY": env.get("OLAMAPS_API_KEY", ""),
        "GEO_USER_AGENT": env.get("GEO_USER_AGENT", "ecotrack-portal/0.1"),
        "GEO_TIMEOUT": _float(env.get("GEO_TIMEOUT"), 10.0),

        # twilio
        "TWILIO_ACCOUNT_SID": env.get("TWILIO_ACCOUNT_SID", ""),
        "TWILIO_AUTH_TOKEN": env.get("TWILIO_AUTH_TOKEN", ""),
        "TWILIO_PHONE_NUMBER": env.get("TWILIO_PHONE_NUMBER", ""),

        # demo behaviour
        "DEMO_FALLBACKS": _bool(env.get("DEMO_FALLBACKS"), True),
        "DEFAULT_USER_ID": env.get("DEFAULT_USER_ID", "user_123"),
        "DEMO_WALLET_USER_ID": env.get("DEMO_WALLET_USER_ID", "67efd860b7a02833ff2863db"),

        "LOG_LEVEL": env.get("LOG_LEVEL", "INFO").upper(),
    }


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
