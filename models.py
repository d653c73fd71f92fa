# models.py
import uuid
from datetime import datetime, timezone

from flask_login import UserMixin

from extensions import db, login_manager

ADMIN_ROLES = ("admin", "authority")
REPORT_STATUSES = ("pending", "in_progress", "resolved")
SEVERITIES = ("Low", "Medium", "High", "Critical")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class User(UserMixin, db.Model):
    """Portal-side copy of an identity the backend vouched for."""
    __tablename__ = "users"
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120))
    email = db.Column(db.String(255), index=True)
    role = db.Column(db.String(20), nullable=False, default="user")
    picture = db.Column(db.String(512))
    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @classmethod
    def upsert(cls, payload: dict, role: str = "user") -> "User":
        user_id = str(payload.get("id") or payload.get("_id") or payload.get("user_id") or "").strip()
        if not user_id:
            raise ValueError("user payload has no id")
        user = db.session.get(cls, user_id)
        if user is None:
            user = cls(id=user_id)
            db.session.add(user)
        user.name = payload.get("name") or payload.get("username") or user.name
        user.email = payload.get("email") or user.email
        user.picture = payload.get("picture") or user.picture
        user.role = role
        db.session.commit()
        return user


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, user_id)


class SavedReport(db.Model):
    __tablename__ = "saved_reports"
    id = db.Column(db.String(64), primary_key=True)
    is_valid = db.Column(db.Boolean, default=True)
    message = db.Column(db.Text)
    confidence_score = db.Column(db.Float)
    severity = db.Column(db.String(20))
    location = db.Column(db.String(512))
    description = db.Column(db.Text)
    timestamp = db.Column(db.String(40))
    waste_types = db.Column(db.String(512))
    status = db.Column(db.String(20), nullable=False, default="pending")
    submitted_by_id = db.Column(db.String(64), index=True)
    submitted_by_name = db.Column(db.String(120))

    dustbin_present = db.Column(db.Boolean)
    dustbin_full = db.Column(db.Boolean)
    dustbin_fullness_percentage = db.Column(db.Integer)
    waste_outside = db.Column(db.Boolean)
    waste_outside_description = db.Column(db.Text)

    recyclable_items = db.Column(db.String(512))
    is_recyclable = db.Column(db.Boolean)
    recyclable_notes = db.Column(db.Text)

    time_appears_valid = db.Column(db.Boolean)
    lighting_condition = db.Column(db.String(40))
    time_analysis_notes = db.Column(db.Text)
    description_matches_image = db.Column(db.Boolean)
    description_match_confidence = db.Column(db.Float)
    description_match_notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    @classmethod
    def from_validation(cls, result: dict, location: str, description: str,
                        timestamp: str, user_id: str, username: str) -> "SavedReport":
        time_analysis = result.get("time_analysis") or {}
        match = result.get("description_match") or {}
        dustbins = result.get("dustbins") or []
        first_bin = dustbins[0] if dustbins and isinstance(dustbins[0], dict) else {}
        recyclables = join_labels(result.get("recyclable_items"))
        return cls(
            id=f"report_{int(utcnow().timestamp() * 1000)}_{uuid.uuid4().hex[:6]}",
            is_valid=bool(result.get("is_valid")),
            message=result.get("message") or "",
            confidence_score=float(result.get("confidence_score") or 0),
            severity=normalize_severity(result.get("severity")),
            location=location,
            description=description,
            timestamp=timestamp,
            waste_types=join_labels(result.get("waste_types")),
            status="pending",
            submitted_by_id=user_id,
            submitted_by_name=username,
            dustbin_present=bool(dustbins),
            dustbin_full=first_bin.get("is_full"),
            dustbin_fullness_percentage=first_bin.get("fullness_percentage"),
            waste_outside=True,
            waste_outside_description="Waste visible in the submitted photo",
            recyclable_items=recyclables,
            is_recyclable=bool(recyclables),
            recyclable_notes="Items may be suitable for recycling" if recyclables else "",
            time_appears_valid=bool(time_analysis.get("time_appears_valid")),
            lighting_condition=time_analysis.get("lighting_condition") or "unknown",
            time_analysis_notes=time_analysis.get("notes") or "",
            description_matches_image=bool(match.get("matches_image")),
            description_match_confidence=float(match.get("confidence") or 0),
            description_match_notes=match.get("notes") or "",
        )

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "is_valid": self.is_valid,
            "message": self.message,
            "confidence_score": self.confidence_score,
            "severity": self.severity,
            "location": self.location,
            "description": self.description,
            "timestamp": self.timestamp,
            "waste_types": self.waste_types,
            "status": self.status,
            "submitted_by": {"user_id": self.submitted_by_id, "username": self.submitted_by_name},
            "dustbin_present": self.dustbin_present,
            "dustbin_full": self.dustbin_full,
            "dustbin_fullness_percentage": self.dustbin_fullness_percentage,
            "waste_outside": self.waste_outside,
            "waste_outside_description": self.waste_outside_description,
            "recyclable_items": self.recyclable_items,
            "is_recyclable": self.is_recyclable,
            "recyclable_notes": self.recyclable_notes,
            "time_appears_valid": self.time_appears_valid,
            "lighting_condition": self.lighting_condition,
            "time_analysis_notes": self.time_analysis_notes,
            "description_matches_image": self.description_matches_image,
            "description_match_confidence": self.description_match_confidence,
            "description_match_notes": self.description_match_notes,
        }


class PickupRequest(db.Model):
    __tablename__ = "pickup_requests"
    id = db.Column(db.String(64), primary_key=True)
    location = db.Column(db.String(512), nullable=False)
    date = db.Column(db.String(10), default="")
    time = db.Column(db.String(5), default="")
    status = db.Column(db.String(20), nullable=False, default="pending")
    waste_type = db.Column(db.String(120))
    description = db.Column(db.Text)
    verification_status = db.Column(db.String(20), default="pending")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location": self.location,
            "date": self.date or "",
            "time": self.time or "",
            "status": self.status,
            "wasteType": self.waste_type,
            "description": self.description,
            "verificationStatus": self.verification_status,
        }


def join_labels(value) -> str:
    """
    Flatten backend label lists into "a, b, c".
    Items may be plain strings or {"type": ..., "confidence": ...} objects.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("type", ""))
    out = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("type")
        if item:
            out.append(str(item))
    return ", ".join(out)


def normalize_severity(raw: str | None) -> str:
    s = (raw or "").strip().lower()
    if s.startswith("crit"): return "Critical"
    if s.startswith("high"): return "High"
    if s.startswith("low") or s == "clean": return "Low"
    return "Medium"
