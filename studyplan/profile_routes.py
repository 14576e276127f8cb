from flask import Blueprint, current_app, jsonify, request

from studyplan.extensions import create_logger, db
from studyplan.models import CHRONOTYPES, WORK_STYLES, Profile
from studyplan.routes import get_request_user_id
from studyplan.src.utils import resolve_timezone

logger = create_logger(__name__, level="DEBUG")

profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")

TEXT_FIELDS = ("name", "university", "major")


def _get_or_create_profile(user_id):
    profile = db.session.get(Profile, user_id)
    if profile is None:
        profile = Profile(
            user_id=user_id,
            preferred_session_mins=current_app.config["DEFAULT_SESSION_MINS"],
        )
        db.session.add(profile)
    return profile


def _apply_baseline(profile, data):
    """Copy validated baseline fields onto the profile. Raises ValueError."""
    for field in TEXT_FIELDS:
        if field in data:
            setattr(profile, field, data[field])

    if data.get("chronotype") is not None:
        if data["chronotype"] not in CHRONOTYPES:
            raise ValueError(f"Invalid chronotype: {data['chronotype']}")
        profile.chronotype = data["chronotype"]

    if data.get("work_style") is not None:
        if data["work_style"] not in WORK_STYLES:
            raise ValueError(f"Invalid work_style: {data['work_style']}")
        profile.work_style = data["work_style"]

    if data.get("preferred_session_mins") is not None:
        value = data["preferred_session_mins"]
        low = current_app.config["MIN_SESSION_MINS"]
        high = current_app.config["MAX_SESSION_MINS"]
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            raise ValueError(
                f"preferred_session_mins must be an integer between {low} and {high}"
            )
        profile.preferred_session_mins = value

    if "timezone" in data:
        if data["timezone"]:
            resolve_timezone(data["timezone"])
        profile.timezone = data["timezone"] or None


@profile_bp.route("", methods=["GET"])
def get_profile():
    """Get the user's profile, with defaults if none was saved yet"""
    user_id = get_request_user_id()
    profile = db.session.get(Profile, user_id)
    if profile is None:
        return jsonify(
            {
                "user_id": user_id,
                "name": None,
                "university": None,
                "major": None,
                "chronotype": "balanced",
                "work_style": "mixed",
                "preferred_session_mins": current_app.config["DEFAULT_SESSION_MINS"],
                "calendar_write_enabled": False,
                "timezone": None,
            }
        )
    return jsonify(profile.to_dict())


@profile_bp.route("/baseline", methods=["POST"])
def save_baseline():
    """Merge onboarding answers (work style, energy profile, session length) into the profile"""
    user_id = get_request_user_id()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request must be a JSON object"}), 400

    profile = _get_or_create_profile(user_id)
    try:
        _apply_baseline(profile, data)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    logger.debug(f"Saved profile for user {user_id}")
    return jsonify(profile.to_dict())


@profile_bp.route("/calendar-prefs", methods=["POST"])
def save_calendar_prefs():
    """Toggle writing planned sessions to an external calendar"""
    user_id = get_request_user_id()
    data = request.get_json(silent=True) or {}

    profile = _get_or_create_profile(user_id)
    profile.calendar_write_enabled = bool(data.get("calendar_write_enabled"))
    db.session.commit()
    return jsonify({"calendar_write_enabled": profile.calendar_write_enabled})
