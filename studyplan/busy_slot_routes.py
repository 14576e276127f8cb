from flask import Blueprint, jsonify, request

from studyplan.extensions import create_logger, db
from studyplan.models import BusySlot
from studyplan.routes import get_request_user_id
from studyplan.src.scheduling.busy_calendar import validate_busy_slot
from studyplan.src.scheduling.errors import InvalidBusySlot
from studyplan.src.utils import (
    collapse_busy_cells,
    day_name_to_index,
    weekday_from_sunday_index,
)

logger = create_logger(__name__, level="DEBUG")

busy_slot_bp = Blueprint("busy_slots", __name__, url_prefix="/api/busy-slots")


def _normalize_day(day, week_starts_on):
    """Accept 'Monday'-style names or indices; Sunday=0 indices are converted."""
    if isinstance(day, str):
        return day_name_to_index(day)
    if week_starts_on == "sunday":
        return weekday_from_sunday_index(day)
    return day


def _slots_from_payload(data):
    """
    Build validated busy-slot dicts from a bulk payload.

    The payload carries either ``slots`` (explicit ranges) or ``cells``
    (a painted "<day>-<hour>" grid). Raises ValueError on anything invalid.
    """
    if "cells" in data:
        cells = data["cells"] or {}
        if not isinstance(cells, dict):
            raise ValueError("cells must be an object of '<day>-<hour>' keys")
        raw_slots = collapse_busy_cells(cells)
        week_starts_on = "monday"
    else:
        raw_slots = data.get("slots") or []
        if not isinstance(raw_slots, list):
            raise ValueError("slots must be a list")
        week_starts_on = str(data.get("week_starts_on", "monday")).lower()
        if week_starts_on not in ("monday", "sunday"):
            raise ValueError(f"Invalid week_starts_on: {week_starts_on}")

    slots = []
    for i, raw in enumerate(raw_slots):
        if not isinstance(raw, dict):
            raise InvalidBusySlot(raw, "slot must be an object", i)
        slot = dict(raw)
        if slot.get("day_of_week") is not None:
            slot["day_of_week"] = _normalize_day(slot["day_of_week"], week_starts_on)
        day, start_hour, end_hour = validate_busy_slot(slot, i)
        slots.append(
            {
                "day_of_week": day,
                "start_hour": start_hour,
                "end_hour": end_hour,
                "title": slot.get("title"),
                "slot_type": slot.get("slot_type") or "fixed",
            }
        )
    return slots


@busy_slot_bp.route("", methods=["GET"])
def get_busy_slots():
    """Get the user's busy slots (Monday=0)"""
    slots = (
        BusySlot.query.filter(BusySlot.user_id == get_request_user_id())
        .order_by(BusySlot.day_of_week, BusySlot.start_hour)
        .all()
    )
    return jsonify([slot.to_dict() for slot in slots])


@busy_slot_bp.route("/bulk", methods=["POST"])
def replace_busy_slots():
    """Replace all of the user's busy slots; nothing changes if any slot is invalid"""
    user_id = get_request_user_id()
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "Request must be JSON"}), 415

    try:
        slots = _slots_from_payload(data)
    except ValueError as e:
        logger.warning(f"Rejected busy slots for user {user_id}: {e}")
        return jsonify({"error": str(e)}), 400

    BusySlot.query.filter_by(user_id=user_id).delete()
    for slot in slots:
        db.session.add(BusySlot(user_id=user_id, **slot))
    db.session.commit()

    logger.debug(f"Saved {len(slots)} busy slots for user {user_id}")
    return jsonify({"message": "Busy slots saved", "count": len(slots)})
