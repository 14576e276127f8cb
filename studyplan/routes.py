from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from studyplan.extensions import create_logger, db
from studyplan.models import (
    TASK_CATEGORIES,
    TASK_PRIORITIES,
    BusySlot,
    Task,
    TaskFeedback,
)
from studyplan.src.scheduling.errors import SchedulingError
from studyplan.src.scheduling.scheduler import generate_schedule
from studyplan.src.scheduling.task_queue import DROPPED, TASK_STATUSES
from studyplan.src.utils import parse_iso_datetime

logger = create_logger(__name__, level="DEBUG")

base_bp = Blueprint("base", __name__)
task_bp = Blueprint("task", __name__, url_prefix="/api/tasks")
schedule_bp = Blueprint("schedule", __name__, url_prefix="/api/schedule")


def get_request_user_id():
    """User named by the request header, or the configured single-user default."""
    header = current_app.config["USER_ID_HEADER"]
    return request.headers.get(header) or current_app.config["DEFAULT_USER_ID"]


def _get_user_task(user_id, task_id):
    return Task.query.filter_by(id=task_id, user_id=user_id).first_or_404()


def _validate_choice(data, field, choices):
    value = data.get(field)
    if value is not None and value not in choices:
        raise ValueError(f"Invalid {field}: {value}. Expected one of {list(choices)}")
    return value


@base_bp.route("/")
def index():
    """API root endpoint - returns API status"""
    logger.info("Root endpoint accessed")
    return jsonify({"status": "healthy"}), 200


# Task routes
@task_bp.route("", methods=["GET"])
def get_tasks():
    """
    Get the user's tasks with optional filtering

    Query parameters:
    - status: 'pending', 'completed' or 'dropped'
    - category: 'exam', 'assignment' or 'extra'
    - start_date: Filter tasks with deadlines >= this date (ISO format)
    - end_date: Filter tasks with deadlines <= this date (ISO format)
    """
    user_id = get_request_user_id()
    status = request.args.get("status")
    category = request.args.get("category")
    start_date = request.args.get("start_date")
    end_date = request.args.get("end_date")

    query = Task.query.filter(Task.user_id == user_id)

    if status:
        query = query.filter(Task.status == status)
    if category:
        query = query.filter(Task.category == category)

    if start_date:
        try:
            query = query.filter(Task.deadline >= parse_iso_datetime(start_date))
        except ValueError as e:
            logger.warning(f"Invalid start_date format: {e}")

    if end_date:
        try:
            query = query.filter(Task.deadline <= parse_iso_datetime(end_date))
        except ValueError as e:
            logger.warning(f"Invalid end_date format: {e}")

    tasks = query.order_by(Task.deadline.asc(), Task.created_at.asc()).all()
    return jsonify([task.to_dict() for task in tasks])


@task_bp.route("", methods=["POST"])
def create_task():
    """Create a new pending task"""
    user_id = get_request_user_id()
    data = request.json

    if not data or not data.get("title") or not data.get("deadline"):
        return jsonify({"error": "Missing required fields"}), 400

    try:
        category = _validate_choice(data, "category", TASK_CATEGORIES)
        priority = _validate_choice(data, "priority", TASK_PRIORITIES)
        deadline = parse_iso_datetime(data["deadline"])
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    task = Task(
        user_id=user_id,
        title=data["title"],
        description=data.get("description"),
        category=category or "assignment",
        priority=priority or "medium",
        deadline=deadline,
    )
    db.session.add(task)
    db.session.commit()

    return jsonify(task.to_dict()), 201


@task_bp.route("/<task_id>", methods=["GET"])
def get_task(task_id):
    """Get task details"""
    task = _get_user_task(get_request_user_id(), task_id)
    return jsonify(task.to_dict())


@task_bp.route("/<task_id>", methods=["PUT"])
def update_task(task_id):
    """Update a task's editable fields"""
    task = _get_user_task(get_request_user_id(), task_id)
    data = request.json or {}

    try:
        _validate_choice(data, "category", TASK_CATEGORIES)
        _validate_choice(data, "priority", TASK_PRIORITIES)
        _validate_choice(data, "status", TASK_STATUSES)
        deadline = parse_iso_datetime(data["deadline"]) if data.get("deadline") else None
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    if "title" in data:
        if not data["title"]:
            return jsonify({"error": "Title cannot be empty"}), 400
        task.title = data["title"]
    if "description" in data:
        task.description = data["description"]
    if "category" in data:
        task.category = data["category"]
    if "priority" in data:
        task.priority = data["priority"]
    if deadline:
        task.deadline = deadline
    if "status" in data:
        task.status = data["status"]
        if task.status == DROPPED:
            task.clear_plan()

    db.session.commit()
    return jsonify(task.to_dict())


@task_bp.route("/<task_id>", methods=["DELETE"])
def delete_task(task_id):
    """Delete a task and its feedback"""
    task = _get_user_task(get_request_user_id(), task_id)
    db.session.delete(task)
    db.session.commit()
    return jsonify({"message": "Task deleted successfully"})


@task_bp.route("/<task_id>/complete", methods=["POST"])
def complete_task(task_id):
    """Mark task as complete and record how it went"""
    user_id = get_request_user_id()
    task = _get_user_task(user_id, task_id)
    data = request.get_json(silent=True) or {}

    try:
        actual_duration_mins = int(data.get("actual_duration_mins", 60))
        drain_intensity = int(data.get("drain_intensity", 3))
    except (TypeError, ValueError):
        return jsonify({"error": "Feedback values must be integers"}), 400
    if actual_duration_mins <= 0:
        return jsonify({"error": "actual_duration_mins must be positive"}), 400
    if not 1 <= drain_intensity <= 5:
        return jsonify({"error": "drain_intensity must be between 1 and 5"}), 400

    task.complete()
    feedback = TaskFeedback(
        task_id=task.id,
        user_id=user_id,
        actual_duration_mins=actual_duration_mins,
        drain_intensity=drain_intensity,
        note=data.get("note"),
    )
    db.session.add(feedback)
    db.session.commit()

    return jsonify({"message": "Task marked as complete", "feedback": feedback.to_dict()})


@task_bp.route("/<task_id>/drop", methods=["POST"])
def drop_task(task_id):
    """Drop a task; it is no longer scheduled"""
    task = _get_user_task(get_request_user_id(), task_id)
    task.drop()
    db.session.commit()
    return jsonify({"message": "Task dropped", "task": task.to_dict()})


# Schedule routes
@schedule_bp.route("/run", methods=["POST"])
def run_schedule():
    """Re-plan all pending tasks of the user from now (or the given 'now')"""
    user_id = get_request_user_id()
    data = request.get_json(silent=True) or {}

    try:
        now = parse_iso_datetime(data["now"]) if data.get("now") else datetime.utcnow()
    except (TypeError, ValueError) as e:
        return jsonify({"error": f"Invalid now: {e}"}), 400

    try:
        result, tasks = generate_schedule(user_id, now=now)
    except ValueError as e:
        # InvalidBusySlot, bad session length or timezone in stored data
        logger.warning(f"Schedule run rejected for user {user_id}: {e}")
        return jsonify({"error": str(e)}), 400
    except SchedulingError as e:
        logger.error(f"Error generating schedule: {str(e)}")
        return jsonify({"error": f"Failed to generate schedule: {str(e)}"}), 500

    response = {
        "message": "Schedule generated successfully (times in UTC)",
        "tasks": [task.to_dict() for task in tasks],
    }
    response.update(result.to_dict())
    return jsonify(response)


@schedule_bp.route("/clear", methods=["DELETE"])
def clear_schedule():
    """Clear planned times from all of the user's tasks"""
    user_id = get_request_user_id()
    tasks = Task.query.filter(Task.user_id == user_id).all()
    for task in tasks:
        task.clear_plan()
    db.session.commit()
    return jsonify({"message": "All planned times cleared", "cleared": len(tasks)})


@schedule_bp.route("/fixed", methods=["GET"])
def get_fixed_schedule():
    """Busy slots in day-name / HH:MM form"""
    slots = (
        BusySlot.query.filter(BusySlot.user_id == get_request_user_id())
        .order_by(BusySlot.day_of_week, BusySlot.start_hour)
        .all()
    )
    return jsonify([slot.to_fixed_dict() for slot in slots])
