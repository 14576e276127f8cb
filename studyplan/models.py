import uuid
from datetime import datetime

from .extensions import create_logger, db
from .src.scheduling.chronotype import CHRONOTYPE_START_HOURS, DEFAULT_CHRONOTYPE
from .src.scheduling.task_queue import COMPLETED, DROPPED, PENDING
from .src.utils import DAY_NAMES

logger = create_logger(__name__, level="DEBUG")

TASK_CATEGORIES = ("exam", "assignment", "extra")
TASK_PRIORITIES = ("low", "medium", "high")
CHRONOTYPES = tuple(CHRONOTYPE_START_HOURS)
WORK_STYLES = ("deep", "mixed", "sprints")


def generate_uuid():
    return str(uuid.uuid4())


def utc_iso(dt):
    # Stored datetimes are naive UTC; Z marks them as such for clients
    return dt.isoformat() + "Z" if dt else None


class Task(db.Model):
    __tablename__ = "tasks"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(64), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(20), nullable=False, default="assignment")
    priority = db.Column(db.String(20), nullable=False, default="medium")
    deadline = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PENDING)

    # Written by the scheduler; both set or both null
    planned_start = db.Column(db.DateTime, nullable=True)
    planned_end = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    feedback = db.relationship(
        "TaskFeedback",
        backref=db.backref("task", lazy=True),
        lazy=True,
        cascade="all, delete-orphan",
    )

    @property
    def is_pending(self):
        return self.status == PENDING

    @property
    def is_completed(self):
        return self.status == COMPLETED

    @property
    def is_planned(self):
        return self.planned_start is not None

    def __repr__(self):
        s = f"<Task {self.id}: {self.title}. Due: {self.deadline} Status: {self.status}"
        if self.planned_start:
            s += f" Planned: {self.planned_start} - {self.planned_end}"
        return s + ">"

    def complete(self):
        self.status = COMPLETED

    def drop(self):
        self.status = DROPPED
        self.clear_plan()

    def clear_plan(self):
        self.planned_start = None
        self.planned_end = None

    def set_plan(self, start, end):
        if start is None or end is None or end <= start:
            raise ValueError(f"Planned end must be after planned start ({start} - {end})")
        self.planned_start = start
        self.planned_end = end

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "deadline": utc_iso(self.deadline),
            "status": self.status,
            "planned_start": utc_iso(self.planned_start),
            "planned_end": utc_iso(self.planned_end),
            "is_completed": self.is_completed,
            "created_at": utc_iso(self.created_at),
            "updated_at": utc_iso(self.updated_at),
        }


class TaskFeedback(db.Model):
    """How a completed task actually went, as reported by the user."""

    __tablename__ = "task_feedback"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    task_id = db.Column(
        db.String(36), db.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(db.String(64), nullable=False, index=True)
    actual_duration_mins = db.Column(db.Integer, nullable=False, default=60)
    drain_intensity = db.Column(db.Integer, nullable=False, default=3)  # 1..5
    note = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "actual_duration_mins": self.actual_duration_mins,
            "drain_intensity": self.drain_intensity,
            "note": self.note,
            "created_at": utc_iso(self.created_at),
        }


class BusySlot(db.Model):
    """A fixed weekly commitment (class, lab, shift). Monday=0."""

    __tablename__ = "busy_slots"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)
    start_hour = db.Column(db.Integer, nullable=False)
    end_hour = db.Column(db.Integer, nullable=False)  # exclusive
    title = db.Column(db.String(255), nullable=True)
    slot_type = db.Column(db.String(20), nullable=False, default="fixed")

    def __repr__(self):
        return (
            f"<BusySlot {DAY_NAMES[self.day_of_week]} "
            f"{self.start_hour}:00-{self.end_hour}:00>"
        )

    def to_dict(self):
        return {
            "id": self.id,
            "day_of_week": self.day_of_week,
            "start_hour": self.start_hour,
            "end_hour": self.end_hour,
            "title": self.title,
            "slot_type": self.slot_type,
        }

    def to_fixed_dict(self):
        """Day-name / HH:MM form used by the weekly schedule editor."""
        return {
            "id": self.id,
            "day_of_week": DAY_NAMES[self.day_of_week],
            "start_time": f"{self.start_hour:02d}:00",
            "end_time": f"{self.end_hour:02d}:00",
            "title": self.title,
            "slot_type": self.slot_type,
        }


class Profile(db.Model):
    __tablename__ = "profiles"

    user_id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=True)
    university = db.Column(db.String(255), nullable=True)
    major = db.Column(db.String(255), nullable=True)
    chronotype = db.Column(db.String(20), nullable=False, default=DEFAULT_CHRONOTYPE)
    work_style = db.Column(db.String(20), nullable=False, default="mixed")
    preferred_session_mins = db.Column(db.Integer, nullable=False, default=60)
    calendar_write_enabled = db.Column(db.Boolean, nullable=False, default=False)
    # pytz zone name; null means the app default
    timezone = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self):
        return f"<Profile {self.user_id}: {self.chronotype}, {self.preferred_session_mins} min>"

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "name": self.name,
            "university": self.university,
            "major": self.major,
            "chronotype": self.chronotype,
            "work_style": self.work_style,
            "preferred_session_mins": self.preferred_session_mins,
            "calendar_write_enabled": self.calendar_write_enabled,
            "timezone": self.timezone,
        }
