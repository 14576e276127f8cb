from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from studyplan.extensions import create_logger
from studyplan.src.scheduling.errors import UnplaceableTask
from studyplan.src.scheduling.slot_cursor import (
    DEFAULT_MAX_DAY_WALK,
    WINDOW_END_HOUR,
    WINDOW_START_HOUR,
    SlotCursor,
    ceil_to_hour,
)

logger = create_logger(__name__, level="DEBUG")

DEFAULT_SESSION_MINS = 60
WINDOW_MINUTES = (WINDOW_END_HOUR - WINDOW_START_HOUR) * 60


def _iso(dt):
    return dt.isoformat() if dt else None


@dataclass(frozen=True)
class Assignment:
    task_id: Any
    planned_start: datetime
    planned_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "planned_start": _iso(self.planned_start),
            "planned_end": _iso(self.planned_end),
        }


@dataclass(frozen=True)
class DeadlineMissed:
    task_id: Any
    deadline: datetime
    planned_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "deadline": _iso(self.deadline),
            "planned_end": _iso(self.planned_end),
        }


@dataclass
class PlacementResult:
    assignments: List[Assignment] = field(default_factory=list)
    unplaceable: List[Any] = field(default_factory=list)
    deadline_warnings: List[DeadlineMissed] = field(default_factory=list)

    def by_task_id(self) -> Dict[Any, Assignment]:
        return {a.task_id: a for a in self.assignments}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assignments": [a.to_dict() for a in self.assignments],
            "unplaceable": list(self.unplaceable),
            "deadline_warnings": [w.to_dict() for w in self.deadline_warnings],
        }


def _task_id(task):
    if isinstance(task, dict):
        return task.get("id")
    return task.id


class Placer:
    """
    Greedy placement of an ordered task sequence onto free calendar hours.

    Each task gets one contiguous block of ``session_mins`` starting at the
    next free hour after the previous task. Placement is not optimal and
    never looks at deadlines; order is the caller's (see TaskQueue).
    """

    def __init__(
        self,
        calendar,
        preferred_start_hour=WINDOW_START_HOUR,
        session_mins: Optional[int] = DEFAULT_SESSION_MINS,
        max_days: int = DEFAULT_MAX_DAY_WALK,
    ):
        if session_mins is None:
            session_mins = DEFAULT_SESSION_MINS
        if isinstance(session_mins, bool) or not isinstance(session_mins, int):
            raise ValueError(f"Session length must be an integer, got {session_mins!r}")
        if session_mins <= 0:
            raise ValueError(f"Session length must be positive, got {session_mins}")
        if session_mins > WINDOW_MINUTES:
            raise ValueError(
                f"Session length {session_mins} min does not fit the "
                f"{WINDOW_MINUTES} min daily window"
            )
        if max_days < 1:
            raise ValueError(f"Day-walk bound must be at least 1, got {max_days}")

        self.calendar = calendar
        self.preferred_start_hour = preferred_start_hour
        self.session_mins = session_mins
        self.max_days = max_days

    def _start_position(self, now):
        """
        Where the first task's search begins.

        Starts never lie in the past, so a mid-hour ``now`` moves up to the
        next hour. A run that begins before the window opens starts the day
        at the preferred hour; inside the window it starts right away.
        """
        start = ceil_to_hour(now)
        if now.hour < WINDOW_START_HOUR or start.hour < WINDOW_START_HOUR:
            start = start.replace(hour=self.preferred_start_hour)
        return start

    def place(self, tasks, now) -> PlacementResult:
        """
        Assign every task in ``tasks`` a block, in the given order.

        Tasks whose search exceeds the day-walk bound are listed in
        ``unplaceable`` and skipped; the cursor stays where that search
        began so later tasks are still tried.
        """
        cursor = SlotCursor(
            self._start_position(now),
            preferred_start_hour=self.preferred_start_hour,
            max_days=self.max_days,
        )
        session = timedelta(minutes=self.session_mins)
        result = PlacementResult()

        for task in tasks:
            task_id = _task_id(task)
            try:
                start = cursor.advance_to_next_free(
                    self.calendar, span_minutes=self.session_mins, task_id=task_id
                )
            except UnplaceableTask as e:
                logger.warning(str(e))
                result.unplaceable.append(task_id)
                continue

            end = start + session
            result.assignments.append(Assignment(task_id, start, end))
            logger.debug(f"Placed task {task_id}: {start} - {end}")
            cursor.advance_past(end)

        return result
