"""
Greedy placement of study tasks around fixed weekly commitments.
"""

from .busy_calendar import BusyCalendar
from .chronotype import ChronotypePolicy, preferred_start_hour
from .deadlines import find_deadline_misses
from .errors import InvalidBusySlot, SchedulingError, UnplaceableTask
from .placer import Assignment, DeadlineMissed, PlacementResult, Placer
from .slot_cursor import WINDOW_END_HOUR, WINDOW_START_HOUR, SlotCursor
from .task_queue import TaskQueue

__all__ = [
    "Assignment",
    "BusyCalendar",
    "ChronotypePolicy",
    "DeadlineMissed",
    "InvalidBusySlot",
    "PlacementResult",
    "Placer",
    "SchedulingError",
    "SlotCursor",
    "TaskQueue",
    "UnplaceableTask",
    "WINDOW_END_HOUR",
    "WINDOW_START_HOUR",
    "find_deadline_misses",
    "preferred_start_hour",
]
