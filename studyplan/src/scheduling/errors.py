"""Exceptions raised by the placement scheduler."""


class SchedulingError(Exception):
    """Base class for scheduler failures."""


class InvalidBusySlot(SchedulingError, ValueError):
    """A busy slot has an out-of-range day/hour or an empty hour range.

    Raised while the BusyCalendar is being built, so no placement is attempted
    against a partially indexed calendar.
    """

    def __init__(self, slot, reason, index=None):
        self.slot = slot
        self.reason = reason
        self.index = index
        where = f"Busy slot #{index}" if index is not None else "Busy slot"
        super().__init__(f"{where} is invalid: {reason}")


class UnplaceableTask(SchedulingError):
    """The cursor walked past the day bound without finding a free slot."""

    def __init__(self, task_id, max_days):
        self.task_id = task_id
        self.max_days = max_days
        super().__init__(
            f"Task {task_id} could not be placed within {max_days} days"
        )
