from studyplan.extensions import create_logger
from studyplan.src.scheduling.errors import InvalidBusySlot

logger = create_logger(__name__, level="DEBUG")

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


def _slot_field(slot, name):
    """Read a field from either a mapping (JSON payload) or a model instance."""
    if isinstance(slot, dict):
        return slot.get(name)
    return getattr(slot, name, None)


def _is_int(value):
    # bool is an int subclass; True is not a valid hour
    return isinstance(value, int) and not isinstance(value, bool)


def validate_busy_slot(slot, index=None):
    """
    Check one busy slot and return its (day_of_week, start_hour, end_hour).

    Raises:
        InvalidBusySlot: if any field is missing, not an integer, out of range,
            or the hour range is empty.
    """
    day = _slot_field(slot, "day_of_week")
    start_hour = _slot_field(slot, "start_hour")
    end_hour = _slot_field(slot, "end_hour")

    for name, value in (
        ("day_of_week", day),
        ("start_hour", start_hour),
        ("end_hour", end_hour),
    ):
        if not _is_int(value):
            raise InvalidBusySlot(slot, f"{name} must be an integer, got {value!r}", index)

    if not 0 <= day < DAYS_PER_WEEK:
        raise InvalidBusySlot(slot, f"day_of_week {day} is outside 0..6", index)
    if not 0 <= start_hour < HOURS_PER_DAY:
        raise InvalidBusySlot(slot, f"start_hour {start_hour} is outside 0..23", index)
    if not 1 <= end_hour <= HOURS_PER_DAY:
        raise InvalidBusySlot(slot, f"end_hour {end_hour} is outside 1..24", index)
    if start_hour >= end_hour:
        raise InvalidBusySlot(
            slot, f"start_hour {start_hour} must be before end_hour {end_hour}", index
        )
    return day, start_hour, end_hour


class BusyCalendar:
    """
    Hour-granularity index of a user's fixed weekly commitments.

    Every hour in [start_hour, end_hour) of each slot is marked occupied.
    Overlapping or adjacent slots need no merging; marking an hour twice is a
    no-op. Days are Monday=0 .. Sunday=6, matching ``datetime.weekday()``.

    All slots are validated before any hour is marked, so a bad slot leaves
    no calendar behind.
    """

    def __init__(self, slots=()):
        validated = [validate_busy_slot(slot, i) for i, slot in enumerate(slots)]

        busy_hours = set()
        for day, start_hour, end_hour in validated:
            for hour in range(start_hour, end_hour):
                busy_hours.add((day, hour))

        self._busy_hours = frozenset(busy_hours)
        logger.debug(
            f"Built busy calendar from {len(validated)} slots "
            f"({len(self._busy_hours)} busy hours)"
        )

    @property
    def busy_hours(self):
        return self._busy_hours

    def is_busy(self, day_of_week, hour):
        """Whether (day_of_week, hour) is covered by a fixed commitment."""
        return (day_of_week, hour) in self._busy_hours

    def __len__(self):
        return len(self._busy_hours)

    def __repr__(self):
        return f"<BusyCalendar {len(self._busy_hours)} busy hours>"
