from datetime import timedelta

from studyplan.extensions import create_logger
from studyplan.src.scheduling.errors import UnplaceableTask

logger = create_logger(__name__, level="DEBUG")

# Daily scheduling window, [start, end) in local wall-clock hours
WINDOW_START_HOUR = 8
WINDOW_END_HOUR = 22

DEFAULT_MAX_DAY_WALK = 365
ONE_HOUR = timedelta(hours=1)


def truncate_to_hour(dt):
    return dt.replace(minute=0, second=0, microsecond=0)


def ceil_to_hour(dt):
    """Round up to the next top of the hour; on-the-hour values are unchanged."""
    truncated = truncate_to_hour(dt)
    if truncated == dt:
        return dt
    return truncated + ONE_HOUR


def hours_spanned(span_minutes):
    """Number of clock hours touched by a block starting on the hour."""
    return max(1, -(-span_minutes // 60))


class SlotCursor:
    """
    A position in calendar time that only ever moves forward.

    The cursor works at hour granularity: every candidate start sits on the
    top of an hour, inside the daily window, on an hour the BusyCalendar
    reports free.
    """

    def __init__(
        self,
        current,
        preferred_start_hour=WINDOW_START_HOUR,
        max_days=DEFAULT_MAX_DAY_WALK,
    ):
        if not WINDOW_START_HOUR <= preferred_start_hour < WINDOW_END_HOUR:
            raise ValueError(
                f"Preferred start hour {preferred_start_hour} is outside the "
                f"{WINDOW_START_HOUR}:00-{WINDOW_END_HOUR}:00 window"
            )
        self.current = current
        self.preferred_start_hour = preferred_start_hour
        self.max_days = max_days

    def _next_day(self):
        next_day = truncate_to_hour(self.current).replace(hour=0) + timedelta(days=1)
        return next_day.replace(hour=self.preferred_start_hour)

    def _block_is_free(self, calendar, span_minutes):
        """The block [current, current + span) stays in the window and off busy hours."""
        end = self.current + timedelta(minutes=span_minutes)
        window_end = self.current.replace(hour=0) + timedelta(hours=WINDOW_END_HOUR)
        if end > window_end:
            return False

        day_of_week = self.current.weekday()
        for offset in range(hours_spanned(span_minutes)):
            if calendar.is_busy(day_of_week, self.current.hour + offset):
                return False
        return True

    def advance_to_next_free(self, calendar, span_minutes=60, task_id=None):
        """
        Move to the first free start at or after the current position.

        Args:
            calendar: BusyCalendar to check hours against
            span_minutes: length of the block that must fit; with the default
                of 60 only the start hour itself is checked
            task_id: used only to label an UnplaceableTask

        Returns:
            The new current position.

        Raises:
            UnplaceableTask: when no free start exists within ``max_days``
                calendar days of the starting position. The cursor is left
                where the search started.
        """
        self.current = truncate_to_hour(self.current)
        origin = self.current

        while True:
            if (self.current.date() - origin.date()).days > self.max_days:
                logger.debug(
                    f"Gave up searching from {origin} after {self.max_days} days"
                )
                self.current = origin
                raise UnplaceableTask(task_id, self.max_days)

            hour = self.current.hour
            if hour < WINDOW_START_HOUR:
                self.current = self.current.replace(hour=WINDOW_START_HOUR)
                continue
            if hour >= WINDOW_END_HOUR:
                self.current = self._next_day()
                continue
            if not self._block_is_free(calendar, span_minutes):
                self.current += ONE_HOUR
                continue
            return self.current

    def advance_past(self, end):
        """Prime the cursor for the next task: jump to ``end``, truncated to the hour."""
        self.current = truncate_to_hour(end)
        return self.current

    def __repr__(self):
        return f"<SlotCursor at {self.current.isoformat()}>"
