import re
from datetime import datetime

import pytz

# Monday=0, matching datetime.weekday() and BusySlot.day_of_week
DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def parse_iso_datetime(datetime_str):
    """
    Parse an ISO format datetime string into a naive UTC datetime object.
    This function will consistently handle:
    - UTC ISO strings with 'Z' suffix
    - ISO strings with explicit timezone offsets
    - Naive ISO strings (assuming they represent UTC times)
    - Bare dates (midnight UTC)
    """
    if not datetime_str:
        return None

    # Handle the format with 7 decimal places in the fractional seconds
    if re.match(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{7}", datetime_str):
        # Truncate to 6 decimal places which is the maximum Python's fromisoformat can handle
        datetime_str = re.sub(r"(\.\d{6})\d", r"\1", datetime_str, count=1)

    # Parse the ISO string - handling both timezone-aware and naive formats
    if "Z" in datetime_str or "+" in datetime_str[10:] or "-" in datetime_str[10:]:
        dt = datetime.fromisoformat(datetime_str.replace("Z", "+00:00"))
    else:
        # String is naive - assume it's UTC already
        dt = pytz.utc.localize(datetime.fromisoformat(datetime_str))

    # Convert to UTC and make it naive for storage
    return dt.astimezone(pytz.utc).replace(tzinfo=None)


def resolve_timezone(name):
    """pytz zone for ``name``; raises ValueError for unknown zones."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {name}")


def utc_to_local(dt, tz):
    """Naive UTC -> naive local wall-clock time in ``tz``."""
    if dt is None:
        return None
    return pytz.utc.localize(dt).astimezone(tz).replace(tzinfo=None)


def local_to_utc(dt, tz):
    """Naive local wall-clock time in ``tz`` -> naive UTC."""
    if dt is None:
        return None
    # is_dst=False resolves ambiguous/nonexistent DST wall times to standard time
    return tz.localize(dt, is_dst=False).astimezone(pytz.utc).replace(tzinfo=None)


def weekday_from_sunday_index(day):
    """Convert a Sunday=0 day index (JavaScript getDay style) to Monday=0."""
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise ValueError(f"Day index must be an integer in 0..6, got {day!r}")
    return (day + 6) % 7


def day_name_to_index(name):
    """'Monday' / 'mon' -> 0 ... 'Sunday' / 'sun' -> 6."""
    key = str(name).strip().lower()
    for i, day_name in enumerate(DAY_NAMES):
        if key in (day_name.lower(), day_name[:3].lower()):
            return i
    raise ValueError(f"Unknown day name: {name!r}")


def collapse_busy_cells(cells):
    """
    Turn a painted weekly grid into busy-slot ranges.

    Args:
        cells: mapping of "<day>-<hour>" keys (Monday=0) to booleans; only
            truthy cells count

    Returns:
        list of {"day_of_week", "start_hour", "end_hour"} dicts with runs of
        consecutive hours merged, ordered by day then hour

    Example:
        {"0-9": True, "0-10": True, "0-14": True} ->
        [{"day_of_week": 0, "start_hour": 9, "end_hour": 11},
         {"day_of_week": 0, "start_hour": 14, "end_hour": 15}]
    """
    hours_by_day = {}
    for key, busy in cells.items():
        if not busy:
            continue
        try:
            day_str, hour_str = str(key).split("-")
            day, hour = int(day_str), int(hour_str)
        except ValueError:
            raise ValueError(f"Busy cell key must look like '<day>-<hour>', got {key!r}")
        hours_by_day.setdefault(day, set()).add(hour)

    slots = []
    for day in sorted(hours_by_day):
        hours = sorted(hours_by_day[day])
        run_start = run_end = hours[0]
        for hour in hours[1:]:
            if hour == run_end + 1:
                run_end = hour
                continue
            slots.append({"day_of_week": day, "start_hour": run_start, "end_hour": run_end + 1})
            run_start = run_end = hour
        slots.append({"day_of_week": day, "start_hour": run_start, "end_hour": run_end + 1})
    return slots
