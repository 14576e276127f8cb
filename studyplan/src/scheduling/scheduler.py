from dataclasses import replace
from datetime import datetime

import pytz
from flask import current_app

from studyplan.extensions import create_logger
from studyplan.src.scheduling.busy_calendar import BusyCalendar
from studyplan.src.scheduling.chronotype import ChronotypePolicy
from studyplan.src.scheduling.deadlines import find_deadline_misses
from studyplan.src.scheduling.placer import DEFAULT_SESSION_MINS, Placer
from studyplan.src.scheduling.slot_cursor import DEFAULT_MAX_DAY_WALK
from studyplan.src.scheduling.task_queue import TaskQueue
from studyplan.src.scheduling.utils import (
    get_busy_slots,
    get_pending_tasks,
    get_profile,
    persist_planned_times,
    user_schedule_lock,
)
from studyplan.src.utils import local_to_utc, resolve_timezone, utc_to_local

logger = create_logger(__name__, level="DEBUG")


def _profile_value(profile, name):
    if profile is None:
        return None
    if isinstance(profile, dict):
        return profile.get(name)
    return getattr(profile, name, None)


def schedule_tasks(pending_tasks, busy_slots, profile, now, max_days=DEFAULT_MAX_DAY_WALK):
    """
    Place pending tasks on free hours of the week, earliest deadline first.

    This is a pure function: it reads nothing but its arguments and the
    same input always yields the same result.

    Args:
        pending_tasks: tasks with ``id`` and ``deadline`` (and optionally
            ``status``; anything not pending is ignored), as mappings or objects
        busy_slots: fixed weekly commitments with ``day_of_week`` (Monday=0),
            ``start_hour`` and exclusive ``end_hour``
        profile: ``chronotype`` and ``preferred_session_mins``, either may be
            missing; None means all defaults
        now: where the run starts; all times share its clock (naive local
            wall-clock time in practice)
        max_days: how many days the search for one task may walk forward

    Returns:
        PlacementResult with assignments in queue order, ids of tasks that
        hit the day-walk bound, and deadline warnings

    Raises:
        InvalidBusySlot: if any busy slot is malformed (nothing is placed)
        ValueError: if the session length is unusable
    """
    calendar = BusyCalendar(busy_slots)
    policy = ChronotypePolicy(_profile_value(profile, "chronotype"))

    session_mins = _profile_value(profile, "preferred_session_mins")
    if session_mins is None:
        session_mins = DEFAULT_SESSION_MINS

    queue = TaskQueue(pending_tasks)
    placer = Placer(
        calendar,
        preferred_start_hour=policy.preferred_start_hour,
        session_mins=session_mins,
        max_days=max_days,
    )

    logger.debug(
        f"Scheduling {len(queue)} tasks from {now} "
        f"({policy.chronotype}, {session_mins} min sessions, {len(calendar)} busy hours)"
    )
    result = placer.place(queue, now)
    result.deadline_warnings = find_deadline_misses(result.assignments, queue)

    if result.unplaceable:
        logger.warning(
            f"{len(result.unplaceable)} tasks could not be placed within {max_days} days"
        )
    return result


def _result_to_utc(result, tz):
    result.assignments = [
        replace(
            a,
            planned_start=local_to_utc(a.planned_start, tz),
            planned_end=local_to_utc(a.planned_end, tz),
        )
        for a in result.assignments
    ]
    result.deadline_warnings = [
        replace(
            w,
            deadline=local_to_utc(w.deadline, tz),
            planned_end=local_to_utc(w.planned_end, tz),
        )
        for w in result.deadline_warnings
    ]
    return result


def generate_schedule(user_id, now=None, max_days=None):
    """
    Recompute and persist planned times for all of a user's pending tasks.

    This is the entry point used by the API. It fetches the user's pending
    tasks, busy slots and profile, places the tasks in the user's local time
    zone, and writes planned start/end (as naive UTC) back to the database.
    The whole fetch -> place -> persist sequence holds the user's lock.

    Args:
        user_id: whose tasks to schedule
        now: start of the run as naive UTC (or an aware datetime); defaults
            to the current time
        max_days: day-walk bound; defaults to MAX_DAY_WALK_DAYS from config

    Returns:
        tuple: (result, tasks)
            - result: PlacementResult with times in naive UTC
            - tasks: the Task objects that were updated
    """
    if now is None:
        now = datetime.utcnow()
    elif now.tzinfo is not None:
        now = now.astimezone(pytz.utc).replace(tzinfo=None)
    if max_days is None:
        max_days = current_app.config["MAX_DAY_WALK_DAYS"]

    with user_schedule_lock(user_id):
        tasks = get_pending_tasks(user_id)
        busy_slots = get_busy_slots(user_id)
        profile = get_profile(user_id)

        tz_name = _profile_value(profile, "timezone") or current_app.config["DEFAULT_TIMEZONE"]
        tz = resolve_timezone(tz_name)

        local_tasks = [
            {"id": task.id, "deadline": utc_to_local(task.deadline, tz)}
            for task in tasks
        ]
        local_profile = {
            "chronotype": _profile_value(profile, "chronotype"),
            "preferred_session_mins": _profile_value(profile, "preferred_session_mins"),
        }

        logger.debug(f"Running schedule for user {user_id} at {now} UTC ({tz_name})")
        result = schedule_tasks(
            local_tasks,
            busy_slots,
            local_profile,
            utc_to_local(now, tz),
            max_days=max_days,
        )
        result = _result_to_utc(result, tz)
        updated_tasks = persist_planned_times(user_id, result)

    return result, updated_tasks
