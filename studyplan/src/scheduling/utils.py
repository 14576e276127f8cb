import threading
import weakref
from contextlib import contextmanager

from studyplan.extensions import create_logger, db
from studyplan.models import BusySlot, Profile, Task
from studyplan.src.scheduling.task_queue import PENDING

logger = create_logger(__name__, level="DEBUG")

# Entries vanish once no run holds or waits on the lock
_user_locks = weakref.WeakValueDictionary()
_user_locks_guard = threading.Lock()


@contextmanager
def user_schedule_lock(user_id):
    """
    Serialize fetch -> place -> persist for one user.

    Runs for different users hold different locks and proceed in parallel.
    """
    with _user_locks_guard:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _user_locks[user_id] = lock
    with lock:
        yield


def get_pending_tasks(user_id):
    """Pending tasks of a user, in creation order (ties broken by id)."""
    return (
        Task.query.filter(Task.user_id == user_id, Task.status == PENDING)
        .order_by(Task.created_at.asc(), Task.id.asc())
        .all()
    )


def get_busy_slots(user_id):
    return (
        BusySlot.query.filter(BusySlot.user_id == user_id)
        .order_by(BusySlot.day_of_week, BusySlot.start_hour, BusySlot.id)
        .all()
    )


def get_profile(user_id):
    """The user's profile, or None when they never saved one."""
    return db.session.get(Profile, user_id)


def persist_planned_times(user_id, result):
    """
    Write a placement result back onto the user's tasks and commit.

    Placed tasks get their planned start/end overwritten; tasks reported
    unplaceable lose any plan left over from an earlier run.

    Returns:
        list of the updated Task objects, in assignment order
    """
    task_ids = list(result.by_task_id()) + list(result.unplaceable)
    tasks_by_id = {
        task.id: task
        for task in Task.query.filter(
            Task.user_id == user_id, Task.id.in_(task_ids)
        ).all()
    }

    updated = []
    for assignment in result.assignments:
        task = tasks_by_id.get(assignment.task_id)
        if task is None:
            # Deleted while the run was placing it
            logger.warning(
                f"Task {assignment.task_id} no longer exists for user {user_id}, skipping"
            )
            continue
        task.set_plan(assignment.planned_start, assignment.planned_end)
        updated.append(task)

    for task_id in result.unplaceable:
        task = tasks_by_id.get(task_id)
        if task is not None:
            task.clear_plan()
            updated.append(task)

    db.session.commit()
    logger.debug(f"Persisted {len(result.assignments)} planned tasks for user {user_id}")
    return updated
