from studyplan.extensions import create_logger
from studyplan.src.scheduling.placer import DeadlineMissed

logger = create_logger(__name__, level="DEBUG")


def find_deadline_misses(assignments, tasks):
    """
    Report placed tasks whose planned end falls after their own deadline.

    This is a read-only pass over a finished placement; it never moves or
    drops an assignment. Tasks without a deadline are never reported.

    Args:
        assignments: Assignment objects from a Placer run
        tasks: the tasks that were scheduled (mappings or objects with
            ``id`` and ``deadline``)

    Returns:
        list of DeadlineMissed, in assignment order
    """
    deadlines = {}
    for task in tasks:
        if isinstance(task, dict):
            deadlines[task.get("id")] = task.get("deadline")
        else:
            deadlines[task.id] = getattr(task, "deadline", None)

    misses = []
    for assignment in assignments:
        deadline = deadlines.get(assignment.task_id)
        if deadline is not None and assignment.planned_end > deadline:
            logger.warning(
                f"Task {assignment.task_id} planned to end {assignment.planned_end}, "
                f"after its deadline {deadline}"
            )
            misses.append(
                DeadlineMissed(assignment.task_id, deadline, assignment.planned_end)
            )
    return misses
