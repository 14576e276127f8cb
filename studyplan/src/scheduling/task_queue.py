PENDING = "pending"
COMPLETED = "completed"
DROPPED = "dropped"

TASK_STATUSES = (PENDING, COMPLETED, DROPPED)


def _task_field(task, name, default=None):
    if isinstance(task, dict):
        return task.get(name, default)
    return getattr(task, name, default)


def _deadline_key(task):
    deadline = _task_field(task, "deadline")
    # Tasks without a deadline go last
    return (deadline is None, deadline)


class TaskQueue:
    """
    Pending tasks in the order the placer attempts them.

    Only ``pending`` tasks are kept (a task with no status at all counts as
    pending). They are ordered earliest deadline first; ``sorted`` is stable,
    so tasks sharing a deadline keep their input order.
    """

    def __init__(self, tasks=()):
        pending = [
            task for task in tasks if _task_field(task, "status", PENDING) == PENDING
        ]
        self._tasks = tuple(sorted(pending, key=_deadline_key))

    @property
    def tasks(self):
        return self._tasks

    def __iter__(self):
        return iter(self._tasks)

    def __len__(self):
        return len(self._tasks)

    def __getitem__(self, index):
        return self._tasks[index]
