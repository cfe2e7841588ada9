"""Report filter: decides which tasks a report covers.

Rules are evaluated per task in this order, later rules overriding earlier
ones:

1. ``project_id`` / ``assignee_id`` mismatch excludes the task.
2. A non-empty ``statuses`` allow-list excludes tasks in other statuses.
3. The task is tentatively included if it was created, touched by any
   history entry, or (when Done) completed inside ``[from, to]``.
4. A Done task completed before ``from`` is always excluded, even if an
   earlier rule matched.
"""

from collections.abc import Iterable
from datetime import datetime

from src.domain.report import ReportParameters
from src.domain.status import TaskStatus
from src.domain.task import Task


def _in_window(moment: datetime | None, parameters: ReportParameters) -> bool:
    return moment is not None and parameters.from_ <= moment <= parameters.to


def _matches_scope(task: Task, parameters: ReportParameters) -> bool:
    if parameters.project_id is not None and task.project_id != parameters.project_id:
        return False
    if parameters.assignee_id is not None and task.assignee_id != parameters.assignee_id:
        return False
    return not (parameters.statuses and task.status not in parameters.statuses)


def _touched_in_window(task: Task, parameters: ReportParameters) -> bool:
    if _in_window(task.created_at, parameters):
        return True
    if any(_in_window(entry.timestamp, parameters) for entry in task.history):
        return True
    return task.status == TaskStatus.DONE and _in_window(task.completed_at, parameters)


def _completed_before_window(task: Task, parameters: ReportParameters) -> bool:
    return (
        task.status == TaskStatus.DONE
        and task.completed_at is not None
        and task.completed_at < parameters.from_
    )


def include_task(task: Task, parameters: ReportParameters) -> bool:
    """Return True if ``task`` belongs in a report built from ``parameters``."""
    if not _matches_scope(task, parameters):
        return False
    in_period = _touched_in_window(task, parameters)
    if _completed_before_window(task, parameters):
        in_period = False
    return in_period


def filter_tasks(tasks: Iterable[Task], parameters: ReportParameters) -> list[Task]:
    """Select the in-scope tasks, preserving input order."""
    return [task for task in tasks if include_task(task, parameters)]
