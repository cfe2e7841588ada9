"""Pure metric calculators folded into a report aggregate.

Each calculator takes the filtered tasks and the report clock and returns a
partial update holding only its own aggregate fields, so calculators can run
in any order.
"""

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

from src.domain.status import TaskStatus
from src.domain.task import Task


Calculator = Callable[[Sequence[Task], datetime], dict[str, Any]]


def calculate_progress(tasks: Sequence[Task], now: datetime) -> dict[str, Any]:
    """Total task count and share of Done tasks in percent."""
    total = len(tasks)
    done = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    percent_done = 100.0 * done / total if total > 0 else 0.0
    return {"total": total, "percent_done": percent_done}


def calculate_status_counts(tasks: Sequence[Task], now: datetime) -> dict[str, Any]:
    """Tasks per status; every status key is present."""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1
    return {"counts_by_status": counts}


def task_elapsed(task: Task, now: datetime) -> timedelta | None:
    """Time spent on a task, or None if it contributes nothing.

    Running tasks (InProgress, Overdue) are measured up to ``now``; Done
    tasks from start to completion. Non-positive durations are discarded.
    """
    duration = None
    if task.status in (TaskStatus.IN_PROGRESS, TaskStatus.OVERDUE):
        if task.started_at is not None:
            duration = now - task.started_at
    elif task.status == TaskStatus.DONE:
        if task.started_at is not None and task.completed_at is not None:
            duration = task.completed_at - task.started_at

    if duration is None or duration <= timedelta(0):
        return None
    return duration


def calculate_elapsed_time(tasks: Sequence[Task], now: datetime) -> dict[str, Any]:
    """Sum and arithmetic mean of per-task elapsed time."""
    durations = [d for d in (task_elapsed(t, now) for t in tasks) if d is not None]
    total = sum(durations, timedelta(0))
    average = total / len(durations) if durations else timedelta(0)
    return {"total_elapsed": total, "average_elapsed": average}


def calculate_deadline_compliance(tasks: Sequence[Task], now: datetime) -> dict[str, Any]:
    """Count Done tasks finished by their deadline, and late or overdue ones."""
    done_on_time = 0
    overdue = 0
    for task in tasks:
        if task.status == TaskStatus.DONE and task.completed_at is not None and task.deadline is not None:
            if task.completed_at <= task.deadline:
                done_on_time += 1
            else:
                overdue += 1
        elif task.status == TaskStatus.OVERDUE:
            overdue += 1
    return {"done_on_time": done_on_time, "overdue_count": overdue}


CALCULATORS: tuple[Calculator, ...] = (
    calculate_progress,
    calculate_status_counts,
    calculate_elapsed_time,
    calculate_deadline_compliance,
)


def run_calculators(
    tasks: Sequence[Task],
    now: datetime,
    calculators: Sequence[Calculator] = CALCULATORS,
) -> dict[str, Any]:
    """Fold every calculator's partial update into one field mapping."""
    fields: dict[str, Any] = {}
    for calculator in calculators:
        update = calculator(tasks, now)
        overlap = fields.keys() & update.keys()
        if overlap:
            msg = f"Calculator {calculator.__name__} overwrites fields: {sorted(overlap)}"
            raise ValueError(msg)
        fields.update(update)
    return fields
