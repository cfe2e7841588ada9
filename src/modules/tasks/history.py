"""Append-only history ledger embedded in each task."""

from datetime import datetime

from src.domain.log import TransitionRecord
from src.domain.status import TaskStatus
from src.domain.task import Task
from src.domain.timestamps import as_utc


def record(
    task: Task,
    *,
    from_status: TaskStatus,
    to_status: TaskStatus,
    actor_id: str,
    now: datetime,
) -> str:
    """Append a transition record to ``task`` and return its id.

    The timestamp never goes backwards: a ``now`` earlier than the last entry
    is clamped to that entry's timestamp.
    """
    timestamp = as_utc(now)
    if task.history and task.history[-1].timestamp > timestamp:
        timestamp = task.history[-1].timestamp

    entry = TransitionRecord(
        from_status=from_status,
        to_status=to_status,
        actor_id=actor_id,
        timestamp=timestamp,
    )
    task.history.append(entry)
    return entry.id


def entries(task: Task) -> tuple[TransitionRecord, ...]:
    """Return the ledger oldest first."""
    return tuple(task.history)


def last_status(task: Task) -> TaskStatus:
    """Rebuild the current status from the ledger alone."""
    if not task.history:
        return TaskStatus.NOT_STARTED
    return task.history[-1].to_status
