"""Shared test utilities."""

from datetime import UTC, datetime

from src.domain.log import TransitionRecord
from src.domain.status import TaskStatus


BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


def at(day: int, hour: int = 9, minute: int = 0) -> datetime:
    """Return a fixed UTC moment in January 2024."""
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


def ledger(*steps: tuple[TaskStatus, datetime], actor_id: str = "u1") -> list[TransitionRecord]:
    """Build a history from ``(to_status, timestamp)`` steps, starting at NotStarted."""
    records = []
    previous = TaskStatus.NOT_STARTED
    for to_status, timestamp in steps:
        records.append(
            TransitionRecord(from_status=previous, to_status=to_status, actor_id=actor_id, timestamp=timestamp)
        )
        previous = to_status
    return records
