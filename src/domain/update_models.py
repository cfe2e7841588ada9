"""Update models for partial entity edits."""

from pydantic import BaseModel

from src.domain.timestamps import UtcDatetime


class TaskUpdate(BaseModel):
    """Task edit payload; ``None`` or blank fields keep their current value."""

    title: str | None = None
    description: str | None = None
    deadline: UtcDatetime | None = None


class ProjectUpdate(BaseModel):
    """Project edit payload."""

    name: str | None = None
    description: str | None = None


class SprintUpdate(BaseModel):
    """Sprint edit payload."""

    name: str | None = None
    goal: str | None = None
    start_date: UtcDatetime | None = None
    deadline: UtcDatetime | None = None
