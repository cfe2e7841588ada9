"""Task domain model."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.domain.ids import new_id
from src.domain.log import TransitionRecord
from src.domain.status import TaskStatus
from src.domain.timestamps import UtcDatetime


class Task(BaseModel):
    """A unit of work tracked through its lifecycle.

    ``status`` and ``history`` are only changed by the state machine; every
    other caller treats them as read-only. ``status`` always equals the
    ``to_status`` of the last history entry (NotStarted for an empty history),
    and history timestamps never decrease.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id, description="Unique task ID")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    project_id: str | None = Field(default=None, description="Owning project ID")
    assignee_id: str | None = Field(default=None, description="Assigned user ID")
    created_at: UtcDatetime = Field(..., description="Creation timestamp")
    started_at: UtcDatetime | None = Field(default=None, description="When work first started")
    completed_at: UtcDatetime | None = Field(default=None, description="When the task was completed")
    deadline: UtcDatetime | None = Field(default=None, description="Deadline for completion")
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED, description="Current lifecycle state")
    history: list[TransitionRecord] = Field(default_factory=list, description="Append-only transition ledger")

    @field_validator("title")
    @classmethod
    def validate_title_present(cls, v: str) -> str:
        """Reject blank titles."""
        if not v.strip():
            raise ValueError("Task title cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_history_agrees(self) -> Self:
        """Check status against the ledger and the ledger's time order."""
        expected = self.history[-1].to_status if self.history else TaskStatus.NOT_STARTED
        if self.status != expected:
            raise ValueError(f"Task status {self.status} does not match history ({expected})")

        for previous, entry in zip(self.history, self.history[1:]):
            if entry.timestamp < previous.timestamp:
                raise ValueError("Task history timestamps must not decrease")
        return self
