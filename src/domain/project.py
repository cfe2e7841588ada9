"""Project and sprint domain models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.ids import new_id
from src.domain.timestamps import UtcDatetime


def _require_text(value: str, label: str) -> str:
    if not value.strip():
        raise ValueError(f"{label} cannot be empty")
    return value


class Project(BaseModel):
    """A named group of tasks."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id, description="Unique project ID")
    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project description")
    is_locked: bool = Field(default=False, description="Locked projects reject edits")
    task_ids: list[str] = Field(default_factory=list, description="IDs of tasks created in this project")

    @field_validator("name")
    @classmethod
    def validate_name_present(cls, v: str) -> str:
        """Reject blank project names."""
        return _require_text(v, "Project name")


class Sprint(BaseModel):
    """A time-boxed selection of tasks and participants."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id, description="Unique sprint ID")
    name: str = Field(..., description="Sprint name")
    goal: str = Field(default="", description="Sprint goal")
    start_date: UtcDatetime = Field(..., description="Sprint start")
    end_date: UtcDatetime | None = Field(default=None, description="When the sprint was completed")
    deadline: UtcDatetime | None = Field(default=None, description="Planned sprint end")
    is_active: bool = Field(default=True, description="Whether the sprint is running")
    is_completed: bool = Field(default=False, description="Whether the sprint was closed")
    participant_ids: list[str] = Field(default_factory=list, description="Participating user IDs")
    task_ids: list[str] = Field(default_factory=list, description="Task IDs planned for this sprint")

    @field_validator("name")
    @classmethod
    def validate_name_present(cls, v: str) -> str:
        """Reject blank sprint names."""
        return _require_text(v, "Sprint name")
