"""Report parameter and aggregate models."""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field

from src.domain.ids import new_id
from src.domain.status import TaskStatus
from src.domain.task import Task
from src.domain.timestamps import UtcDatetime


class ReportParameters(BaseModel):
    """What a report covers and how it should be rendered."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: UtcDatetime = Field(..., alias="from", description="Inclusive window start")
    to: UtcDatetime = Field(..., description="Inclusive window end")
    project_id: str | None = Field(default=None, description="Only tasks of this project")
    assignee_id: str | None = Field(default=None, description="Only tasks assigned to this user")
    statuses: tuple[TaskStatus, ...] = Field(default=(), description="Status allow-list; empty means all")
    output_format: str = Field(default="txt", description="Formatter key, passed through untouched")


class ReportAggregate(BaseModel):
    """Statistics computed over the tasks a report selected.

    Freezing is shallow: fields cannot be reassigned, but ``counts_by_status``
    is a plain dict and ``tasks`` holds ordinary ``Task`` models. The tasks
    are deep copies taken when the report was generated, so later lifecycle
    changes never reach them; callers must not edit either container in
    place. ``statistics()`` returns a fresh copy that is safe to modify.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id, description="Unique report ID")
    generated_at: UtcDatetime = Field(..., description="When the report was generated")
    parameters: ReportParameters
    tasks: tuple[Task, ...] = Field(..., description="Snapshot of the selected tasks")
    counts_by_status: dict[TaskStatus, int]
    total: int
    percent_done: float
    done_on_time: int
    overdue_count: int
    total_elapsed: timedelta
    average_elapsed: timedelta

    def statistics(self) -> dict[str, object]:
        """Return the computed statistics without id and timestamp."""
        return self.model_dump(exclude={"id", "generated_at", "parameters", "tasks"})
