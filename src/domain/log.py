"""Transition record model for the per-task audit trail."""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.ids import new_id
from src.domain.status import TaskStatus
from src.domain.timestamps import UtcDatetime


class TransitionRecord(BaseModel):
    """One entry of a task's history ledger.

    Records are frozen once appended; the ledger only ever grows.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id, description="Unique record ID")
    from_status: TaskStatus = Field(..., description="Status immediately before the change")
    to_status: TaskStatus = Field(..., description="Status after the change")
    actor_id: str = Field(..., description="User ID, or the system actor for automated transitions")
    timestamp: UtcDatetime = Field(..., description="When the transition was applied")
