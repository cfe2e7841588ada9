"""Domain models and DTOs."""

from src.domain.log import TransitionRecord
from src.domain.project import Project, Sprint
from src.domain.report import ReportAggregate, ReportParameters
from src.domain.status import TaskOperation, TaskStatus
from src.domain.task import Task
from src.domain.update_models import ProjectUpdate, SprintUpdate, TaskUpdate
from src.domain.user import User


__all__ = [
    "Project",
    "ProjectUpdate",
    "ReportAggregate",
    "ReportParameters",
    "Sprint",
    "SprintUpdate",
    "Task",
    "TaskOperation",
    "TaskStatus",
    "TaskUpdate",
    "TransitionRecord",
    "User",
]
