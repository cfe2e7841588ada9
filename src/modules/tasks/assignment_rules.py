"""Ordered assignment rules evaluated before a task changes hands."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum

from src.core.config import settings
from src.domain.status import TaskStatus
from src.domain.task import Task
from src.domain.user import User


class OutcomeKind(StrEnum):
    """Result variant of an assignment rule."""

    OK = "ok"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of one rule; warnings still allow the assignment."""

    kind: OutcomeKind
    message: str = ""

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(OutcomeKind.OK)

    @classmethod
    def warning(cls, message: str) -> "ValidationOutcome":
        return cls(OutcomeKind.WARNING, message)

    @classmethod
    def failure(cls, message: str) -> "ValidationOutcome":
        return cls(OutcomeKind.FAILURE, message)

    @property
    def is_valid(self) -> bool:
        return self.kind != OutcomeKind.FAILURE


AssignmentRule = Callable[[User, Task, Iterable[Task]], ValidationOutcome]


def check_workload(assignee: User, task: Task, all_tasks: Iterable[Task]) -> ValidationOutcome:
    """Warn when the assignee already carries too many in-progress tasks."""
    active = sum(1 for t in all_tasks if t.assignee_id == assignee.id and t.status == TaskStatus.IN_PROGRESS)
    if active >= settings.workload_warning_threshold:
        return ValidationOutcome.warning(f"{assignee.name} already has {active} tasks in progress")
    return ValidationOutcome.ok()


def check_skills(assignee: User, task: Task, all_tasks: Iterable[Task]) -> ValidationOutcome:
    # No skill data is tracked yet; the rule keeps its place in the chain.
    return ValidationOutcome.ok()


DEFAULT_RULES: tuple[AssignmentRule, ...] = (check_workload, check_skills)


def validate_assignment(
    assignee: User,
    task: Task,
    all_tasks: Iterable[Task],
    *,
    rules: Iterable[AssignmentRule] = DEFAULT_RULES,
) -> ValidationOutcome:
    """Run ``rules`` in order and stop at the first non-OK outcome."""
    tasks = list(all_tasks)
    for rule in rules:
        outcome = rule(assignee, task, tasks)
        if outcome.kind != OutcomeKind.OK:
            return outcome
    return ValidationOutcome.ok()
