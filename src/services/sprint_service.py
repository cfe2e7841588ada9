"""Sprint bookkeeping: participants, planned tasks and sprint closure."""

import logging
from datetime import UTC, datetime

from pydantic import ValidationError

from src.core.errors import InvariantViolation, NotFoundError, invariant_from_validation
from src.core.logging import span
from src.core.repository import Repository
from src.domain.project import Sprint
from src.domain.task import Task
from src.domain.update_models import SprintUpdate
from src.modules.tasks import service as task_service
from src.services import project_service


logger = logging.getLogger(__name__)


def create_sprint(
    repo: Repository,
    *,
    name: str,
    goal: str = "",
    start_date: datetime,
    deadline: datetime | None = None,
) -> Sprint:
    """Create an active sprint.

    Raises:
        InvariantViolation: If the name is blank
    """
    with span("sprint_service.create_sprint"):
        try:
            sprint = Sprint(name=name, goal=goal, start_date=start_date, deadline=deadline)
        except ValidationError as e:
            raise invariant_from_validation(e) from e
        repo.add_sprint(sprint)
        logger.info("Created sprint %s", sprint.id)
        return sprint


def get_sprint(repo: Repository, *, sprint_id: str) -> Sprint:
    sprint = repo.sprints.get(sprint_id)
    if sprint is None:
        raise NotFoundError("Sprint", sprint_id)
    return sprint


def list_sprints(repo: Repository) -> list[Sprint]:
    return list(repo.sprints.values())


def add_participant(repo: Repository, *, sprint_id: str, user_id: str) -> Sprint:
    sprint = get_sprint(repo, sprint_id=sprint_id)
    project_service.get_user(repo, user_id=user_id)
    if user_id not in sprint.participant_ids:
        sprint.participant_ids.append(user_id)
    return sprint


def remove_participant(repo: Repository, *, sprint_id: str, user_id: str) -> Sprint:
    sprint = get_sprint(repo, sprint_id=sprint_id)
    if user_id in sprint.participant_ids:
        sprint.participant_ids.remove(user_id)
    return sprint


def add_task(repo: Repository, *, sprint_id: str, task_id: str) -> Sprint:
    """Plan a task into a sprint; duplicates are ignored.

    Raises:
        NotFoundError: If the sprint does not exist
        TransitionError: If the task does not exist
        InvariantViolation: If the sprint is already completed
    """
    sprint = get_sprint(repo, sprint_id=sprint_id)
    task_service.get_task(repo, task_id=task_id)
    if sprint.is_completed:
        raise InvariantViolation("Cannot add tasks to a completed sprint")
    if task_id not in sprint.task_ids:
        sprint.task_ids.append(task_id)
    return sprint


def remove_task(repo: Repository, *, sprint_id: str, task_id: str) -> Sprint:
    sprint = get_sprint(repo, sprint_id=sprint_id)
    if task_id in sprint.task_ids:
        sprint.task_ids.remove(task_id)
    return sprint


def update_sprint(repo: Repository, *, sprint_id: str, update: SprintUpdate) -> Sprint:
    """Edit sprint parameters; blank or missing values are ignored.

    Raises:
        InvariantViolation: If the sprint is already completed
    """
    sprint = get_sprint(repo, sprint_id=sprint_id)
    if sprint.is_completed:
        raise InvariantViolation("Cannot change a completed sprint")

    if update.name and update.name.strip():
        sprint.name = update.name
    if update.goal is not None:
        sprint.goal = update.goal
    if update.start_date is not None:
        sprint.start_date = update.start_date
    if update.deadline is not None:
        sprint.deadline = update.deadline
    return sprint


def complete_sprint(repo: Repository, *, sprint_id: str, now: datetime | None = None) -> Sprint:
    sprint = get_sprint(repo, sprint_id=sprint_id)
    sprint.is_active = False
    sprint.is_completed = True
    sprint.end_date = now or datetime.now(UTC)
    logger.info("Completed sprint %s", sprint_id)
    return sprint


def get_sprint_tasks(repo: Repository, *, sprint_id: str) -> list[Task]:
    """Return the sprint's tasks that still exist, in planning order."""
    sprint = get_sprint(repo, sprint_id=sprint_id)
    return [repo.tasks[tid] for tid in sprint.task_ids if tid in repo.tasks]


def get_user_sprints(repo: Repository, *, user_id: str) -> list[Sprint]:
    return [s for s in repo.sprints.values() if user_id in s.participant_ids]
