"""Project, user and task administration.

This module provides functions for:
- Registering users and creating/locking projects
- Creating and editing tasks inside projects
- Assigning tasks after running the ordered assignment rules
"""

import logging
from datetime import UTC, datetime

from pydantic import ValidationError

from src.core.errors import AssignmentRejected, InvariantViolation, NotFoundError, invariant_from_validation
from src.core.logging import span
from src.core.repository import Repository
from src.domain.project import Project
from src.domain.status import TaskStatus
from src.domain.task import Task
from src.domain.update_models import ProjectUpdate, TaskUpdate
from src.domain.user import User
from src.modules.tasks import service as task_service
from src.modules.tasks.assignment_rules import OutcomeKind, ValidationOutcome, validate_assignment


logger = logging.getLogger(__name__)


def add_user(repo: Repository, *, name: str) -> User:
    """Register a user.

    Raises:
        InvariantViolation: If the name is blank
    """
    with span("project_service.add_user"):
        try:
            user = User(name=name)
        except ValidationError as e:
            raise invariant_from_validation(e) from e
        repo.add_user(user)
        logger.info("Added user %s", user.id)
        return user


def get_user(repo: Repository, *, user_id: str) -> User:
    user = repo.users.get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def list_users(repo: Repository) -> list[User]:
    return list(repo.users.values())


def create_project(repo: Repository, *, name: str, description: str = "") -> Project:
    """Create an empty project.

    Raises:
        InvariantViolation: If the name is blank
    """
    with span("project_service.create_project"):
        try:
            project = Project(name=name, description=description)
        except ValidationError as e:
            raise invariant_from_validation(e) from e
        repo.add_project(project)
        logger.info("Created project %s", project.id)
        return project


def get_project(repo: Repository, *, project_id: str) -> Project:
    project = repo.projects.get(project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def list_projects(repo: Repository) -> list[Project]:
    return list(repo.projects.values())


def update_project(repo: Repository, *, project_id: str, update: ProjectUpdate) -> Project:
    """Edit a project's name and description; blank values are ignored.

    Raises:
        NotFoundError: If the project does not exist
        InvariantViolation: If the project is locked
    """
    project = get_project(repo, project_id=project_id)
    if project.is_locked:
        raise InvariantViolation(f"Project {project.name} is locked for editing")

    if update.name and update.name.strip():
        project.name = update.name
    if update.description is not None:
        project.description = update.description
    return project


def set_project_lock(repo: Repository, *, project_id: str, locked: bool) -> Project:
    project = get_project(repo, project_id=project_id)
    project.is_locked = locked
    return project


def create_task(
    repo: Repository,
    *,
    project_id: str,
    title: str,
    description: str = "",
    deadline: datetime | None = None,
    now: datetime | None = None,
) -> Task:
    """Create a task inside a project.

    Args:
        repo: Repository to add the task to
        project_id: Owning project
        title: Task title (must not be blank)
        description: Optional description
        deadline: Optional deadline
        now: Creation time override (defaults to current UTC time)

    Raises:
        NotFoundError: If the project does not exist
        InvariantViolation: If the title is blank
    """
    with span("project_service.create_task"):
        get_project(repo, project_id=project_id)
        try:
            task = Task(
                title=title,
                description=description,
                project_id=project_id,
                deadline=deadline,
                created_at=now or datetime.now(UTC),
            )
        except ValidationError as e:
            raise invariant_from_validation(e) from e

        repo.add_task(task)
        logger.info("Created task %s in project %s", task.id, project_id)
        return task


def update_task(repo: Repository, *, task_id: str, update: TaskUpdate) -> Task:
    """Edit a task's descriptive fields.

    Raises:
        TransitionError: If the task does not exist
        InvariantViolation: If the task is already done
    """
    task = task_service.get_task(repo, task_id=task_id)
    if task.status == TaskStatus.DONE:
        raise InvariantViolation("Completed tasks cannot be edited")

    if update.title and update.title.strip():
        task.title = update.title
    if update.description is not None:
        task.description = update.description
    if update.deadline is not None:
        task.deadline = update.deadline
    return task


def check_assignment(repo: Repository, *, task_id: str, user_id: str) -> ValidationOutcome:
    """Run the assignment rules without changing anything."""
    user = get_user(repo, user_id=user_id)
    task = task_service.get_task(repo, task_id=task_id)
    return validate_assignment(user, task, repo.tasks.values())


def assign_task(
    repo: Repository,
    *,
    task_id: str,
    user_id: str,
    confirm_warnings: bool = True,
) -> ValidationOutcome:
    """Assign a task after running the assignment rules.

    Args:
        repo: Repository holding the task and user
        task_id: Task to assign
        user_id: New assignee
        confirm_warnings: Proceed when a rule only warns

    Returns:
        The rule outcome (OK or WARNING) that allowed the assignment

    Raises:
        AssignmentRejected: On a FAILURE, or a WARNING that was not confirmed
    """
    with span("project_service.assign_task", task_id=task_id, user_id=user_id):
        outcome = check_assignment(repo, task_id=task_id, user_id=user_id)

        if outcome.kind == OutcomeKind.FAILURE:
            raise AssignmentRejected(outcome.message)
        if outcome.kind == OutcomeKind.WARNING and not confirm_warnings:
            raise AssignmentRejected(f"Assignment needs confirmation: {outcome.message}")

        task = repo.tasks[task_id]
        task.assignee_id = user_id
        logger.info("Assigned task %s to %s", task_id, user_id)
        return outcome
