"""JSON snapshot persistence for a repository.

Round-trips status, the full ordered history and every timestamp through
pydantic's JSON serialization.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from src.core.errors import InvariantViolation
from src.core.logging import span
from src.core.repository import Repository
from src.domain.project import Project, Sprint
from src.domain.report import ReportAggregate
from src.domain.task import Task
from src.domain.user import User


logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """Serializable image of a repository."""

    users: list[User] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    sprints: list[Sprint] = Field(default_factory=list)
    reports: list[ReportAggregate] = Field(default_factory=list)


def to_snapshot(repo: Repository) -> Snapshot:
    return Snapshot(
        users=list(repo.users.values()),
        projects=list(repo.projects.values()),
        tasks=list(repo.tasks.values()),
        sprints=list(repo.sprints.values()),
        reports=list(repo.reports),
    )


def from_snapshot(snapshot: Snapshot) -> Repository:
    repo = Repository()
    for user in snapshot.users:
        repo.add_user(user)
    for project in snapshot.projects:
        repo.add_project(project)
    for task in snapshot.tasks:
        repo.add_task(task)
    for sprint in snapshot.sprints:
        repo.add_sprint(sprint)
    for report in snapshot.reports:
        repo.add_report(report)
    return repo


def save_snapshot(repo: Repository, path: Path) -> Path:
    """Write the repository to ``path`` as indented JSON."""
    with span("storage.save_snapshot"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(to_snapshot(repo).model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved snapshot with %d tasks to %s", len(repo.tasks), path)
        return path


def load_snapshot(path: Path) -> Repository:
    """Load a repository from ``path``; a missing file yields an empty one.

    Raises:
        InvariantViolation: If the file does not hold a valid snapshot
    """
    with span("storage.load_snapshot"):
        if not path.exists():
            logger.debug("No snapshot at %s, starting empty", path)
            return Repository()
        try:
            snapshot = Snapshot.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            msg = f"Invalid snapshot file {path}: {e}"
            raise InvariantViolation(msg) from e
        return from_snapshot(snapshot)
