"""In-memory repository owned by the caller and passed into every operation."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from src.core.errors import InvariantViolation
from src.domain.project import Project, Sprint
from src.domain.report import ReportAggregate
from src.domain.task import Task
from src.domain.user import User


logger = logging.getLogger(__name__)


class Repository:
    """Holds users, projects, tasks, sprints and generated reports.

    Nothing here is global: each caller (CLI run, test) builds its own
    instance, so fixtures stay isolated.
    """

    def __init__(self) -> None:
        """Initialize empty collections."""
        self.users: dict[str, User] = {}
        self.projects: dict[str, Project] = {}
        self.tasks: dict[str, Task] = {}
        self.sprints: dict[str, Sprint] = {}
        self.reports: list[ReportAggregate] = []
        self._task_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def add_project(self, project: Project) -> Project:
        self.projects[project.id] = project
        return project

    def add_task(self, task: Task) -> Task:
        self.tasks[task.id] = task
        if task.project_id and task.project_id in self.projects:
            project = self.projects[task.project_id]
            if task.id not in project.task_ids:
                project.task_ids.append(task.id)
        return task

    def add_sprint(self, sprint: Sprint) -> Sprint:
        self.sprints[sprint.id] = sprint
        return sprint

    def add_report(self, report: ReportAggregate) -> ReportAggregate:
        self.reports.append(report)
        return report

    def find_task(self, task_id: str) -> Task | None:
        """Return the task with this id, or None."""
        return self.tasks.get(task_id)

    def find_task_by_prefix(self, prefix: str) -> Task | None:
        """Return the only task whose id starts with ``prefix``, or None if none does.

        Raises:
            InvariantViolation: If more than one task id starts with ``prefix``
        """
        if not prefix:
            return None
        matches = [t for t in self.tasks.values() if t.id.startswith(prefix)]
        if len(matches) > 1:
            raise InvariantViolation(f"Ambiguous task id prefix {prefix!r} matches {len(matches)} tasks")
        return matches[0] if matches else None

    def project_tasks(self, project_id: str) -> list[Task]:
        """Return the tasks of a project in creation order."""
        project = self.projects.get(project_id)
        if project is None:
            return []
        return [self.tasks[tid] for tid in project.task_ids if tid in self.tasks]

    @contextmanager
    def task_lock(self, task_id: str) -> Iterator[None]:
        """Serialize read-decide-append-write sequences on one task."""
        with self._locks_guard:
            lock = self._task_locks.setdefault(task_id, threading.Lock())
        with lock:
            yield
