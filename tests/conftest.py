"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from src.core.repository import Repository
from src.domain.project import Project
from src.domain.task import Task
from src.domain.user import User
from tests.helpers import BASE_TIME


@pytest.fixture
def repository() -> Repository:
    """Provides a fresh, isolated repository for each test."""
    return Repository()


@pytest.fixture
def project(repository: Repository) -> Project:
    return repository.add_project(Project(name="Demo project"))


@pytest.fixture
def user(repository: Repository) -> User:
    return repository.add_user(User(name="Alice"))


@pytest.fixture
def make_task(repository: Repository, project: Project) -> Callable[..., Task]:
    """Factory creating tasks directly in the repository."""

    def _make(title: str = "Write docs", **fields: Any) -> Task:
        fields.setdefault("created_at", BASE_TIME)
        fields.setdefault("project_id", project.id)
        return repository.add_task(Task(title=title, **fields))

    return _make
