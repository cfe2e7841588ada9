"""Unit tests for project_service module."""

import pytest

from src.core.errors import AssignmentRejected, InvariantViolation, NotFoundError, TransitionError
from src.domain.status import TaskStatus
from src.domain.update_models import ProjectUpdate, TaskUpdate
from src.modules.tasks import service as task_service
from src.modules.tasks.assignment_rules import OutcomeKind
from src.services import project_service
from tests.helpers import at


class TestUsersAndProjects:
    """Test user registration and project administration."""

    def test_add_user_strips_name(self, repository):
        """Names are stored trimmed."""
        user = project_service.add_user(repository, name="  Alice  ")

        assert user.name == "Alice"
        assert project_service.get_user(repository, user_id=user.id) is user

    def test_add_user_rejects_blank_name(self, repository):
        """Blank names raise InvariantViolation."""
        with pytest.raises(InvariantViolation, match="User name cannot be empty"):
            project_service.add_user(repository, name="   ")

        assert project_service.list_users(repository) == []

    def test_get_missing_user(self, repository):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            project_service.get_user(repository, user_id="ghost")

    def test_create_project(self, repository):
        """Projects start unlocked and empty."""
        project = project_service.create_project(repository, name="Website", description="Relaunch")

        assert project_service.list_projects(repository) == [project]
        assert not project.is_locked
        assert project.task_ids == []

    def test_create_project_rejects_blank_name(self, repository):
        """Blank project names are invalid."""
        with pytest.raises(InvariantViolation):
            project_service.create_project(repository, name="")

    def test_update_project(self, repository, project):
        """Blank names are ignored, descriptions replaced."""
        project_service.update_project(
            repository, project_id=project.id, update=ProjectUpdate(name="  ", description="New")
        )

        assert project.name == "Demo project"
        assert project.description == "New"

    def test_locked_project_rejects_edits(self, repository, project):
        """Locked projects cannot be edited until unlocked."""
        project_service.set_project_lock(repository, project_id=project.id, locked=True)

        with pytest.raises(InvariantViolation, match="locked"):
            project_service.update_project(repository, project_id=project.id, update=ProjectUpdate(name="X"))

        project_service.set_project_lock(repository, project_id=project.id, locked=False)
        project_service.update_project(repository, project_id=project.id, update=ProjectUpdate(name="X"))
        assert project.name == "X"


class TestTasks:
    """Test task creation and editing."""

    def test_create_task(self, repository, project):
        """New tasks are NotStarted, have no history and join their project."""
        task = project_service.create_task(
            repository, project_id=project.id, title="Write docs", deadline=at(5), now=at(1)
        )

        assert task.status == TaskStatus.NOT_STARTED
        assert task.history == []
        assert task.created_at == at(1)
        assert task.deadline == at(5)
        assert repository.project_tasks(project.id) == [task]

    def test_create_task_in_missing_project(self, repository):
        """Tasks need an existing project."""
        with pytest.raises(NotFoundError):
            project_service.create_task(repository, project_id="ghost", title="Orphan")

    def test_create_task_rejects_blank_title(self, repository, project):
        """Blank titles are invalid."""
        with pytest.raises(InvariantViolation, match="Task title cannot be empty"):
            project_service.create_task(repository, project_id=project.id, title="  ")

        assert repository.tasks == {}

    def test_update_task(self, repository, make_task):
        """Descriptive fields change, status and history do not."""
        task = make_task()

        project_service.update_task(
            repository, task_id=task.id, update=TaskUpdate(title="Write more docs", deadline=at(9))
        )

        assert task.title == "Write more docs"
        assert task.deadline == at(9)
        assert task.status == TaskStatus.NOT_STARTED
        assert task.history == []

    def test_done_task_cannot_be_edited(self, repository, make_task):
        """Completed tasks are read-only."""
        task = make_task()
        task_service.start(repository, task_id=task.id, actor_id="u", now=at(2))
        task_service.complete(repository, task_id=task.id, actor_id="u", now=at(3))

        with pytest.raises(InvariantViolation):
            project_service.update_task(repository, task_id=task.id, update=TaskUpdate(title="Late edit"))

    def test_update_missing_task(self, repository):
        """Editing an unknown task fails like a transition would."""
        with pytest.raises(TransitionError):
            project_service.update_task(repository, task_id="ghost", update=TaskUpdate(title="x"))


class TestAssignTask:
    """Test assignment with rule validation."""

    def test_assigns_when_rules_pass(self, repository, make_task, user):
        """OK outcome sets the assignee."""
        task = make_task()

        outcome = project_service.assign_task(repository, task_id=task.id, user_id=user.id)

        assert outcome.kind == OutcomeKind.OK
        assert task.assignee_id == user.id

    def test_warning_confirmed_by_default(self, repository, make_task, user, workload_threshold):
        """A workload warning still assigns when confirmed."""
        workload_threshold(1)
        busy = make_task("Busy", assignee_id=user.id)
        task_service.start(repository, task_id=busy.id, actor_id=user.id, now=at(2))
        task = make_task("Another")

        outcome = project_service.assign_task(repository, task_id=task.id, user_id=user.id)

        assert outcome.kind == OutcomeKind.WARNING
        assert task.assignee_id == user.id

    def test_unconfirmed_warning_rejects(self, repository, make_task, user, workload_threshold):
        """Without confirmation a warning aborts the assignment."""
        workload_threshold(1)
        busy = make_task("Busy", assignee_id=user.id)
        task_service.start(repository, task_id=busy.id, actor_id=user.id, now=at(2))
        task = make_task("Another")

        with pytest.raises(AssignmentRejected, match="confirmation"):
            project_service.assign_task(repository, task_id=task.id, user_id=user.id, confirm_warnings=False)

        assert task.assignee_id is None

    def test_unknown_user(self, repository, make_task):
        """Assigning to an unknown user fails."""
        task = make_task()

        with pytest.raises(NotFoundError):
            project_service.assign_task(repository, task_id=task.id, user_id="ghost")
