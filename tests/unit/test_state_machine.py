"""Unit tests for the task lifecycle transition table."""

import itertools

import pytest

from src.core.errors import TransitionError, TransitionErrorCode
from src.domain.status import TaskOperation, TaskStatus
from src.domain.task import Task
from src.modules.tasks import history
from src.modules.tasks.state_machine import TRANSITIONS, apply_transition
from tests.helpers import BASE_TIME, at


def _task_in(status: TaskStatus) -> Task:
    """Drive a fresh task into ``status`` through legal transitions."""
    task = Task(title="Deploy", created_at=BASE_TIME)
    path = {
        TaskStatus.NOT_STARTED: [],
        TaskStatus.IN_PROGRESS: [TaskOperation.START],
        TaskStatus.DONE: [TaskOperation.START, TaskOperation.COMPLETE],
        TaskStatus.OVERDUE: [TaskOperation.MARK_OVERDUE],
    }[status]
    for day, operation in enumerate(path, start=2):
        apply_transition(task, operation=operation, actor_id="u1", now=at(day))
    return task


@pytest.mark.unit
class TestTransitionTable:
    """Tests for the shape of the transition table."""

    def test_every_status_operation_pair_is_defined(self):
        """Table covers the full status x operation matrix."""
        expected = set(itertools.product(TaskStatus, TaskOperation))
        assert set(TRANSITIONS) == expected

    def test_rules_are_either_errors_or_outcomes(self):
        """No rule both fails and moves the task."""
        for rule in TRANSITIONS.values():
            assert not (rule.error is not None and rule.to_status is not None)


@pytest.mark.unit
class TestStart:
    """Tests for the Start operation."""

    def test_start_from_not_started(self):
        """NotStarted -> InProgress and started_at is set."""
        task = _task_in(TaskStatus.NOT_STARTED)

        result = apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(2))

        assert task.status == TaskStatus.IN_PROGRESS
        assert task.started_at == at(2)
        assert result.from_status == TaskStatus.NOT_STARTED
        assert result.to_status == TaskStatus.IN_PROGRESS
        assert result.record_id == task.history[-1].id

    def test_started_at_never_precedes_created_at(self):
        """A clock behind created_at is clamped to created_at."""
        task = Task(title="Deploy", created_at=at(5))

        apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(4))

        assert task.started_at == at(5)

    def test_start_while_in_progress_fails(self):
        """Starting twice is rejected."""
        task = _task_in(TaskStatus.IN_PROGRESS)

        with pytest.raises(TransitionError) as exc_info:
            apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(3))

        assert exc_info.value.code == TransitionErrorCode.ALREADY_IN_PROGRESS

    def test_start_done_task_fails(self):
        """Completed tasks cannot restart."""
        task = _task_in(TaskStatus.DONE)

        with pytest.raises(TransitionError) as exc_info:
            apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(5))

        assert exc_info.value.code == TransitionErrorCode.CANNOT_RESTART_COMPLETED

    def test_start_overdue_without_started_at_sets_it(self):
        """Overdue task never started gets started_at on Start."""
        task = _task_in(TaskStatus.OVERDUE)
        assert task.started_at is None

        apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(6))

        assert task.status == TaskStatus.IN_PROGRESS
        assert task.started_at == at(6)

    def test_start_overdue_keeps_existing_started_at(self):
        """Restarting an overdue task keeps the original start time."""
        task = _task_in(TaskStatus.IN_PROGRESS)
        apply_transition(task, operation=TaskOperation.MARK_OVERDUE, actor_id="system", now=at(4))

        apply_transition(task, operation=TaskOperation.START, actor_id="u1", now=at(6))

        assert task.status == TaskStatus.IN_PROGRESS
        assert task.started_at == at(2)


@pytest.mark.unit
class TestComplete:
    """Tests for the Complete operation."""

    def test_complete_not_started_fails(self):
        """Cannot complete a task that was never started."""
        task = _task_in(TaskStatus.NOT_STARTED)

        with pytest.raises(TransitionError) as exc_info:
            apply_transition(task, operation=TaskOperation.COMPLETE, actor_id="u1", now=at(2))

        assert exc_info.value.code == TransitionErrorCode.TASK_NOT_STARTED
        assert task.history == []
        assert task.completed_at is None

    def test_complete_in_progress(self):
        """InProgress -> Done with completed_at."""
        task = _task_in(TaskStatus.IN_PROGRESS)

        apply_transition(task, operation=TaskOperation.COMPLETE, actor_id="u1", now=at(5))

        assert task.status == TaskStatus.DONE
        assert task.completed_at == at(5)

    def test_complete_overdue(self):
        """Overdue -> Done with completed_at."""
        task = _task_in(TaskStatus.OVERDUE)

        apply_transition(task, operation=TaskOperation.COMPLETE, actor_id="u1", now=at(7))

        assert task.status == TaskStatus.DONE
        assert task.completed_at == at(7)

    def test_complete_is_idempotent_on_done(self):
        """Second Complete is a silent success that changes nothing."""
        task = _task_in(TaskStatus.DONE)
        completed_at = task.completed_at
        history_length = len(task.history)

        result = apply_transition(task, operation=TaskOperation.COMPLETE, actor_id="u1", now=at(9))

        assert task.status == TaskStatus.DONE
        assert task.completed_at == completed_at
        assert len(task.history) == history_length
        assert result.record_id is None
        assert not result.changed


@pytest.mark.unit
class TestMarkOverdue:
    """Tests for the MarkOverdue operation."""

    @pytest.mark.parametrize("status", [TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS])
    def test_mark_open_task_overdue(self, status):
        """Open tasks move to Overdue."""
        task = _task_in(status)

        apply_transition(task, operation=TaskOperation.MARK_OVERDUE, actor_id="system", now=at(8))

        assert task.status == TaskStatus.OVERDUE
        assert task.history[-1].from_status == status
        assert task.history[-1].actor_id == "system"

    def test_mark_done_task_overdue_fails(self):
        """Completed tasks cannot become overdue."""
        task = _task_in(TaskStatus.DONE)

        with pytest.raises(TransitionError) as exc_info:
            apply_transition(task, operation=TaskOperation.MARK_OVERDUE, actor_id="system", now=at(8))

        assert exc_info.value.code == TransitionErrorCode.CANNOT_OVERDUE_COMPLETED

    def test_mark_overdue_again_records_self_transition(self):
        """Overdue -> Overdue stays put but is written to the ledger."""
        task = _task_in(TaskStatus.OVERDUE)
        history_length = len(task.history)

        result = apply_transition(task, operation=TaskOperation.MARK_OVERDUE, actor_id="system", now=at(9))

        assert task.status == TaskStatus.OVERDUE
        assert len(task.history) == history_length + 1
        assert task.history[-1].from_status == TaskStatus.OVERDUE
        assert task.history[-1].to_status == TaskStatus.OVERDUE
        assert result.record_id == task.history[-1].id


@pytest.mark.unit
class TestReopen:
    """Tests for the Reopen operation."""

    def test_reopen_done_task(self):
        """Done -> NotStarted and completed_at is cleared."""
        task = _task_in(TaskStatus.DONE)

        apply_transition(task, operation=TaskOperation.REOPEN, actor_id="u1", now=at(10))

        assert task.status == TaskStatus.NOT_STARTED
        assert task.completed_at is None
        assert task.history[-1].from_status == TaskStatus.DONE
        assert task.history[-1].to_status == TaskStatus.NOT_STARTED

    def test_reopen_not_started_is_noop(self):
        """Reopening a fresh task does nothing."""
        task = _task_in(TaskStatus.NOT_STARTED)

        result = apply_transition(task, operation=TaskOperation.REOPEN, actor_id="u1", now=at(2))

        assert task.status == TaskStatus.NOT_STARTED
        assert task.history == []
        assert result.record_id is None

    @pytest.mark.parametrize("status", [TaskStatus.IN_PROGRESS, TaskStatus.OVERDUE])
    def test_reopen_open_task_fails(self, status):
        """Only Done tasks can be reopened."""
        task = _task_in(status)
        history_length = len(task.history)

        with pytest.raises(TransitionError) as exc_info:
            apply_transition(task, operation=TaskOperation.REOPEN, actor_id="u1", now=at(8))

        assert exc_info.value.code == TransitionErrorCode.ILLEGAL_REOPEN
        assert task.status == status
        assert len(task.history) == history_length


@pytest.mark.unit
class TestLedgerAgreement:
    """Status always matches the most recent ledger entry."""

    def test_status_matches_last_entry_after_every_call(self):
        """Walk through a mixed sequence of calls, legal and illegal."""
        task = Task(title="Deploy", created_at=BASE_TIME)
        operations = [
            TaskOperation.COMPLETE,
            TaskOperation.START,
            TaskOperation.START,
            TaskOperation.MARK_OVERDUE,
            TaskOperation.MARK_OVERDUE,
            TaskOperation.START,
            TaskOperation.COMPLETE,
            TaskOperation.COMPLETE,
            TaskOperation.MARK_OVERDUE,
            TaskOperation.REOPEN,
        ]
        expected_growth = [0, 1, 0, 1, 1, 1, 1, 0, 0, 1]

        for day, (operation, growth) in enumerate(zip(operations, expected_growth, strict=True), start=2):
            before = len(task.history)
            try:
                apply_transition(task, operation=operation, actor_id="u1", now=at(day))
            except TransitionError:
                pass
            assert len(task.history) - before == growth
            assert history.last_status(task) == task.status

        timestamps = [entry.timestamp for entry in task.history]
        assert timestamps == sorted(timestamps)
