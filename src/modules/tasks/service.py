"""Task lifecycle service: transitions, history queries and the overdue sweep."""

import logging
from datetime import UTC, datetime

from src.core.config import Constants, settings
from src.core.errors import TransitionError, TransitionErrorCode
from src.core.logging import log_with_context, span
from src.core.repository import Repository
from src.domain.log import TransitionRecord
from src.domain.status import TaskOperation, TaskStatus
from src.domain.task import Task
from src.domain.timestamps import as_utc
from src.modules.tasks import history, state_machine
from src.modules.tasks.state_machine import TransitionResult


logger = logging.getLogger(__name__)

_SWEEPABLE = {TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS}


def get_task(repo: Repository, *, task_id: str) -> Task:
    """Return a task or raise ``TransitionError(TASK_NOT_FOUND)``."""
    task = repo.find_task(task_id)
    if task is None:
        raise TransitionError(TransitionErrorCode.TASK_NOT_FOUND, task_id=task_id)
    return task


def transition(
    repo: Repository,
    *,
    task_id: str,
    operation: TaskOperation,
    actor_id: str,
    now: datetime | None = None,
) -> TransitionResult:
    """Apply ``operation`` to a task on behalf of ``actor_id``.

    Args:
        repo: Repository holding the task
        task_id: ID of the task to change
        operation: Requested lifecycle operation
        actor_id: User performing the change, or the system actor
        now: Clock override (defaults to current UTC time)

    Returns:
        TransitionResult describing the applied change (or no-op)

    Raises:
        TransitionError: If the task is missing or the operation is illegal
    """
    with span("task_service.transition", task_id=task_id, operation=str(operation)):
        task = get_task(repo, task_id=task_id)
        with repo.task_lock(task_id):
            result = state_machine.apply_transition(
                task,
                operation=operation,
                actor_id=actor_id,
                now=now or datetime.now(UTC),
            )

        if result.record_id is not None:
            log_with_context(
                logger,
                "debug",
                "Recorded transition",
                task_id=task_id,
                actor_id=actor_id,
                from_status=str(result.from_status),
                to_status=str(result.to_status),
            )
        return result


def start(repo: Repository, *, task_id: str, actor_id: str, now: datetime | None = None) -> TransitionResult:
    return transition(repo, task_id=task_id, operation=TaskOperation.START, actor_id=actor_id, now=now)


def complete(repo: Repository, *, task_id: str, actor_id: str, now: datetime | None = None) -> TransitionResult:
    return transition(repo, task_id=task_id, operation=TaskOperation.COMPLETE, actor_id=actor_id, now=now)


def mark_overdue(repo: Repository, *, task_id: str, actor_id: str, now: datetime | None = None) -> TransitionResult:
    return transition(repo, task_id=task_id, operation=TaskOperation.MARK_OVERDUE, actor_id=actor_id, now=now)


def reopen(repo: Repository, *, task_id: str, actor_id: str, now: datetime | None = None) -> TransitionResult:
    return transition(repo, task_id=task_id, operation=TaskOperation.REOPEN, actor_id=actor_id, now=now)


def get_history(repo: Repository, *, task_id: str) -> tuple[TransitionRecord, ...]:
    """Return a task's transition records, oldest first.

    Raises:
        TransitionError: If the task does not exist
    """
    return history.entries(get_task(repo, task_id=task_id))


def mark_overdue_tasks(
    repo: Repository,
    *,
    now: datetime | None = None,
    recheck_overdue: bool | None = None,
) -> list[TransitionResult]:
    """Mark every task whose deadline has passed as overdue.

    Runs as the system actor. Tasks that are already overdue are only
    re-checked when ``recheck_overdue`` (or the matching setting) is on;
    each re-check leaves an Overdue -> Overdue record.

    Args:
        repo: Repository to sweep
        now: Clock override (defaults to current UTC time)
        recheck_overdue: Override for ``settings.record_repeated_overdue_checks``

    Returns:
        Results for every task the sweep touched
    """
    with span("task_service.mark_overdue_tasks"):
        now = as_utc(now or datetime.now(UTC))
        if recheck_overdue is None:
            recheck_overdue = settings.record_repeated_overdue_checks

        eligible = set(_SWEEPABLE)
        if recheck_overdue:
            eligible.add(TaskStatus.OVERDUE)

        results = []
        for task in list(repo.tasks.values()):
            if task.deadline is None or task.deadline >= now or task.status not in eligible:
                continue
            results.append(
                transition(
                    repo,
                    task_id=task.id,
                    operation=TaskOperation.MARK_OVERDUE,
                    actor_id=Constants.SYSTEM_ACTOR,
                    now=now,
                )
            )

        logger.info("Overdue sweep touched %d tasks", len(results))
        return results
