"""Transition table and pure application logic for the task lifecycle.

Legality lives in one table keyed by ``(status, operation)``; every pair is
listed so the matrix can be checked exhaustively.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.core.errors import TransitionError, TransitionErrorCode
from src.domain.status import TaskOperation, TaskStatus
from src.domain.task import Task
from src.domain.timestamps import as_utc
from src.modules.tasks import history


logger = logging.getLogger(__name__)


class Stamp(Enum):
    """Timestamp side effect applied together with a transition."""

    NONE = "none"
    SET_STARTED = "set_started"
    SET_STARTED_IF_UNSET = "set_started_if_unset"
    SET_COMPLETED = "set_completed"
    CLEAR_COMPLETED = "clear_completed"


@dataclass(frozen=True)
class TransitionRule:
    """Outcome of one operation in one state.

    ``to_status`` None with no ``error`` is a silent no-op. ``record_self``
    marks a no-op that is still written to the ledger.
    """

    to_status: TaskStatus | None = None
    error: TransitionErrorCode | None = None
    stamp: Stamp = Stamp.NONE
    record_self: bool = False


@dataclass(frozen=True)
class TransitionResult:
    """What a successful transition did."""

    task_id: str
    from_status: TaskStatus
    to_status: TaskStatus
    record_id: str | None

    @property
    def changed(self) -> bool:
        return self.from_status != self.to_status


_S = TaskStatus
_Op = TaskOperation

TRANSITIONS: dict[tuple[TaskStatus, TaskOperation], TransitionRule] = {
    # NotStarted
    (_S.NOT_STARTED, _Op.START): TransitionRule(to_status=_S.IN_PROGRESS, stamp=Stamp.SET_STARTED),
    (_S.NOT_STARTED, _Op.COMPLETE): TransitionRule(error=TransitionErrorCode.TASK_NOT_STARTED),
    (_S.NOT_STARTED, _Op.MARK_OVERDUE): TransitionRule(to_status=_S.OVERDUE),
    (_S.NOT_STARTED, _Op.REOPEN): TransitionRule(),
    # InProgress
    (_S.IN_PROGRESS, _Op.START): TransitionRule(error=TransitionErrorCode.ALREADY_IN_PROGRESS),
    (_S.IN_PROGRESS, _Op.COMPLETE): TransitionRule(to_status=_S.DONE, stamp=Stamp.SET_COMPLETED),
    (_S.IN_PROGRESS, _Op.MARK_OVERDUE): TransitionRule(to_status=_S.OVERDUE),
    (_S.IN_PROGRESS, _Op.REOPEN): TransitionRule(error=TransitionErrorCode.ILLEGAL_REOPEN),
    # Done
    (_S.DONE, _Op.START): TransitionRule(error=TransitionErrorCode.CANNOT_RESTART_COMPLETED),
    (_S.DONE, _Op.COMPLETE): TransitionRule(),
    (_S.DONE, _Op.MARK_OVERDUE): TransitionRule(error=TransitionErrorCode.CANNOT_OVERDUE_COMPLETED),
    (_S.DONE, _Op.REOPEN): TransitionRule(to_status=_S.NOT_STARTED, stamp=Stamp.CLEAR_COMPLETED),
    # Overdue
    (_S.OVERDUE, _Op.START): TransitionRule(to_status=_S.IN_PROGRESS, stamp=Stamp.SET_STARTED_IF_UNSET),
    (_S.OVERDUE, _Op.COMPLETE): TransitionRule(to_status=_S.DONE, stamp=Stamp.SET_COMPLETED),
    (_S.OVERDUE, _Op.MARK_OVERDUE): TransitionRule(record_self=True),
    (_S.OVERDUE, _Op.REOPEN): TransitionRule(error=TransitionErrorCode.ILLEGAL_REOPEN),
}


def get_rule(*, status: TaskStatus, operation: TaskOperation) -> TransitionRule:
    """Look up the rule for ``operation`` requested in ``status``."""
    return TRANSITIONS[(status, operation)]


def _apply_stamp(task: Task, stamp: Stamp, now: datetime) -> None:
    # started_at never precedes created_at, even with a skewed clock
    started = max(now, task.created_at)
    if stamp is Stamp.SET_STARTED:
        task.started_at = started
    elif stamp is Stamp.SET_STARTED_IF_UNSET:
        if task.started_at is None:
            task.started_at = started
    elif stamp is Stamp.SET_COMPLETED:
        task.completed_at = now
    elif stamp is Stamp.CLEAR_COMPLETED:
        task.completed_at = None


def apply_transition(
    task: Task,
    *,
    operation: TaskOperation,
    actor_id: str,
    now: datetime,
) -> TransitionResult:
    """Validate ``operation`` against the table and apply it to ``task``.

    Status, timestamps and ledger change together or not at all.

    Raises:
        TransitionError: If the operation is illegal in the current state
    """
    now = as_utc(now)
    current = task.status
    rule = get_rule(status=current, operation=operation)

    if rule.error is not None:
        raise TransitionError(rule.error, task_id=task.id, detail=f"{operation} while {current}")

    if rule.to_status is None:
        record_id = None
        if rule.record_self:
            record_id = history.record(task, from_status=current, to_status=current, actor_id=actor_id, now=now)
        return TransitionResult(task_id=task.id, from_status=current, to_status=current, record_id=record_id)

    _apply_stamp(task, rule.stamp, now)
    record_id = history.record(task, from_status=current, to_status=rule.to_status, actor_id=actor_id, now=now)
    task.status = rule.to_status

    logger.info("Transitioned task %s from %s to %s", task.id, current, rule.to_status)
    return TransitionResult(task_id=task.id, from_status=current, to_status=rule.to_status, record_id=record_id)
