"""Error taxonomy for task transitions, reports and entity validation.

Domain failures are raised as typed exceptions to the immediate caller.
The core never logs and swallows them; user-facing surfaces turn them into
an ``ErrorResponse`` with ``classify_error_with_response``.
"""

from enum import Enum, StrEnum

from pydantic import BaseModel, ValidationError


class TransitionErrorCode(StrEnum):
    """Reasons a lifecycle transition is rejected."""

    ALREADY_IN_PROGRESS = "AlreadyInProgress"
    TASK_NOT_STARTED = "TaskNotStarted"
    CANNOT_RESTART_COMPLETED = "CannotRestartCompleted"
    CANNOT_OVERDUE_COMPLETED = "CannotOverdueCompleted"
    ILLEGAL_REOPEN = "IllegalReopen"
    TASK_NOT_FOUND = "TaskNotFound"


class ReportErrorCode(StrEnum):
    """Reasons a report cannot be produced."""

    EMPTY_RESULT_SET = "EmptyResultSet"
    INVALID_DATE_RANGE = "InvalidDateRange"
    UNKNOWN_PROJECT_OR_ASSIGNEE = "UnknownProjectOrAssignee"


_TRANSITION_MESSAGES: dict[TransitionErrorCode, str] = {
    TransitionErrorCode.ALREADY_IN_PROGRESS: "Task is already in progress",
    TransitionErrorCode.TASK_NOT_STARTED: "Cannot complete a task that has not been started",
    TransitionErrorCode.CANNOT_RESTART_COMPLETED: "Cannot start a completed task",
    TransitionErrorCode.CANNOT_OVERDUE_COMPLETED: "A completed task cannot become overdue",
    TransitionErrorCode.ILLEGAL_REOPEN: "Only completed tasks can be reopened",
    TransitionErrorCode.TASK_NOT_FOUND: "Task not found",
}

_REPORT_MESSAGES: dict[ReportErrorCode, str] = {
    ReportErrorCode.EMPTY_RESULT_SET: "No tasks match the report parameters",
    ReportErrorCode.INVALID_DATE_RANGE: "Report start date is after its end date",
    ReportErrorCode.UNKNOWN_PROJECT_OR_ASSIGNEE: "Report references an unknown project or assignee",
}


class TaskTrackError(Exception):
    """Base class for all tasktrack domain errors."""


class TransitionError(TaskTrackError):
    """A lifecycle transition was rejected; the task is left untouched."""

    def __init__(self, code: TransitionErrorCode, *, task_id: str | None = None, detail: str | None = None):
        self.code = code
        self.task_id = task_id
        message = _TRANSITION_MESSAGES[code]
        if task_id:
            message = f"{message}: {task_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ReportError(TaskTrackError):
    """A report request could not be satisfied; nothing is stored."""

    def __init__(self, code: ReportErrorCode, *, detail: str | None = None):
        self.code = code
        message = _REPORT_MESSAGES[code]
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvariantViolation(TaskTrackError, ValueError):
    """An entity could not be created or edited because a field is invalid."""


class NotFoundError(TaskTrackError, KeyError):
    """A project, user or sprint lookup failed."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class AssignmentRejected(TaskTrackError):
    """An assignment failed validation or a warning was not confirmed."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Transition errors
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"

    # Report errors
    ERR_EMPTY_REPORT = "ERR_EMPTY_REPORT"
    ERR_INVALID_DATE_RANGE = "ERR_INVALID_DATE_RANGE"
    ERR_UNKNOWN_REFERENCE = "ERR_UNKNOWN_REFERENCE"

    # Entity errors
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_ASSIGNMENT_REJECTED = "ERR_ASSIGNMENT_REJECTED"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def _classify_transition_error(exception: TransitionError) -> ErrorResponse:
    if exception.code == TransitionErrorCode.TASK_NOT_FOUND:
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message=str(exception),
            suggestion="List tasks to find a valid task id.",
            severity=ErrorSeverity.LOW,
        )
    return ErrorResponse(
        code=ErrorCode.ERR_INVALID_STATE_TRANSITION,
        message=str(exception),
        suggestion="Check the task history and try a different operation.",
        severity=ErrorSeverity.LOW,
    )


def _classify_report_error(exception: ReportError) -> ErrorResponse:
    if exception.code == ReportErrorCode.EMPTY_RESULT_SET:
        return ErrorResponse(
            code=ErrorCode.ERR_EMPTY_REPORT,
            message=str(exception),
            suggestion="Widen the date range or remove status and assignee filters.",
            severity=ErrorSeverity.LOW,
        )
    if exception.code == ReportErrorCode.INVALID_DATE_RANGE:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_DATE_RANGE,
            message=str(exception),
            suggestion="Make sure the start date is not after the end date.",
            severity=ErrorSeverity.LOW,
        )
    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN_REFERENCE,
        message=str(exception),
        suggestion="Check the project and assignee ids.",
        severity=ErrorSeverity.MEDIUM,
    )


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, TransitionError):
        return _classify_transition_error(exception)

    if isinstance(exception, ReportError):
        return _classify_report_error(exception)

    if isinstance(exception, InvariantViolation):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_INPUT,
            message=str(exception),
            suggestion="Correct the highlighted field and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=str(exception),
            suggestion="Check the id and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, AssignmentRejected):
        return ErrorResponse(
            code=ErrorCode.ERR_ASSIGNMENT_REJECTED,
            message=str(exception),
            suggestion="Pick a different assignee or confirm the warning.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, inspect the logs.",
        severity=ErrorSeverity.HIGH,
    )


def invariant_from_validation(error: ValidationError) -> InvariantViolation:
    """Convert a pydantic construction error into an ``InvariantViolation``."""
    messages = "; ".join(str(e["msg"]).removeprefix("Value error, ") for e in error.errors())
    return InvariantViolation(messages)
