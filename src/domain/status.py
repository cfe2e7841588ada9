"""Task lifecycle enums."""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task lifecycle state."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    OVERDUE = "Overdue"


class TaskOperation(StrEnum):
    """Operations a caller may request on a task."""

    START = "start"
    COMPLETE = "complete"
    MARK_OVERDUE = "mark_overdue"
    REOPEN = "reopen"
