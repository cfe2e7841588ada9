"""Report generation: validate parameters, snapshot and filter tasks, run calculators."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from src.core.errors import ReportError, ReportErrorCode
from src.core.logging import span
from src.core.repository import Repository
from src.domain.report import ReportAggregate, ReportParameters
from src.domain.task import Task
from src.domain.timestamps import as_utc
from src.modules.reports.calculators import run_calculators
from src.modules.reports.filters import filter_tasks


logger = logging.getLogger(__name__)


def _validate_parameters(repo: Repository, parameters: ReportParameters) -> None:
    if parameters.from_ > parameters.to:
        raise ReportError(
            ReportErrorCode.INVALID_DATE_RANGE,
            detail=f"{parameters.from_.isoformat()} > {parameters.to.isoformat()}",
        )
    if parameters.project_id is not None and parameters.project_id not in repo.projects:
        raise ReportError(ReportErrorCode.UNKNOWN_PROJECT_OR_ASSIGNEE, detail=f"project {parameters.project_id}")
    if parameters.assignee_id is not None and parameters.assignee_id not in repo.users:
        raise ReportError(ReportErrorCode.UNKNOWN_PROJECT_OR_ASSIGNEE, detail=f"assignee {parameters.assignee_id}")


def _snapshot(repo: Repository, tasks: Iterable[Task]) -> list[Task]:
    snapshot = []
    for task in tasks:
        with repo.task_lock(task.id):
            snapshot.append(task.model_copy(deep=True))
    return snapshot


def generate_report(
    repo: Repository,
    *,
    parameters: ReportParameters,
    tasks: Iterable[Task] | None = None,
    now: datetime | None = None,
) -> ReportAggregate:
    """Build a report over ``tasks`` (all repository tasks by default).

    Args:
        repo: Repository used for reference checks and report storage
        parameters: Window, scope filters and output format
        tasks: Universe of candidate tasks; defaults to every task in ``repo``
        now: Clock for running-task durations and ``generated_at``

    Returns:
        The stored ReportAggregate

    Raises:
        ReportError: If the range is inverted, a reference is unknown, or no task matches
    """
    with span("report_service.generate_report"):
        _validate_parameters(repo, parameters)
        now = as_utc(now or datetime.now(UTC))

        universe = list(repo.tasks.values()) if tasks is None else list(tasks)
        selected = filter_tasks(_snapshot(repo, universe), parameters)
        if not selected:
            raise ReportError(ReportErrorCode.EMPTY_RESULT_SET)

        report = ReportAggregate(
            generated_at=now,
            parameters=parameters,
            tasks=tuple(selected),
            **run_calculators(selected, now),
        )
        repo.add_report(report)

        logger.info("Generated report %s over %d of %d tasks", report.id, report.total, len(universe))
        return report


def list_reports(repo: Repository) -> list[ReportAggregate]:
    """Return previously generated reports, oldest first."""
    return list(repo.reports)
