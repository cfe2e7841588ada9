"""Report renderers and file writer.

The report core hands a finished ``ReportAggregate`` to one of these
formatters, selected by ``parameters.output_format``. Unknown formats fall
back to plain text.
"""

import csv
import io
import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from src.core.config import Constants
from src.core.logging import span
from src.domain.report import ReportAggregate
from src.domain.status import TaskStatus
from src.domain.task import Task


logger = logging.getLogger(__name__)

Formatter = Callable[[ReportAggregate], str]

_RULE_HEAVY = "=" * 56
_RULE_LIGHT = "-" * 56


def _iso(moment: datetime | None) -> str:
    return moment.isoformat() if moment is not None else ""


def format_duration(duration: timedelta) -> str:
    """Render a duration as ``Nd Nh Nm``, ``Nh Nm``, ``Nm Ns`` or ``Ns``."""
    total_seconds = int(duration.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    if days >= 1:
        return f"{days}d {hours}h {minutes}m"
    if hours >= 1:
        return f"{hours}h {minutes}m"
    if minutes >= 1:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def _task_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "assignee_id": task.assignee_id,
        "status": str(task.status),
        "created_at": _iso(task.created_at),
        "started_at": _iso(task.started_at) or None,
        "completed_at": _iso(task.completed_at) or None,
        "deadline": _iso(task.deadline) or None,
    }


def format_json(report: ReportAggregate) -> str:
    """Indented JSON document with parameters, statistics and tasks."""
    params = report.parameters
    data = {
        "id": report.id,
        "generated_at": _iso(report.generated_at),
        "parameters": {
            "from": _iso(params.from_),
            "to": _iso(params.to),
            "project_id": params.project_id,
            "assignee_id": params.assignee_id,
            "statuses": [str(s) for s in params.statuses],
            "format": params.output_format,
        },
        "statistics": {
            "total": report.total,
            "counts_by_status": {str(k): v for k, v in report.counts_by_status.items()},
            "percent_done": report.percent_done,
            "done_on_time": report.done_on_time,
            "overdue": report.overdue_count,
            "total_time_seconds": report.total_elapsed.total_seconds(),
            "avg_time_seconds": report.average_elapsed.total_seconds(),
        },
        "tasks": [_task_dict(t) for t in report.tasks],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_csv(report: ReportAggregate) -> str:
    """Two CSV tables: the selected tasks, then the statistics row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Tasks"])
    writer.writerow(Constants.CSV_TASK_HEADER.split(","))
    for t in report.tasks:
        writer.writerow(
            [
                t.id,
                t.title,
                t.description,
                t.assignee_id or "",
                str(t.status),
                _iso(t.created_at),
                _iso(t.started_at),
                _iso(t.completed_at),
                _iso(t.deadline),
            ]
        )

    writer.writerow([])
    writer.writerow(["Statistics"])
    writer.writerow(Constants.CSV_STATISTICS_HEADER.split(","))
    counts = report.counts_by_status
    writer.writerow(
        [
            report.total,
            counts[TaskStatus.NOT_STARTED],
            counts[TaskStatus.IN_PROGRESS],
            counts[TaskStatus.DONE],
            counts[TaskStatus.OVERDUE],
            f"{report.percent_done:.2f}",
            report.done_on_time,
            report.overdue_count,
            report.total_elapsed.total_seconds(),
            report.average_elapsed.total_seconds(),
            _iso(report.generated_at),
        ]
    )
    return buffer.getvalue()


def format_txt(report: ReportAggregate) -> str:
    """Human-readable summary followed by one block per task."""
    params = report.parameters
    short = Constants.SHORT_ID_LENGTH
    lines = [
        _RULE_HEAVY,
        "TASK COMPLETION REPORT",
        _RULE_HEAVY,
        "",
        f"Report ID: {report.id}",
        f"Generated: {report.generated_at:%Y-%m-%d %H:%M:%S} UTC",
        "",
        "PARAMETERS:",
        f"  Period: {params.from_:%Y-%m-%d} - {params.to:%Y-%m-%d}",
        f"  Project: {params.project_id or 'All projects'}",
        f"  Assignee: {params.assignee_id or 'All assignees'}",
        f"  Statuses: {', '.join(str(s) for s in params.statuses) if params.statuses else 'All'}",
        "",
        _RULE_LIGHT,
        "STATISTICS",
        _RULE_LIGHT,
        f"Total tasks: {report.total}",
        "",
        "By status:",
    ]
    lines.extend(f"  {str(status):<15}: {count:>3}" for status, count in report.counts_by_status.items())
    lines.extend(
        [
            "",
            f"Percent done: {report.percent_done:.2f}%",
            f"Done on time: {report.done_on_time}",
            f"Overdue: {report.overdue_count}",
            "",
            f"Total time spent: {format_duration(report.total_elapsed)}",
            f"Average per task: {format_duration(report.average_elapsed)}",
            "",
            _RULE_LIGHT,
            "TASKS",
            _RULE_LIGHT,
        ]
    )

    for t in report.tasks:
        lines.extend(
            [
                "",
                f"* {t.title}",
                f"  ID: {t.id[:short]}...",
                f"  Status: {t.status}",
                f"  Assignee: {t.assignee_id[:short] if t.assignee_id else 'Unassigned'}",
                f"  Created: {t.created_at:%Y-%m-%d %H:%M}",
            ]
        )
        if t.started_at is not None:
            lines.append(f"  Started: {t.started_at:%Y-%m-%d %H:%M}")
        if t.completed_at is not None:
            lines.append(f"  Completed: {t.completed_at:%Y-%m-%d %H:%M}")
        if t.deadline is not None:
            lines.append(f"  Deadline: {t.deadline:%Y-%m-%d}")
        if t.description.strip():
            lines.append(f"  Description: {t.description}")

    lines.extend(["", _RULE_HEAVY, ""])
    return "\n".join(lines)


FORMATTERS: dict[str, Formatter] = {
    "json": format_json,
    "csv": format_csv,
    "txt": format_txt,
}


def resolve_format(output_format: str | None) -> str:
    """Normalize a requested format, falling back to txt for unknown values."""
    key = (output_format or "").strip().lower()
    return key if key in FORMATTERS else Constants.FALLBACK_REPORT_FORMAT


def get_formatter(output_format: str | None) -> Formatter:
    return FORMATTERS[resolve_format(output_format)]


def render(report: ReportAggregate) -> str:
    """Render a report in the format its parameters ask for."""
    return get_formatter(report.parameters.output_format)(report)


def write_report(report: ReportAggregate, directory: Path) -> Path:
    """Render ``report`` and write it to ``directory``; returns the file path."""
    with span("formatters.write_report", report_id=report.id):
        extension = resolve_format(report.parameters.output_format)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"report_{report.generated_at:%Y%m%d_%H%M%S}_{report.id[:6]}.{extension}"
        path.write_text(render(report), encoding="utf-8")
        logger.info("Wrote report %s to %s", report.id, path)
        return path
