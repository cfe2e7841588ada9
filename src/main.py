"""tasktrack - task lifecycle tracking and reporting from the command line.

Every command loads the JSON snapshot, applies one operation and (for
mutating commands) saves it back. Task ids may be given as unique prefixes.
"""

import argparse
import logging
import re
import sys
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path

from dateutil import parser as dateutil_parser

from src.core.config import settings
from src.core.errors import (
    InvariantViolation,
    TaskTrackError,
    TransitionError,
    TransitionErrorCode,
    classify_error_with_response,
)
from src.core.logging import configure_logfire, configure_logging
from src.core.repository import Repository
from src.core.storage import load_snapshot, save_snapshot
from src.domain.report import ReportParameters
from src.domain.status import TaskOperation, TaskStatus
from src.domain.task import Task
from src.modules.reports import formatters
from src.modules.reports import service as report_service
from src.modules.tasks import service as task_service
from src.services import project_service, sprint_service


logger = logging.getLogger(__name__)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_moment(value: str, *, end_of_day: bool = False) -> datetime:
    """Parse a CLI date; naive values are UTC and a bare date may cover its whole day."""
    try:
        moment = dateutil_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise InvariantViolation(f"Invalid date: {value}") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    if end_of_day and _DATE_ONLY.match(value.strip()):
        moment = moment + timedelta(days=1) - timedelta(microseconds=1)
    return moment


def resolve_task(repo: Repository, task_ref: str) -> Task:
    task = repo.find_task(task_ref) or repo.find_task_by_prefix(task_ref)
    if task is None:
        raise TransitionError(TransitionErrorCode.TASK_NOT_FOUND, task_id=task_ref)
    return task


def seed(repo: Repository, *, now: datetime | None = None) -> None:
    """Populate ``repo`` with a small demo project."""
    now = now or datetime.now(UTC)
    alice = project_service.add_user(repo, name="Alice")
    bob = project_service.add_user(repo, name="Bob")
    project_service.add_user(repo, name="Charlie")

    project = project_service.create_project(repo, name="Demo project", description="Example data")
    api = project_service.create_task(
        repo,
        project_id=project.id,
        title="Build API",
        description="REST API for the system",
        deadline=now + timedelta(days=7),
        now=now,
    )
    docs = project_service.create_task(
        repo,
        project_id=project.id,
        title="Write documentation",
        description="Technical documentation",
        deadline=now + timedelta(days=3),
        now=now,
    )
    project_service.create_task(
        repo,
        project_id=project.id,
        title="Testing",
        description="Unit and integration tests",
        deadline=now + timedelta(days=10),
        now=now,
    )

    project_service.assign_task(repo, task_id=api.id, user_id=alice.id)
    project_service.assign_task(repo, task_id=docs.id, user_id=bob.id)
    task_service.start(repo, task_id=docs.id, actor_id=bob.id, now=now)

    sprint = sprint_service.create_sprint(
        repo, name="Sprint 1", goal="Deliver the base feature set", start_date=now, deadline=now + timedelta(days=14)
    )
    sprint_service.add_participant(repo, sprint_id=sprint.id, user_id=alice.id)
    sprint_service.add_participant(repo, sprint_id=sprint.id, user_id=bob.id)
    sprint_service.add_task(repo, sprint_id=sprint.id, task_id=api.id)
    sprint_service.add_task(repo, sprint_id=sprint.id, task_id=docs.id)


def _cmd_seed(repo: Repository, args: argparse.Namespace) -> bool:
    seed(repo)
    print(f"Seeded {len(repo.tasks)} tasks, {len(repo.users)} users")
    return True


def _cmd_add_user(repo: Repository, args: argparse.Namespace) -> bool:
    user = project_service.add_user(repo, name=args.name)
    print(user.id)
    return True


def _cmd_add_project(repo: Repository, args: argparse.Namespace) -> bool:
    project = project_service.create_project(repo, name=args.name, description=args.description)
    print(project.id)
    return True


def _cmd_add_task(repo: Repository, args: argparse.Namespace) -> bool:
    task = project_service.create_task(
        repo,
        project_id=args.project_id,
        title=args.title,
        description=args.description,
        deadline=parse_moment(args.deadline) if args.deadline else None,
    )
    print(task.id)
    return True


def _cmd_assign(repo: Repository, args: argparse.Namespace) -> bool:
    task = resolve_task(repo, args.task)
    outcome = project_service.assign_task(
        repo, task_id=task.id, user_id=args.user_id, confirm_warnings=not args.strict
    )
    if outcome.message:
        print(f"Warning: {outcome.message}")
    print(f"Assigned {task.title} to {args.user_id}")
    return True


def _cmd_transition(repo: Repository, args: argparse.Namespace) -> bool:
    task = resolve_task(repo, args.task)
    result = task_service.transition(
        repo, task_id=task.id, operation=TaskOperation(args.operation), actor_id=args.actor
    )
    print(f"{task.title}: {result.from_status} -> {result.to_status}")
    return True


def _cmd_history(repo: Repository, args: argparse.Namespace) -> bool:
    task = resolve_task(repo, args.task)
    entries = task_service.get_history(repo, task_id=task.id)
    print(f"History of {task.title}:")
    if not entries:
        print("  (empty)")
    for entry in entries:
        print(f"  {entry.timestamp:%Y-%m-%d %H:%M}: {entry.from_status} -> {entry.to_status} by {entry.actor_id}")
    return False


def _cmd_list(repo: Repository, args: argparse.Namespace) -> bool:
    for project in project_service.list_projects(repo):
        print(project.name)
        tasks = repo.project_tasks(project.id)
        if not tasks:
            print("  (no tasks)")
        for t in tasks:
            assignee = repo.users[t.assignee_id].name if t.assignee_id in repo.users else "Unassigned"
            print(f"  [{t.id[:6]}] {t.title} | {t.status} | {assignee}")
    return False


def _cmd_sweep(repo: Repository, args: argparse.Namespace) -> bool:
    results = task_service.mark_overdue_tasks(repo)
    print(f"Marked {len(results)} tasks overdue")
    return bool(results)


def _cmd_report(repo: Repository, args: argparse.Namespace) -> bool:
    parameters = ReportParameters(
        from_=parse_moment(args.from_),
        to=parse_moment(args.to, end_of_day=True),
        project_id=args.project,
        assignee_id=args.assignee,
        statuses=tuple(TaskStatus(s) for s in args.status or ()),
        output_format=args.format or settings.default_report_format,
    )
    report = report_service.generate_report(repo, parameters=parameters)
    if args.stdout:
        print(formatters.render(report))
    else:
        path = formatters.write_report(report, Path(args.output_dir or settings.report_output_dir))
        print(f"Report saved: {path}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tasktrack", description="Track task lifecycles and build reports")
    parser.add_argument("--data", default=None, help="Snapshot file (default: settings.snapshot_path)")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("seed", help="Create demo users, project, tasks and sprint").set_defaults(handler=_cmd_seed)

    add_user = commands.add_parser("add-user", help="Register a user")
    add_user.add_argument("name")
    add_user.set_defaults(handler=_cmd_add_user)

    add_project = commands.add_parser("add-project", help="Create a project")
    add_project.add_argument("name")
    add_project.add_argument("--description", default="")
    add_project.set_defaults(handler=_cmd_add_project)

    add_task = commands.add_parser("add-task", help="Create a task in a project")
    add_task.add_argument("project_id")
    add_task.add_argument("title")
    add_task.add_argument("--description", default="")
    add_task.add_argument("--deadline", default=None)
    add_task.set_defaults(handler=_cmd_add_task)

    assign = commands.add_parser("assign", help="Assign a task to a user")
    assign.add_argument("task")
    assign.add_argument("user_id")
    assign.add_argument("--strict", action="store_true", help="Abort on workload warnings")
    assign.set_defaults(handler=_cmd_assign)

    transition = commands.add_parser("transition", help="Apply a lifecycle operation")
    transition.add_argument("task")
    transition.add_argument("operation", choices=[op.value for op in TaskOperation])
    transition.add_argument("--actor", required=True, help="User performing the change")
    transition.set_defaults(handler=_cmd_transition)

    history = commands.add_parser("history", help="Show a task's transition history")
    history.add_argument("task")
    history.set_defaults(handler=_cmd_history)

    commands.add_parser("list", help="List projects and their tasks").set_defaults(handler=_cmd_list)
    commands.add_parser("sweep", help="Mark tasks past their deadline overdue").set_defaults(handler=_cmd_sweep)

    report = commands.add_parser("report", help="Generate a report")
    report.add_argument("--from", dest="from_", required=True)
    report.add_argument("--to", required=True)
    report.add_argument("--project", default=None)
    report.add_argument("--assignee", default=None)
    report.add_argument("--status", action="append", choices=[s.value for s in TaskStatus])
    report.add_argument("--format", default=None, help="json, csv or txt (unknown values fall back to txt)")
    report.add_argument("--output-dir", default=None)
    report.add_argument("--stdout", action="store_true", help="Print instead of writing a file")
    report.set_defaults(handler=_cmd_report)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    configure_logfire()

    data_path = Path(args.data or settings.snapshot_path)
    try:
        repo = load_snapshot(data_path)
        if args.handler(repo, args):
            save_snapshot(repo, data_path)
    except TaskTrackError as e:
        response = classify_error_with_response(e)
        print(f"Error [{response.code}]: {response.message}", file=sys.stderr)
        print(f"  {response.suggestion}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
