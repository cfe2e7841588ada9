"""Unit tests for JSON snapshot persistence."""

import json

import pytest

from src.core.errors import InvariantViolation
from src.core.storage import load_snapshot, save_snapshot
from src.domain.report import ReportParameters
from src.domain.status import TaskStatus
from src.modules.reports import service as report_service
from src.modules.tasks import service as task_service
from tests.helpers import BASE_TIME, at


@pytest.mark.unit
class TestSnapshot:
    """Tests for save_snapshot and load_snapshot."""

    def test_missing_file_gives_empty_repository(self, tmp_path):
        """No snapshot yet means nothing is stored."""
        repo = load_snapshot(tmp_path / "absent.json")

        assert repo.tasks == {}
        assert repo.reports == []

    def test_preserves_status_history_and_timestamps(self, repository, make_task, user, tmp_path):
        """Reloaded tasks keep their status, ordered history and stamps."""
        task = make_task(deadline=at(4), assignee_id=user.id)
        task_service.start(repository, task_id=task.id, actor_id=user.id, now=at(2))
        task_service.mark_overdue(repository, task_id=task.id, actor_id="system", now=at(5))
        report_service.generate_report(
            repository, parameters=ReportParameters(from_=BASE_TIME, to=at(10)), now=at(10)
        )

        path = save_snapshot(repository, tmp_path / "data" / "snapshot.json")
        loaded = load_snapshot(path)

        restored = loaded.tasks[task.id]
        assert restored.status == TaskStatus.OVERDUE
        assert restored.started_at == at(2)
        assert restored.history == task.history
        assert loaded.users[user.id].name == "Alice"
        assert loaded.project_tasks(task.project_id) == [restored]
        assert loaded.reports[0].statistics() == repository.reports[0].statistics()

    def test_corrupt_file_raises(self, tmp_path):
        """Unparseable snapshots are reported as invalid."""
        path = tmp_path / "broken.json"
        path.write_text('{"tasks": [{"title": ""}]}', encoding="utf-8")

        with pytest.raises(InvariantViolation, match="Invalid snapshot"):
            load_snapshot(path)

    def test_status_disagreeing_with_history_rejected(self, repository, make_task, tmp_path):
        """A snapshot whose status contradicts the ledger is not loaded."""
        task = make_task()
        task_service.start(repository, task_id=task.id, actor_id="u1", now=at(2))
        path = save_snapshot(repository, tmp_path / "snapshot.json")

        data = json.loads(path.read_text(encoding="utf-8"))
        data["tasks"][0]["status"] = "Done"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(InvariantViolation, match="Invalid snapshot"):
            load_snapshot(path)
