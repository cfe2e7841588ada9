"""Pytest configuration and fixtures for unit tests."""

import pytest

from src.core.config import settings


@pytest.fixture
def workload_threshold(monkeypatch):
    """Set the workload warning threshold for one test."""

    def _set(value: int) -> None:
        monkeypatch.setattr(settings, "workload_warning_threshold", value)

    return _set
