"""Tests for configuration loading."""

import pytest

from src.core.config import Constants, Settings
from src.modules.reports.formatters import FORMATTERS


def test_defaults() -> None:
    """Test settings fall back to documented defaults."""
    settings = Settings(_env_file=None)

    assert settings.workload_warning_threshold == 3
    assert settings.default_report_format == "txt"
    assert settings.record_repeated_overdue_checks is False


def test_environment_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test environment variables override defaults."""
    monkeypatch.setenv("WORKLOAD_WARNING_THRESHOLD", "5")
    monkeypatch.setenv("RECORD_REPEATED_OVERDUE_CHECKS", "true")

    settings = Settings(_env_file=None)

    assert settings.workload_warning_threshold == 5
    assert settings.record_repeated_overdue_checks is True


def test_fallback_format_has_formatter() -> None:
    """Test the fallback report format can always be rendered."""
    assert Constants.FALLBACK_REPORT_FORMAT in FORMATTERS
