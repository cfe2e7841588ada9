"""Configuration management for tasktrack."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")

    # Assignment Validation
    workload_warning_threshold: int = Field(
        default=3, description="Number of in-progress tasks at which an assignment raises a workload warning"
    )

    # Reporting
    default_report_format: str = Field(default="txt", description="Output format used when none is requested")
    report_output_dir: str = Field(default="reports", description="Directory where rendered reports are written")

    # Snapshot Storage
    snapshot_path: str = Field(default="tasktrack.json", description="JSON snapshot file used by the CLI")

    # Overdue Sweep
    record_repeated_overdue_checks: bool = Field(
        default=False,
        description="Re-run MarkOverdue on already overdue tasks so every sweep leaves an audit record",
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Actor recorded for automated transitions (overdue sweep)
    SYSTEM_ACTOR: str = "system"

    # Report formats
    FALLBACK_REPORT_FORMAT: str = "txt"

    # CSV layout
    CSV_TASK_HEADER: str = "Id,Title,Description,AssigneeId,Status,CreatedAt,StartedAt,CompletedAt,Deadline"
    CSV_STATISTICS_HEADER: str = (
        "Total,NotStarted,InProgress,Done,Overdue,PercentDone,DoneOnTime,OverdueCount,"
        "TotalTimeSeconds,AvgTimeSeconds,GeneratedAt"
    )

    # Short id length used in text output
    SHORT_ID_LENGTH: int = 8


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
