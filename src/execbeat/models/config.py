"""Configuration models for execbeat."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from execbeat.scheduler.service import DEFAULT_MAX_OVERLAPPING_RUNS
from execbeat.scheduler.triggers import parse_schedule

DEFAULT_DOCUMENT_TYPE = "exec"
DEFAULT_SCHEDULE = "@every 10s"


def _scalar_to_str(value: object) -> object:
    # YAML booleans are written back the way YAML spells them
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return value


class ExecConfig(BaseModel):
    """The command to run and how to turn its output into events."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    command: str = Field(..., description="Executable name or path")
    args: str | None = Field(default=None, description="Arguments, separated by single spaces")
    schedule: str = Field(
        default=DEFAULT_SCHEDULE,
        description="Cron expression (5 or 6 fields), '@every <duration>' or descriptor",
    )
    timezone: str = Field(default="local", description="Timezone for cron schedules")
    document_type: str = Field(
        default=DEFAULT_DOCUMENT_TYPE,
        alias="documentType",
        description="Type tag attached to every event",
    )
    split_lines: bool = Field(
        default=False,
        alias="splitLines",
        description="Emit one event per stdout line instead of one per run",
    )
    fields: dict[str, str] | None = Field(
        default=None, description="Static annotations attached to every event"
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Kill the command after this many seconds"
    )
    max_overlapping_runs: int = Field(
        default=DEFAULT_MAX_OVERLAPPING_RUNS,
        ge=1,
        alias="maxOverlappingRuns",
        description="Maximum number of runs in flight at once",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        """Reject blank commands."""
        if not v.strip():
            raise ValueError("Command cannot be empty")
        return v

    @field_validator("schedule", mode="before")
    @classmethod
    def default_schedule(cls, v: object) -> object:
        """Fall back to the default schedule when unset or blank."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_SCHEDULE
        return v

    @field_validator("document_type", mode="before")
    @classmethod
    def default_document_type(cls, v: object) -> object:
        """Fall back to the default document type when unset or blank."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_DOCUMENT_TYPE
        return v

    @field_validator("fields", mode="before")
    @classmethod
    def stringify_fields(cls, v: object) -> object:
        """Accept scalar annotation values (numbers, booleans) as strings."""
        if isinstance(v, dict):
            return {_scalar_to_str(key): _scalar_to_str(value) for key, value in v.items()}
        return v

    @model_validator(mode="after")
    def validate_schedule(self) -> ExecConfig:
        """Parse the schedule so invalid expressions fail at load time."""
        try:
            parse_schedule(self.schedule, self.timezone)
        except (ValueError, LookupError) as e:
            msg = f"Invalid schedule '{self.schedule}': {e}"
            raise ValueError(msg) from e
        return self


class OutputConfig(BaseModel):
    """Where events are delivered."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    type: Literal["console", "file", "http"] = Field(default="console", description="Sink type")
    path: str | None = Field(default=None, description="JSON-lines file for the file sink")
    url: str | None = Field(default=None, description="Collector URL for the http sink")
    headers: dict[str, str] = Field(default_factory=dict, description="HTTP headers")
    timeout: float = Field(default=10.0, gt=0, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, le=10, description="HTTP delivery attempts")
    queue_size: int = Field(default=1000, ge=1, description="Events buffered before dropping")

    @model_validator(mode="after")
    def validate_destination(self) -> OutputConfig:
        """Require the destination of the selected sink."""
        if self.type == "file" and not self.path:
            raise ValueError("'file' output requires 'path'")
        if self.type == "http" and not self.url:
            raise ValueError("'http' output requires 'url'")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: str | None = Field(default=None, description="Also log to this file")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v


class BeatConfig(BaseModel):
    """Top-level execbeat configuration."""

    model_config = ConfigDict(extra="forbid")

    exec: ExecConfig
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
