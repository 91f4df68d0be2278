"""Event record models for execbeat."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CombinedOutput(BaseModel):
    """Whole output of a run in a single event."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["combined"] = "combined"
    command: str
    stdout: str = ""
    stderr: str = ""
    exit_code: int

    def to_exec(self) -> dict[str, Any]:
        data: dict[str, Any] = {"command": self.command, "stdout": self.stdout}
        if self.stderr:
            data["stderr"] = self.stderr
        data["exitCode"] = self.exit_code
        return data


class StderrOutput(BaseModel):
    """Standard error of a run whose stdout is emitted line by line."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stderr"] = "stderr"
    command: str
    stderr: str
    exit_code: int

    def to_exec(self) -> dict[str, Any]:
        return {"command": self.command, "stderr": self.stderr, "exitCode": self.exit_code}


class StdoutLine(BaseModel):
    """One non-empty line of a run's standard output."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stdout_line"] = "stdout_line"
    command: str
    stdout_line: str
    line_offset: int = Field(..., ge=0, description="Zero-based index among non-empty lines")
    exit_code: int

    def to_exec(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "stdout": self.stdout_line,
            "lineOffset": self.line_offset,
            "exitCode": self.exit_code,
        }


ExecOutput = Annotated[
    CombinedOutput | StderrOutput | StdoutLine,
    Field(discriminator="kind"),
]


class EventRecord(BaseModel):
    """A structured event handed to a sink."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    document_type: str
    fields: dict[str, str] | None = None
    exec: ExecOutput

    @property
    def exit_code(self) -> int:
        return self.exec.exit_code

    def to_event(self) -> dict[str, Any]:
        """Convert to the transport-agnostic event mapping.

        Returns:
            Dictionary with '@timestamp', 'type', 'exec' and, when
            annotations are configured, 'fields'.
        """
        event: dict[str, Any] = {
            "@timestamp": self.timestamp.isoformat(),
            "type": self.document_type,
            "exec": self.exec.to_exec(),
        }
        if self.fields is not None:
            event["fields"] = dict(self.fields)
        return event
