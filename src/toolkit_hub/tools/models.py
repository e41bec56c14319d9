"""
toolkit-hub Tool Models

Pydantic models for guarded tool execution. Every call through the
guardrail pipeline produces a ToolResult, and (when invocation logging
is enabled) exactly one InvocationRecord.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InvocationOutcome(str, Enum):
    """How a single invocation attempt ended."""
    ALLOWED = "allowed"
    DENIED = "denied"
    ERRORED = "errored"


class ToolResult(BaseModel):
    """Result returned to the caller for every exposed operation.

    Guardrail denials and handler failures are ordinary results,
    distinguished by ``outcome``; they are never raised.
    """
    content: str
    is_error: bool = False
    outcome: InvocationOutcome = InvocationOutcome.ALLOWED

    @classmethod
    def ok(cls, content: str) -> ToolResult:
        return cls(content=content)

    @classmethod
    def error(cls, content: str) -> ToolResult:
        return cls(content=content, is_error=True, outcome=InvocationOutcome.ERRORED)

    @classmethod
    def denied(cls, content: str) -> ToolResult:
        return cls(content=content, is_error=True, outcome=InvocationOutcome.DENIED)


class InvocationRecord(BaseModel):
    """Audit record for one completed invocation attempt. Immutable."""

    model_config = ConfigDict(frozen=True)

    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    package: str
    tool: str
    duration_ms: float = Field(ge=0)
    outcome: InvocationOutcome

    def to_log_line(self) -> str:
        """Serialize as one newline-terminated JSON object."""
        return self.model_dump_json() + "\n"
