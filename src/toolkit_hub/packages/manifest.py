"""
toolkit-hub Package Contract

Types a capability package uses to describe itself. A built package
exposes a module-level ``manifest`` in ``<path>/dist/manifest.py``:

    from pydantic import BaseModel
    from toolkit_hub.packages import PackageManifest, ToolDefinition

    class ListSheetsParams(BaseModel):
        spreadsheet_id: str | None = None

    async def list_sheets(spreadsheet_id: str | None = None) -> str:
        ...

    manifest = PackageManifest(
        name="google-sheets",
        version="1.2.0",
        tools=[
            ToolDefinition(
                name="list_sheets",
                description="List the sheets of a spreadsheet.",
                params=ListSheetsParams,
                mutates=False,
                handler=list_sheets,
            ),
        ],
    )

``mutates`` has no default: every tool must declare whether it changes
external state, so write-gating never depends on guessing from names.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolkit_hub.config import NAME_PATTERN


class HealthCheckResult(BaseModel):
    ok: bool
    details: Any = None


class ToolDefinition(BaseModel):
    """One operation declared by a package."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., pattern=NAME_PATTERN)
    description: str = ""
    params: type[BaseModel] | None = None
    mutates: bool
    handler: Callable[..., Any]

    def input_schema(self) -> dict:
        """JSON schema of the tool's parameters."""
        if self.params is None:
            return {"type": "object", "properties": {}}
        return self.params.model_json_schema()


class PackageManifest(BaseModel):
    """A package's declared operations plus metadata."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    version: str
    tools: list[ToolDefinition]
    health_check: Callable[[], Any] | None = None

    def tool_names(self) -> list[str]:
        return [t.name for t in self.tools]
