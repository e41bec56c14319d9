"""Shared test fixtures for the toolkit-hub test suite."""

import io
from pathlib import Path

import pytest

from toolkit_hub.config import PackagePolicy, ResourceScope
from toolkit_hub.hub import ToolkitHub
from toolkit_hub.packages import PackageManifest, ToolDefinition

FIXTURE_PACKAGES = Path(__file__).parent / "fixtures" / "packages"


def package_path(name: str) -> str:
    return str(FIXTURE_PACKAGES / name)


class SpyHandler:
    """Records every call; returns a fixed string or raises a fixed error."""

    def __init__(self, result: str = "ok", error: Exception | None = None):
        self.calls: list[dict] = []
        self._result = result
        self._error = error

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._result

    @property
    def call_count(self) -> int:
        return len(self.calls)


def make_tool(name: str, mutates: bool = False, handler=None, params=None) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description=f"Test tool: {name}",
        params=params,
        mutates=mutates,
        handler=handler or SpyHandler(f"result from {name}"),
    )


def make_manifest(*tools: ToolDefinition, name: str = "test-pkg", version: str = "1.0.0") -> PackageManifest:
    return PackageManifest(name=name, version=version, tools=list(tools))


@pytest.fixture
def write_config(tmp_path):
    """Write YAML config text to a temp file and return its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def build_hub(write_config):
    """Build (but do not initialize) a hub from YAML text.

    The hub's invocation stream is an in-memory buffer exposed as
    ``hub.audit_stream``.
    """

    def _build(text: str) -> ToolkitHub:
        stream = io.StringIO()
        hub = ToolkitHub(config_path=write_config(text), log_stream=stream)
        hub.audit_stream = stream
        return hub

    return _build


@pytest.fixture
def sheets_policy():
    return PackagePolicy(
        path=package_path("sheets"),
        resource_scope=ResourceScope(param="spreadsheet_id", allowed=frozenset({"abc123"})),
    )
