"""Tests for the toolkit-hub CLI.

Uses click's CliRunner so commands run in-process against fixture
packages.
"""

import json

import pytest
from click.testing import CliRunner

from conftest import package_path
from toolkit_hub import __version__
from toolkit_hub.cli import app
from toolkit_hub.logging import configure_logging

SHEETS_CONFIG = f"""
schema_version: "1.0"
packages:
  sheets:
    path: {package_path("sheets")}
    resource_scope:
      param: spreadsheet_id
      allowed: ["abc123"]
"""


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    configure_logging()


def _invoke(*args: str):
    # Diagnostics share the runner output; keep them out of parsed JSON.
    return CliRunner().invoke(app, ["--log-level", "CRITICAL", *args], obj={})


class TestCLIBasic:
    def test_version(self):
        result = _invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        for command in ("status", "health", "tools", "call"):
            assert command in result.output


class TestCLICommands:
    def test_status(self, write_config):
        result = _invoke("--config", str(write_config(SHEETS_CONFIG)), "status")
        assert result.exit_code == 0
        assert "Toolkit Hub Status" in result.output
        assert "scoped: spreadsheet_id" in result.output

    def test_health_ready(self, write_config):
        result = _invoke("--config", str(write_config(SHEETS_CONFIG)), "health")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "ready"

    def test_health_unhealthy_exits_nonzero(self, tmp_path):
        result = _invoke("--config", str(tmp_path / "missing.yaml"), "health")
        assert result.exit_code == 1
        assert json.loads(result.stdout)["status"] == "unhealthy"

    def test_tools(self, write_config):
        result = _invoke("--config", str(write_config(SHEETS_CONFIG)), "tools")
        assert result.exit_code == 0
        assert "sheets_list_sheets" in result.output
        assert "sheets_write_range" not in result.output
        assert "orchestrator_status" in result.output

    def test_tools_schemas(self, write_config):
        result = _invoke("--config", str(write_config(SHEETS_CONFIG)), "tools", "--schemas")
        names = {entry["name"] for entry in json.loads(result.stdout)}
        assert "sheets_read_range" in names

    def test_call_allowed(self, write_config):
        result = _invoke(
            "--config",
            str(write_config(SHEETS_CONFIG)),
            "call",
            "sheets_list_sheets",
            "--args",
            '{"spreadsheet_id": "abc123"}',
        )
        assert result.exit_code == 0
        assert "Sheets in abc123" in result.output

    def test_call_denied_exits_nonzero(self, write_config):
        result = _invoke(
            "--config",
            str(write_config(SHEETS_CONFIG)),
            "call",
            "sheets_list_sheets",
            "--args",
            '{"spreadsheet_id": "evil_spreadsheet"}',
        )
        assert result.exit_code == 1
        assert "Access denied" in result.output

    def test_call_rejects_non_object_args(self, write_config):
        result = _invoke(
            "--config", str(write_config(SHEETS_CONFIG)), "call", "sheets_list_sheets", "--args", "[1]"
        )
        assert result.exit_code == 2
