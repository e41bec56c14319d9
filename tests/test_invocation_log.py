"""Tests for the append-only invocation log."""

import io
import json

import pytest
from pydantic import ValidationError

from toolkit_hub.audit.invocation_log import InvocationLog
from toolkit_hub.tools.models import InvocationOutcome, InvocationRecord


def _record(tool: str = "list_sheets", outcome=InvocationOutcome.ALLOWED) -> InvocationRecord:
    return InvocationRecord(package="sheets", tool=tool, duration_ms=1.25, outcome=outcome)


class TestInvocationLog:
    def test_writes_one_json_line_per_record(self):
        stream = io.StringIO()
        log = InvocationLog(enabled=True, stream=stream)

        log.append(_record("list_sheets"))
        log.append(_record("read_range", InvocationOutcome.DENIED))

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert set(first) == {"ts", "package", "tool", "duration_ms", "outcome"}
        assert first["package"] == "sheets"
        assert first["tool"] == "list_sheets"
        assert first["duration_ms"] == 1.25
        assert first["outcome"] == "allowed"
        assert json.loads(lines[1])["outcome"] == "denied"

    def test_defaults_to_stderr(self, capsys):
        log = InvocationLog(enabled=True)
        log.append(_record())
        err = capsys.readouterr().err
        assert json.loads(err.strip())["tool"] == "list_sheets"

    def test_appends_to_file(self, tmp_path):
        path = tmp_path / "logs" / "hub.jsonl"
        path.parent.mkdir()
        path.write_text('{"existing": true}\n')

        log = InvocationLog(enabled=True, log_file=str(path))
        log.append(_record())
        log.close()

        lines = path.read_text().splitlines()
        assert lines[0] == '{"existing": true}'
        assert json.loads(lines[1])["package"] == "sheets"

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "hub.jsonl"
        log = InvocationLog(enabled=True, log_file=str(path))
        log.append(_record())
        log.close()
        assert path.exists()

    def test_disabled_is_noop(self, tmp_path):
        path = tmp_path / "hub.jsonl"
        log = InvocationLog(enabled=False, log_file=str(path))
        log.append(_record())
        assert len(log) == 0
        assert not path.exists()

    def test_records_are_copies(self):
        log = InvocationLog(enabled=True, stream=io.StringIO())
        log.append(_record())
        log.records.clear()
        assert len(log) == 1

    def test_unwritable_sink_does_not_raise(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        log = InvocationLog(enabled=True, log_file=str(blocker / "hub.jsonl"))
        log.append(_record())
        assert len(log) == 1


class TestInvocationRecord:
    def test_timestamp_is_iso8601(self):
        data = json.loads(_record().to_log_line())
        assert "T" in data["ts"]

    def test_is_frozen(self):
        record = _record()
        with pytest.raises(ValidationError):
            record.tool = "other"
