"""
toolkit-hub Invocation Log

Append-only audit trail of tool invocations. Each record is kept in
memory and written as one JSON line, either to stderr or to a file
opened in append mode:

    {"ts": "2026-01-05T09:12:44.120Z", "package": "sheets",
     "tool": "list_sheets", "duration_ms": 12.4, "outcome": "allowed"}

Records are never modified or removed once appended. A failing sink
is reported through diagnostic logging and never fails the call that
produced the record.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from toolkit_hub.logging import get_logger
from toolkit_hub.tools.models import InvocationRecord

logger = get_logger("toolkit_hub.audit")


class InvocationLog:
    """Append-only JSONL sink for InvocationRecords.

    When disabled, append() is a no-op and nothing is kept.
    """

    def __init__(
        self,
        enabled: bool = False,
        log_file: str | None = None,
        stream: TextIO | None = None,
    ):
        self._enabled = enabled
        self._log_file = Path(log_file) if log_file else None
        self._stream = stream
        self._file: TextIO | None = None
        self._records: list[InvocationRecord] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def records(self) -> list[InvocationRecord]:
        return list(self._records)

    def _sink(self) -> TextIO:
        if self._log_file is not None:
            if self._file is None:
                self._log_file.parent.mkdir(parents=True, exist_ok=True)
                self._file = self._log_file.open("a", encoding="utf-8")
            return self._file
        return self._stream if self._stream is not None else sys.stderr

    def append(self, record: InvocationRecord) -> None:
        if not self._enabled:
            return

        self._records.append(record)
        try:
            sink = self._sink()
            sink.write(record.to_log_line())
            sink.flush()
        except OSError as e:
            logger.error(
                "Failed to write invocation record: %s",
                e,
                extra={"package": record.package, "tool": record.tool},
            )

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __len__(self) -> int:
        return len(self._records)
