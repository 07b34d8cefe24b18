"""Append-only audit trail of sampling events.

Each record is one line: ``[YYYY-MM-DD HH:MM:SS] message``.
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Protocol

import structlog

from sysmonitor import logging as console

log = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Lifecycle records written by the CLI and scheduler
STARTED_MESSAGE = "=== SysMonitor Started ==="
USER_EXIT_MESSAGE = "=== SysMonitor Ended (User Exit) ==="
SIGINT_MESSAGE = "=== SysMonitor Ended (SIGINT) ==="


class AuditSink(Protocol):
    """Anything that accepts finished audit messages."""

    def write(self, message: str) -> None: ...


def format_record(message: str, when: datetime) -> str:
    """Format one audit line, including the trailing newline."""
    return f"[{when.strftime(TIMESTAMP_FORMAT)}] {message}\n"


class AuditLog:
    """Audit sink that appends timestamped lines to a text file.

    The file is opened and closed for every record. A failure to open it is
    reported on the console and otherwise ignored.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        self.path = Path(path)
        self._clock = clock

    def write(self, message: str) -> None:
        record = format_record(message, self._clock())
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(record)
        except OSError as e:
            console.audit_write_failed(str(self.path), e.strerror or str(e))
            log.error("audit_write_failed", path=str(self.path), error=str(e))
            return
        log.info("audit_record", message=message)
