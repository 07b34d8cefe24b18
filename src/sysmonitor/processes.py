"""Process table scanning and CPU-tick ranking from /proc/<pid>/stat."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from sysmonitor.reader import (
    PROC_STAT_READ_LIMIT,
    CounterSourceError,
    ProcessVanished,
    SourceUnavailable,
    read_counter,
)

log = structlog.get_logger()

# Capacity limits for a single scan
MAX_TRACKED_PROCESSES = 1024
MAX_NAME_BYTES = 255
DEFAULT_TOP_COUNT = 5

# Positions in /proc/<pid>/stat as produced by split_stat_fields()
# (0 = pid, 1 = comm, 2 = state, ... see proc(5) fields 14 and 15)
UTIME_FIELD_INDEX = 13
STIME_FIELD_INDEX = 14


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """One process and its accumulated user+kernel CPU ticks."""

    pid: int
    name: str
    cpu_ticks: int


@dataclass
class ScanResult:
    """Records from one scan, ranked by CPU ticks (highest first)."""

    records: list[ProcessRecord] = field(default_factory=list)
    top: list[ProcessRecord] = field(default_factory=list)

    @property
    def total_scanned(self) -> int:
        return len(self.records)


def list_pids(proc_root: Path) -> list[int]:
    """List process IDs: subdirectories of proc_root with all-digit names.

    Raises:
        SourceUnavailable: If proc_root cannot be listed.
    """
    pids: list[int] = []
    try:
        with os.scandir(proc_root) as entries:
            for entry in entries:
                name = entry.name
                if not (name.isascii() and name.isdigit()):
                    continue
                try:
                    if not entry.is_dir():
                        continue
                except OSError:
                    continue
                pids.append(int(name))
    except OSError as e:
        raise SourceUnavailable(proc_root, e.strerror or str(e)) from e
    return pids


def truncate_name(name: str, max_bytes: int = MAX_NAME_BYTES) -> str:
    """Truncate name to at most max_bytes of UTF-8 without splitting a character."""
    encoded = name.encode("utf-8")
    if len(encoded) <= max_bytes:
        return name
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def split_stat_fields(text: str) -> list[str]:
    """Split a /proc/<pid>/stat line into indexed fields.

    The command name is taken between the first "(" and the last ")", so
    names containing spaces, parentheses or newlines stay in a single field.
    Fields after the name are whitespace-separated.

    Returns:
        [pid, name, state, ppid, ...]. When no parenthesized name is present
        the text is split on whitespace as-is.
    """
    open_paren = text.find("(")
    close_paren = text.rfind(")")
    if open_paren == -1 or close_paren < open_paren:
        return text.split()

    head = text[:open_paren].strip()
    name = text[open_paren + 1 : close_paren]
    return [head, name, *text[close_paren + 1 :].split()]


def _field_uint(fields: list[str], index: int) -> int:
    if index < len(fields):
        token = fields[index]
        if token.isascii() and token.isdigit():
            return int(token)
    return 0


def parse_proc_stat(text: str, pid: int | None = None) -> ProcessRecord:
    """Parse a /proc/<pid>/stat line into a ProcessRecord.

    Args:
        text: Contents of the stat file
        pid: Fallback PID when the line does not start with one

    Missing or non-numeric tick fields count as 0.
    """
    fields = split_stat_fields(text)

    parsed_pid = pid or 0
    if fields and fields[0].isascii() and fields[0].isdigit():
        parsed_pid = int(fields[0])

    name = truncate_name(fields[1]) if len(fields) > 1 else ""
    ticks = _field_uint(fields, UTIME_FIELD_INDEX) + _field_uint(fields, STIME_FIELD_INDEX)
    return ProcessRecord(pid=parsed_pid, name=name, cpu_ticks=ticks)


def read_process(proc_root: Path, pid: int) -> ProcessRecord:
    """Read and parse one process's stat file.

    Raises:
        ProcessVanished: If the process is gone or its stat file is unreadable.
    """
    path = proc_root / str(pid) / "stat"
    try:
        text = read_counter(path, PROC_STAT_READ_LIMIT)
    except CounterSourceError as e:
        raise ProcessVanished(path, e.reason) from e
    return parse_proc_stat(text, pid=pid)


def scan_processes(
    proc_root: Path,
    limit: int = MAX_TRACKED_PROCESSES,
) -> list[ProcessRecord]:
    """Read every process under proc_root, keeping at most ``limit`` records.

    Processes that exit mid-scan are skipped. Processes beyond the limit are
    not read.

    Raises:
        SourceUnavailable: If proc_root cannot be listed.
    """
    records: list[ProcessRecord] = []
    for pid in list_pids(proc_root):
        if len(records) >= limit:
            break
        try:
            records.append(read_process(proc_root, pid))
        except ProcessVanished as e:
            log.debug("process_vanished", pid=pid, reason=e.reason)
    return records


def rank_processes(records: list[ProcessRecord], n: int = DEFAULT_TOP_COUNT) -> ScanResult:
    """Sort records by CPU ticks, descending, and take the first n as top.

    The sort is stable; equal tick counts keep their scan order.
    """
    ranked = sorted(records, key=lambda r: r.cpu_ticks, reverse=True)
    return ScanResult(records=ranked, top=ranked[: max(n, 0)])
