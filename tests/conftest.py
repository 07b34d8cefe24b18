"""Shared test fixtures for sysmonitor."""

from contextlib import ExitStack
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest

from sysmonitor.config import Config

CPU_STAT = """cpu  4705 356 584 3699 23 23 0 0 0 0
cpu0 1393280 32966 572056 13343292 6130 0 17875 0 23933 0
intr 114930548 113199788 3 0 5 263 0 4 [... lots more numbers ...]
"""

MEMINFO = """MemTotal:        1000 kB
MemFree:          200 kB
MemAvailable:     500 kB
Buffers:          100 kB
Cached:           100 kB
SwapCached:         0 kB
Active:           400 kB
SwapTotal:          0 kB
SwapFree:           0 kB
"""


class RecordingAudit:
    """Audit sink that keeps messages in memory."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def write(self, message: str) -> None:
        self.messages.append(message)


def make_stat_line(pid: int, name: str, utime: int, stime: int, state: str = "S") -> str:
    """Build a /proc/<pid>/stat line with the given name and tick counts."""
    # Fields 4..13: ppid pgrp session tty_nr tpgid flags minflt cminflt majflt cmajflt
    middle = "1 1 1 0 -1 4194560 100 0 0 0"
    # Fields 16..: cutime cstime priority nice num_threads itrealvalue starttime ...
    tail = "0 0 20 0 1 0 12345 1000000 200"
    return f"{pid} ({name}) {state} {middle} {utime} {stime} {tail}\n"


def add_process(proc_root: Path, pid: int, name: str, utime: int, stime: int = 0) -> None:
    """Create <proc_root>/<pid>/stat."""
    pid_dir = proc_root / str(pid)
    pid_dir.mkdir(parents=True, exist_ok=True)
    (pid_dir / "stat").write_text(make_stat_line(pid, name, utime, stime))


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """A fake /proc with stat, meminfo and a few processes."""
    root = tmp_path / "proc"
    root.mkdir()
    (root / "stat").write_text(CPU_STAT)
    (root / "meminfo").write_text(MEMINFO)
    (root / "self").mkdir()
    (root / "sys").mkdir()
    (root / "uptime").write_text("100.00 50.00\n")
    add_process(root, 1, "systemd", 100, 50)
    add_process(root, 42, "python3", 900, 100)
    add_process(root, 777, "my(weird)proc", 10, 5)
    return root


@pytest.fixture
def patched_config_paths(tmp_path: Path) -> Iterator[Path]:
    """Redirect Config's home-directory paths into tmp_path."""
    base = tmp_path / "home"
    with ExitStack() as stack:
        stack.enter_context(
            patch.object(Config, "config_dir", new_callable=lambda: property(lambda self: base / "config"))
        )
        stack.enter_context(
            patch.object(Config, "state_dir", new_callable=lambda: property(lambda self: base / "state"))
        )
        yield base
