"""Bounded reads of kernel counter pseudo-files.

Each counter source is read with a single ``os.read`` capped at a fixed
capacity. Sources larger than the cap are silently truncated.
"""

import os
from pathlib import Path

# Read capacities (bytes)
CPU_STAT_READ_LIMIT = 1024
MEMINFO_READ_LIMIT = 4096
PROC_STAT_READ_LIMIT = 2048


class CounterSourceError(Exception):
    """A counter source could not be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class SourceUnavailable(CounterSourceError):
    """The counter path could not be opened."""


class ReadFailure(CounterSourceError):
    """The counter path was opened but reading it failed."""


class ProcessVanished(SourceUnavailable):
    """A process exited between directory listing and detail read."""


def read_counter(path: Path | str, limit: int) -> str:
    """Read at most ``limit`` bytes from a counter source.

    Args:
        path: Counter pseudo-file (e.g. /proc/stat)
        limit: Maximum number of bytes to read

    Returns:
        Decoded text. Undecodable bytes are replaced.

    Raises:
        SourceUnavailable: If the path cannot be opened.
        ReadFailure: If the read itself fails.
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as e:
        raise SourceUnavailable(path, e.strerror or str(e)) from e

    try:
        data = os.read(fd, limit)
    except OSError as e:
        raise ReadFailure(path, e.strerror or str(e)) from e
    finally:
        os.close(fd)

    return data.decode("utf-8", errors="replace")
