"""Aggregate CPU counters from /proc/stat."""

from dataclasses import dataclass

import structlog

log = structlog.get_logger()

# Tick counters on the aggregate "cpu" line, in kernel order
CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")


@dataclass(slots=True, frozen=True)
class CpuSample:
    """Aggregate CPU tick counters since boot.

    Usage is the share of non-idle ticks over the whole lifetime of the
    system, not a rate between two samples.
    """

    label: str
    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0

    @property
    def total_active(self) -> int:
        return self.user + self.nice + self.system + self.irq + self.softirq

    @property
    def total_idle(self) -> int:
        return self.idle + self.iowait

    @property
    def total(self) -> int:
        return self.total_active + self.total_idle

    @property
    def usage_percent(self) -> float:
        """Non-idle ticks as a percentage of all ticks (0.0 when no ticks)."""
        total = self.total
        if total > 0:
            return self.total_active / total * 100.0
        return 0.0


def parse_cpu_stat(text: str) -> CpuSample:
    """Parse the first line of /proc/stat into a CpuSample.

    Per-core lines are ignored. Parsing stops at the first token that is not
    an unsigned integer; fields that were not reached stay 0.
    """
    first_line = text.split("\n", 1)[0]
    tokens = first_line.split()
    label = tokens[0] if tokens else ""

    values: dict[str, int] = {}
    for name, token in zip(CPU_FIELDS, tokens[1:]):
        if not (token.isascii() and token.isdigit()):
            break
        values[name] = int(token)

    if len(values) < len(CPU_FIELDS):
        log.warning(
            "malformed_counter_data",
            source="cpu",
            expected=len(CPU_FIELDS),
            found=len(values),
        )

    return CpuSample(label=label, **values)
