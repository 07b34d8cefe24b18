"""System memory counters from /proc/meminfo."""

from dataclasses import dataclass

# Recognized line prefixes mapped to MemorySample fields
MEMINFO_KEYS = {
    "MemTotal:": "mem_total",
    "MemFree:": "mem_free",
    "MemAvailable:": "mem_available",
    "Buffers:": "buffers",
    "Cached:": "cached",
    "SwapTotal:": "swap_total",
    "SwapFree:": "swap_free",
}


def _percent(part: int, whole: int) -> float:
    return part / whole * 100.0 if whole > 0 else 0.0


@dataclass(slots=True, frozen=True)
class MemorySample:
    """Memory and swap counters, all in kilobytes."""

    mem_total: int = 0
    mem_free: int = 0
    mem_available: int = 0
    buffers: int = 0
    cached: int = 0
    swap_total: int = 0
    swap_free: int = 0

    @property
    def mem_used(self) -> int:
        """Used RAM excluding buffers and page cache, clamped at 0."""
        return max(0, self.mem_total - self.mem_free - self.buffers - self.cached)

    @property
    def swap_used(self) -> int:
        return max(0, self.swap_total - self.swap_free)

    @property
    def mem_usage_percent(self) -> float:
        return _percent(self.mem_used, self.mem_total)

    @property
    def mem_available_percent(self) -> float:
        return _percent(self.mem_available, self.mem_total)

    @property
    def swap_usage_percent(self) -> float:
        return _percent(self.swap_used, self.swap_total)


def _leading_uint(text: str) -> int | None:
    """Return the first whitespace-delimited token of text as an int, if any."""
    tokens = text.split()
    if tokens and tokens[0].isascii() and tokens[0].isdigit():
        return int(tokens[0])
    return None


def parse_meminfo(text: str) -> MemorySample:
    """Parse ``Key: value [unit]`` records into a MemorySample.

    Unknown keys are ignored and keys missing from the input stay 0.
    """
    values: dict[str, int] = {}
    for line in text.splitlines():
        for prefix, field_name in MEMINFO_KEYS.items():
            if line.startswith(prefix):
                value = _leading_uint(line[len(prefix) :])
                if value is not None:
                    values[field_name] = value
                break
    return MemorySample(**values)
