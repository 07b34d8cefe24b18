"""Caller-facing sampling operations.

Each operation reads its counter source, parses it, renders a report and a
one-line summary, and hands the summary to the audit sink. Counter source
failures are reported and audited here; they never reach the caller.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import structlog

from sysmonitor import formatting
from sysmonitor import logging as console
from sysmonitor.audit import AuditSink
from sysmonitor.cpu import CpuSample, parse_cpu_stat
from sysmonitor.memory import MemorySample, parse_meminfo
from sysmonitor.processes import DEFAULT_TOP_COUNT, ScanResult, rank_processes, scan_processes
from sysmonitor.reader import (
    CPU_STAT_READ_LIMIT,
    MEMINFO_READ_LIMIT,
    CounterSourceError,
    read_counter,
)
from sysmonitor.scheduler import SamplingScheduler, validate_interval

log = structlog.get_logger()


@dataclass
class SampleOutcome:
    """Result of one sampling operation.

    Unpacks as ``(report, summary)``. ``sample`` is None when the counter
    source could not be read, in which case ``failure`` holds the error.
    """

    report: str
    summary: str
    sample: CpuSample | MemorySample | ScanResult | None = None
    failure: CounterSourceError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __iter__(self) -> Iterator[str]:
        yield self.report
        yield self.summary


class SystemInspector:
    """Samples CPU, memory and processes under a proc root."""

    def __init__(self, audit: AuditSink, proc_root: Path = Path("/proc")) -> None:
        self.audit = audit
        self.proc_root = Path(proc_root)

    @property
    def cpu_stat_path(self) -> Path:
        return self.proc_root / "stat"

    @property
    def meminfo_path(self) -> Path:
        return self.proc_root / "meminfo"

    def _failed(self, operation: str, error: CounterSourceError, summary: str) -> SampleOutcome:
        console.source_unavailable(str(error.path), error.reason)
        log.error(
            "counter_source_failed",
            operation=operation,
            kind=type(error).__name__,
            path=str(error.path),
            reason=error.reason,
        )
        self.audit.write(summary)
        report = f"Error reading {error.path}: {error.reason}"
        return SampleOutcome(report=report, summary=summary, failure=error)

    def sample_cpu(self) -> SampleOutcome:
        """Sample aggregate CPU usage from <proc_root>/stat."""
        try:
            text = read_counter(self.cpu_stat_path, CPU_STAT_READ_LIMIT)
        except CounterSourceError as e:
            return self._failed("cpu", e, "ERROR: Failed to read CPU usage")

        sample = parse_cpu_stat(text)
        summary = formatting.cpu_summary(sample)
        self.audit.write(summary)
        log.info("cpu_sampled", usage_percent=round(sample.usage_percent, 2))
        return SampleOutcome(formatting.cpu_report(sample), summary, sample)

    def sample_memory(self) -> SampleOutcome:
        """Sample RAM and swap usage from <proc_root>/meminfo."""
        try:
            text = read_counter(self.meminfo_path, MEMINFO_READ_LIMIT)
        except CounterSourceError as e:
            return self._failed("memory", e, "ERROR: Failed to read memory usage")

        sample = parse_meminfo(text)
        summary = formatting.memory_summary(sample)
        self.audit.write(summary)
        log.info(
            "memory_sampled",
            mem_usage_percent=round(sample.mem_usage_percent, 2),
            swap_usage_percent=round(sample.swap_usage_percent, 2),
        )
        return SampleOutcome(formatting.memory_report(sample), summary, sample)

    def scan_top_processes(self, n: int = DEFAULT_TOP_COUNT) -> SampleOutcome:
        """Rank processes under <proc_root> by CPU ticks and report the top n."""
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        try:
            records = scan_processes(self.proc_root)
        except CounterSourceError as e:
            return self._failed("processes", e, "ERROR: Failed to list processes")

        result = rank_processes(records, n)
        summary = formatting.processes_summary(result)
        self.audit.write(summary)
        log.info("processes_scanned", total=result.total_scanned, top=len(result.top))
        return SampleOutcome(formatting.processes_report(result), summary, result)

    def start_periodic_sampling(
        self, interval_seconds: int | str, top_count: int = DEFAULT_TOP_COUNT
    ) -> None:
        """Sample every interval_seconds until interrupted (blocks).

        Raises:
            InvalidInterval: If the interval is not a positive integer.
        """
        interval = validate_interval(interval_seconds)
        SamplingScheduler(self, interval, top_count=top_count).run_forever()
