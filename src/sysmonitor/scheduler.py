"""Periodic sampling loop with signal-driven cancellation."""

import asyncio
import functools
import signal
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import click
import psutil
import structlog

from sysmonitor import logging as console
from sysmonitor.audit import SIGINT_MESSAGE
from sysmonitor.processes import DEFAULT_TOP_COUNT

if TYPE_CHECKING:
    from sysmonitor.inspector import SampleOutcome, SystemInspector

log = structlog.get_logger()


class InvalidInterval(ValueError):
    """Refresh interval is not a positive whole number of seconds."""


def validate_interval(value: object) -> int:
    """Return value as a positive int number of seconds.

    Accepts ints and strings of decimal digits.

    Raises:
        InvalidInterval: For non-positive, fractional, boolean or non-numeric values.
    """
    if isinstance(value, bool):
        raise InvalidInterval(f"Invalid interval: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ("+", "-") else text
        if not (digits.isascii() and digits.isdigit()):
            raise InvalidInterval(f"Invalid interval: {value!r}")
        value = int(text)
    if not isinstance(value, int):
        raise InvalidInterval(f"Invalid interval: {value!r}")
    if value <= 0:
        raise InvalidInterval(f"Interval must be a positive number of seconds, got {value}")
    return value


class SchedulerState(Enum):
    """Lifecycle of a SamplingScheduler."""

    RUNNING = "running"
    STOPPED = "stopped"


class CancellationToken:
    """One-shot cancellation flag that the sampling loop waits on."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation. Only the first reason is kept."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self, timeout: float) -> bool:
        """Wait up to timeout seconds. Returns True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


class SamplingScheduler:
    """Re-runs sampling operations at a fixed interval until cancelled.

    There is no iteration bound: the loop ends only when the token is
    cancelled, either by SIGINT or by whoever holds the token.
    """

    def __init__(
        self,
        inspector: "SystemInspector",
        interval: int | str,
        token: CancellationToken | None = None,
        emit: Callable[[str], None] = click.echo,
        operations: Sequence[Callable[[], "SampleOutcome"]] | None = None,
        top_count: int = DEFAULT_TOP_COUNT,
    ) -> None:
        self.interval = validate_interval(interval)
        self.inspector = inspector
        self.token = token or CancellationToken()
        self.state = SchedulerState.RUNNING
        self.tick_count = 0
        self._emit = emit
        if operations is None:
            operations = (
                inspector.sample_cpu,
                inspector.sample_memory,
                functools.partial(inspector.scan_top_processes, top_count),
            )
        self._operations = tuple(operations)

    def _handle_signal(self, sig: signal.Signals) -> None:
        """Handle SIGINT by cancelling the token. Nothing else runs here."""
        self.token.cancel(sig.name)

    def tick(self) -> None:
        """Run every operation once and emit its report."""
        self.tick_count += 1
        self._emit(
            f"\n[{datetime.now():%Y-%m-%d %H:%M:%S}] Sample #{self.tick_count} "
            f"(every {self.interval}s, Ctrl+C to stop)"
        )
        for operation in self._operations:
            # Set by an earlier operation; SIGINT is only seen between ticks
            if self.token.cancelled:
                break
            outcome = operation()
            self._emit(outcome.report)

        rss_mb = psutil.Process().memory_info().rss / 1024 / 1024
        log.info("sampling_tick", tick=self.tick_count, rss_mb=round(rss_mb, 1))

    async def run(self) -> None:
        """Sample until the token is cancelled, then write the final audit record."""
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, self._handle_signal, signal.SIGINT)

        console.monitor_started(self.interval)
        log.info("monitor_started", interval=self.interval)
        self.inspector.audit.write(f"Continuous Monitor: Started (interval {self.interval}s)")
        try:
            while not self.token.cancelled:
                try:
                    self.tick()
                except Exception as e:
                    console.sample_failed(str(e))
                    log.error("sample_failed", error=str(e))

                if await self.token.wait(self.interval):
                    break
        finally:
            loop.remove_signal_handler(signal.SIGINT)
            self._finish()

    def _finish(self) -> None:
        self.state = SchedulerState.STOPPED
        reason = self.token.reason or "stopped"
        log.info("monitor_stopped", reason=reason, ticks=self.tick_count)

        if reason == signal.SIGINT.name:
            console.signal_received(reason)
            console.farewell()
            self.inspector.audit.write(SIGINT_MESSAGE)
        else:
            console.monitor_stopped()
            self.inspector.audit.write(f"Continuous Monitor: Stopped ({reason})")

    def run_forever(self) -> None:
        """Blocking wrapper around run()."""
        asyncio.run(self.run())
