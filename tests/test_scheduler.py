"""Tests for the periodic sampling scheduler."""

import asyncio
import os
import signal
from pathlib import Path

import pytest

from sysmonitor.audit import SIGINT_MESSAGE
from sysmonitor.inspector import SampleOutcome, SystemInspector
from sysmonitor.scheduler import (
    CancellationToken,
    InvalidInterval,
    SamplingScheduler,
    SchedulerState,
    validate_interval,
)


class InstantToken(CancellationToken):
    """Token whose wait() returns immediately, so ticks run back to back."""

    async def wait(self, timeout: float) -> bool:
        await asyncio.sleep(0)
        return self.cancelled


class TestValidateInterval:
    """Tests for validate_interval()."""

    @pytest.mark.parametrize("value,expected", [(1, 1), (5, 5), ("3", 3), (" 10 ", 10)])
    def test_accepts_positive_integers(self, value, expected):
        assert validate_interval(value) == expected

    @pytest.mark.parametrize("value", [0, -1, "0", "-5", "--5", "+", "abc", "", "2.5", "٣", 2.5, None, True])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidInterval):
            validate_interval(value)

    def test_invalid_interval_is_value_error(self):
        assert issubclass(InvalidInterval, ValueError)


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_initial_state(self):
        token = CancellationToken()

        assert not token.cancelled
        assert token.reason is None

    def test_first_reason_wins(self):
        token = CancellationToken()

        token.cancel("SIGINT")
        token.cancel("other")

        assert token.cancelled
        assert token.reason == "SIGINT"

    @pytest.mark.asyncio
    async def test_wait_times_out(self):
        assert await CancellationToken().wait(0.01) is False

    @pytest.mark.asyncio
    async def test_wait_returns_on_cancel(self):
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel, "test")

        assert await token.wait(5.0) is True


class TestSamplingScheduler:
    """Tests for SamplingScheduler."""

    def test_rejects_invalid_interval_before_start(self, proc_root: Path, audit):
        inspector = SystemInspector(audit, proc_root=proc_root)

        with pytest.raises(InvalidInterval):
            SamplingScheduler(inspector, 0)

        assert audit.messages == []

    def test_starts_running(self, proc_root: Path, audit):
        scheduler = SamplingScheduler(SystemInspector(audit, proc_root=proc_root), 2)

        assert scheduler.state is SchedulerState.RUNNING
        assert scheduler.tick_count == 0

    def test_handle_signal_cancels_token(self, proc_root: Path, audit):
        scheduler = SamplingScheduler(SystemInspector(audit, proc_root=proc_root), 2)

        scheduler._handle_signal(signal.SIGINT)

        assert scheduler.token.cancelled
        assert scheduler.token.reason == "SIGINT"

    def test_tick_runs_all_operations(self, proc_root: Path, audit):
        emitted: list[str] = []
        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root), 1, emit=emitted.append
        )

        scheduler.tick()

        assert scheduler.tick_count == 1
        assert any("CPU USAGE INFORMATION" in e for e in emitted)
        assert any("MEMORY USAGE INFORMATION" in e for e in emitted)
        assert any("python3" in e for e in emitted)
        assert len(audit.messages) == 3

    def test_tick_honors_top_count(self, proc_root: Path, audit):
        emitted: list[str] = []
        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root), 1, emit=emitted.append, top_count=1
        )

        scheduler.tick()

        assert any("TOP 1 ACTIVE PROCESSES" in e for e in emitted)
        assert audit.messages[-1] == "Top Processes: python3(42) "

    def test_cancel_mid_tick_skips_remaining_operations(self, proc_root: Path, audit):
        token = CancellationToken()
        calls: list[str] = []

        def first() -> SampleOutcome:
            calls.append("first")
            token.cancel("test")
            return SampleOutcome(report="", summary="")

        def second() -> SampleOutcome:
            calls.append("second")
            return SampleOutcome(report="", summary="")

        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root),
            1,
            token=token,
            emit=lambda _: None,
            operations=[first, second],
        )

        scheduler.tick()

        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_runs_until_cancelled(self, proc_root: Path, audit):
        """No internal stop condition: only the token ends the loop."""
        token = InstantToken()
        calls = 0

        def operation() -> SampleOutcome:
            nonlocal calls
            calls += 1
            if calls == 4:
                token.cancel("test")
            return SampleOutcome(report=f"tick {calls}", summary="")

        inspector = SystemInspector(audit, proc_root=proc_root)
        scheduler = SamplingScheduler(
            inspector, 1, token=token, emit=lambda _: None, operations=[operation]
        )

        await scheduler.run()

        assert calls == 4
        assert scheduler.tick_count == 4
        assert scheduler.state is SchedulerState.STOPPED
        assert audit.messages[0] == "Continuous Monitor: Started (interval 1s)"
        assert audit.messages[-1] == "Continuous Monitor: Stopped (test)"

    @pytest.mark.asyncio
    async def test_sigint_stops_loop_and_writes_final_record(self, proc_root: Path, audit):
        def operation() -> SampleOutcome:
            os.kill(os.getpid(), signal.SIGINT)
            return SampleOutcome(report="", summary="")

        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root),
            60,
            emit=lambda _: None,
            operations=[operation],
        )

        await asyncio.wait_for(scheduler.run(), timeout=5.0)

        assert scheduler.token.reason == "SIGINT"
        assert scheduler.state is SchedulerState.STOPPED
        assert scheduler.tick_count == 1
        assert audit.messages[-1] == SIGINT_MESSAGE

    @pytest.mark.asyncio
    async def test_failed_tick_keeps_running(self, proc_root: Path, audit):
        token = InstantToken()
        calls = 0

        def operation() -> SampleOutcome:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            token.cancel("test")
            return SampleOutcome(report="", summary="")

        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root),
            1,
            token=token,
            emit=lambda _: None,
            operations=[operation],
        )

        await scheduler.run()

        assert calls == 2
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_pre_cancelled_token_does_not_sample(self, proc_root: Path, audit):
        token = CancellationToken()
        token.cancel("test")
        scheduler = SamplingScheduler(
            SystemInspector(audit, proc_root=proc_root), 1, token=token, emit=lambda _: None
        )

        await scheduler.run()

        assert scheduler.tick_count == 0
        assert scheduler.state is SchedulerState.STOPPED
