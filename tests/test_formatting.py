"""Tests for report formatting utilities."""

from sysmonitor.cpu import CpuSample
from sysmonitor.formatting import RULE, banner, cpu_report, kb_to_mb


def test_kb_to_mb():
    assert kb_to_mb(2048) == 2.0
    assert kb_to_mb(0) == 0.0


def test_banner():
    lines = banner("CPU USAGE INFORMATION").splitlines()

    assert lines[0] == RULE
    assert lines[1].strip() == "CPU USAGE INFORMATION"
    assert lines[2] == RULE


def test_cpu_report_fields():
    sample = CpuSample(label="cpu", user=30, nice=0, system=20, idle=50)

    report = cpu_report(sample)

    assert "CPU Label    : cpu" in report
    assert "User Time    : 30" in report
    assert "Total Active : 50" in report
    assert "Total Time   : 100" in report
    assert "CPU Usage    : 50.00%" in report
