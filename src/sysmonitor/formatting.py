"""Report and summary rendering shared by the CLI, menu and scheduler."""

from sysmonitor.cpu import CpuSample
from sysmonitor.memory import MemorySample
from sysmonitor.processes import ScanResult

RULE = "=" * 40


def kb_to_mb(kb: int) -> float:
    """Convert kilobytes to megabytes for display."""
    return kb / 1024


def banner(title: str) -> str:
    """Render a centered title between two rules."""
    return f"{RULE}\n{title.center(len(RULE)).rstrip()}\n{RULE}"


def cpu_report(sample: CpuSample) -> str:
    lines = [
        banner("CPU USAGE INFORMATION"),
        f"CPU Label    : {sample.label}",
        f"User Time    : {sample.user}",
        f"System Time  : {sample.system}",
        f"Idle Time    : {sample.idle}",
        f"Total Active : {sample.total_active}",
        f"Total Time   : {sample.total}",
        "",
        f"CPU Usage    : {sample.usage_percent:.2f}%",
        RULE,
    ]
    return "\n".join(lines)


def cpu_summary(sample: CpuSample) -> str:
    return f"CPU Usage: {sample.usage_percent:.2f}%"


def memory_report(sample: MemorySample) -> str:
    lines = [
        banner("MEMORY USAGE INFORMATION"),
        f"Total Memory : {kb_to_mb(sample.mem_total):.2f} MB",
        f"Used Memory  : {kb_to_mb(sample.mem_used):.2f} MB",
        f"Free Memory  : {kb_to_mb(sample.mem_free):.2f} MB",
        f"Available    : {kb_to_mb(sample.mem_available):.2f} MB "
        f"({sample.mem_available_percent:.2f}%)",
        f"Buffers      : {kb_to_mb(sample.buffers):.2f} MB",
        f"Cached       : {kb_to_mb(sample.cached):.2f} MB",
        f"Memory Usage : {sample.mem_usage_percent:.2f}%",
        "",
        f"Swap Total   : {kb_to_mb(sample.swap_total):.2f} MB",
        f"Swap Used    : {kb_to_mb(sample.swap_used):.2f} MB",
        f"Swap Free    : {kb_to_mb(sample.swap_free):.2f} MB",
        f"Swap Usage   : {sample.swap_usage_percent:.2f}%",
        RULE,
    ]
    return "\n".join(lines)


def memory_summary(sample: MemorySample) -> str:
    return (
        f"Memory Usage: {sample.mem_usage_percent:.2f}% "
        f"({kb_to_mb(sample.mem_used):.0f} MB / {kb_to_mb(sample.mem_total):.0f} MB), "
        f"Swap Usage: {sample.swap_usage_percent:.2f}%"
    )


def processes_report(result: ScanResult) -> str:
    """Render the top-N table, or "No processes found" for an empty scan."""
    title = f"TOP {len(result.top)} ACTIVE PROCESSES" if result.top else "TOP ACTIVE PROCESSES"
    lines = [banner(title)]
    if not result.top:
        lines.append("No processes found")
    else:
        lines.append(f"{'Rank':<6}{'PID':>8}  {'CPU Ticks':>12}  Name")
        lines.append("-" * len(RULE))
        for rank, record in enumerate(result.top, start=1):
            lines.append(f"{rank:<6}{record.pid:>8}  {record.cpu_ticks:>12}  {record.name}")
        lines.append("")
        lines.append(f"Total processes scanned: {result.total_scanned}")
    lines.append(RULE)
    return "\n".join(lines)


def processes_summary(result: ScanResult) -> str:
    if not result.top:
        return "Top Processes: No processes found"
    return "Top Processes: " + "".join(f"{r.name}({r.pid}) " for r in result.top)
