"""sysmonitor - Linux system resource inspector backed by /proc counters."""
