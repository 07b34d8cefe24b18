"""Configuration system for sysmonitor."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit


@dataclass
class SamplingConfig:
    """Sampling configuration."""

    refresh_interval: int = 2  # Seconds between samples in watch mode
    top_count: int = 5  # Processes shown in the top-N view


@dataclass
class SourcesConfig:
    """Kernel counter locations."""

    proc_root: str = "/proc"


@dataclass
class AuditConfig:
    """Audit trail configuration."""

    path: str = "syslog.txt"  # Relative paths resolve against the working directory


@dataclass
class SystemConfig:
    """Structured log file configuration."""

    log_max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    log_backup_count: int = 3  # Number of backup log files to keep


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


@dataclass
class Config:
    """Main configuration container."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    system: SystemConfig = field(default_factory=SystemConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "sysmonitor"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs and other expendable persistent state."""
        return Path.home() / ".local" / "state" / "sysmonitor"

    @property
    def log_path(self) -> Path:
        """Structured (JSON Lines) log path."""
        return self.state_dir / "monitor.log"

    @property
    def audit_path(self) -> Path:
        """Audit trail path."""
        return Path(self.audit.path).expanduser()

    @property
    def proc_root(self) -> Path:
        """Root of the process filesystem."""
        return Path(self.sources.proc_root)

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("sampling", "sources", "audit", "system"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        sources_data = data.get("sources", {})
        audit_data = data.get("audit", {})
        src_defaults = defaults.sources

        return cls(
            sampling=_load_sampling_config(data.get("sampling", {})),
            sources=SourcesConfig(
                proc_root=str(sources_data.get("proc_root", src_defaults.proc_root)),
            ),
            audit=AuditConfig(
                path=str(audit_data.get("path", defaults.audit.path)),
            ),
            system=_load_system_config(data.get("system", {})),
        )


def _load_sampling_config(data: dict) -> SamplingConfig:
    """Load sampling config from TOML data, validating intervals and counts."""
    defaults = SamplingConfig()
    refresh_interval = data.get("refresh_interval", defaults.refresh_interval)
    top_count = data.get("top_count", defaults.top_count)

    if isinstance(refresh_interval, bool) or not isinstance(refresh_interval, int):
        raise ValueError(f"refresh_interval must be an integer, got {refresh_interval!r}")
    if refresh_interval < 1:
        raise ValueError(f"refresh_interval must be >= 1, got {refresh_interval}")
    if isinstance(top_count, bool) or not isinstance(top_count, int):
        raise ValueError(f"top_count must be an integer, got {top_count!r}")
    if top_count < 1:
        raise ValueError(f"top_count must be >= 1, got {top_count}")

    return SamplingConfig(refresh_interval=int(refresh_interval), top_count=int(top_count))


def _load_system_config(data: dict) -> SystemConfig:
    """Load log rotation settings, rejecting non-integer or negative values."""
    defaults = SystemConfig()
    values = {}
    for key in ("log_max_bytes", "log_backup_count"):
        value = data.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        if value < 0:
            raise ValueError(f"{key} must be >= 0, got {value}")
        values[key] = int(value)
    return SystemConfig(**values)
