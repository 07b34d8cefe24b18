"""CLI commands for sysmonitor."""

from pathlib import Path

import click

from sysmonitor.config import Config
from sysmonitor.inspector import SystemInspector
from sysmonitor.processes import DEFAULT_TOP_COUNT

MENU_TEXT = """
========================================
       SysMonitor v1.0
   System Resource Monitor
========================================
1. CPU Usage
2. Memory Usage
3. Top {top_count} Processes
4. Continuous Monitoring
5. Exit
========================================"""


def _make_inspector(config: Config) -> SystemInspector:
    """Configure file logging and build an inspector writing to the audit log."""
    from sysmonitor.audit import AuditLog
    from sysmonitor.logging import configure

    configure(config)
    return SystemInspector(AuditLog(config.audit_path), proc_root=config.proc_root)


def _echo_outcome(outcome) -> None:
    click.echo(outcome.report)
    if not outcome.ok:
        raise SystemExit(1)


@click.group(invoke_without_command=True)
@click.version_option()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/sysmonitor/config.toml)",
)
@click.pass_context
def main(ctx, config_path: Path | None) -> None:
    """Inspect CPU, memory and process usage from /proc.

    Runs the interactive menu when no command is given.
    """
    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


@main.command()
@click.pass_context
def cpu(ctx) -> None:
    """Show aggregate CPU usage."""
    inspector = _make_inspector(ctx.obj["config"])
    _echo_outcome(inspector.sample_cpu())


@main.command()
@click.pass_context
def memory(ctx) -> None:
    """Show RAM and swap usage."""
    inspector = _make_inspector(ctx.obj["config"])
    _echo_outcome(inspector.sample_memory())


@main.command()
@click.option("--count", "-n", type=click.IntRange(min=1), default=None, help="Processes to show")
@click.pass_context
def top(ctx, count: int | None) -> None:
    """List the processes with the most CPU ticks."""
    config = ctx.obj["config"]
    inspector = _make_inspector(config)
    _echo_outcome(inspector.scan_top_processes(count or config.sampling.top_count))


@main.command()
@click.option("--interval", "-i", default=None, help="Refresh interval in seconds")
@click.pass_context
def watch(ctx, interval: str | None) -> None:
    """Sample continuously until Ctrl+C."""
    from sysmonitor.scheduler import InvalidInterval, SamplingScheduler, validate_interval

    config = ctx.obj["config"]
    try:
        seconds = validate_interval(
            interval if interval is not None else config.sampling.refresh_interval
        )
    except InvalidInterval as e:
        raise click.BadParameter(str(e), param_hint="--interval") from e

    inspector = _make_inspector(config)
    SamplingScheduler(inspector, seconds, top_count=config.sampling.top_count).run_forever()


@main.command()
@click.pass_context
def menu(ctx) -> None:
    """Interactive menu (default)."""
    config = ctx.obj["config"]
    inspector = _make_inspector(config)
    run_menu(inspector, config.sampling.refresh_interval, config.sampling.top_count)


def run_menu(
    inspector: SystemInspector, default_interval: int, top_count: int = DEFAULT_TOP_COUNT
) -> None:
    """Prompt for actions until the user exits or presses Ctrl+C."""
    from sysmonitor import logging as console
    from sysmonitor.audit import SIGINT_MESSAGE, STARTED_MESSAGE, USER_EXIT_MESSAGE
    from sysmonitor.scheduler import InvalidInterval, SamplingScheduler, validate_interval

    audit = inspector.audit
    audit.write(STARTED_MESSAGE)

    try:
        while True:
            click.echo(MENU_TEXT.format(top_count=top_count))
            choice = click.prompt("Enter your choice", default="", show_default=False).strip()

            if not choice.isdigit():
                click.echo("Invalid input! Please enter a number.")
                continue
            if choice not in {"1", "2", "3", "4", "5"}:
                click.echo("Invalid choice! Please select 1-5.")
                continue

            click.echo()
            if choice == "5":
                click.echo("Exiting SysMonitor...")
                audit.write(USER_EXIT_MESSAGE)
                return

            if choice == "1":
                click.echo(inspector.sample_cpu().report)
            elif choice == "2":
                click.echo(inspector.sample_memory().report)
            elif choice == "3":
                click.echo(inspector.scan_top_processes(top_count).report)
            else:
                raw = click.prompt("Enter refresh interval in seconds", default=str(default_interval))
                try:
                    interval = validate_interval(raw)
                except InvalidInterval:
                    click.echo("Invalid interval!")
                else:
                    scheduler = SamplingScheduler(inspector, interval, top_count=top_count)
                    scheduler.run_forever()
                    if scheduler.token.reason == "SIGINT":
                        # Interrupt ends the whole session; the record is already written
                        return

            click.pause("\nPress Enter to continue...")
    except (click.Abort, KeyboardInterrupt):
        click.echo()
        console.signal_received("SIGINT")
        console.farewell()
        audit.write(SIGINT_MESSAGE)


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx) -> None:
    """Display current configuration."""
    cfg = ctx.obj["config"]

    click.echo(f"Config file: {cfg.config_path}")
    click.echo(f"Exists: {cfg.config_path.exists()}")
    click.echo()
    click.echo("[sampling]")
    click.echo(f"  refresh_interval = {cfg.sampling.refresh_interval}")
    click.echo(f"  top_count = {cfg.sampling.top_count}")
    click.echo()
    click.echo("[sources]")
    click.echo(f"  proc_root = {cfg.sources.proc_root}")
    click.echo()
    click.echo("[audit]")
    click.echo(f"  path = {cfg.audit.path}")
    click.echo()
    click.echo("[system]")
    click.echo(f"  log_max_bytes = {cfg.system.log_max_bytes}")
    click.echo(f"  log_backup_count = {cfg.system.log_backup_count}")


@config.command("reset")
@click.confirmation_option(prompt="Reset config to defaults?")
def config_reset() -> None:
    """Reset configuration to defaults."""
    from sysmonitor.logging import config_created

    cfg = Config()
    cfg.save()
    config_created(str(cfg.config_path))


if __name__ == "__main__":
    main()
