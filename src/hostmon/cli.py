"""
Command-line interface for the host monitor.

Provides commands to run health checks once or continuously.
"""

import logging
import sys
from pathlib import Path

import click
import yaml

from hostmon import __version__
from hostmon.core.config import Config, load_config, save_config
from hostmon.core.exceptions import StartupError
from hostmon.core.runtime import ensure_privileges, setup_logging
from hostmon.health.alerts import Notifier
from hostmon.health.daemon import MonitorDaemon, format_summary_table
from hostmon.health.orchestrator import build_orchestrator
from hostmon.system.local import LocalSystem

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="hostmon")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Host Monitor - Check services, disk and memory, and alert on problems."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    try:
        ctx.obj["config"] = load_config(config_path)
    except StartupError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _startup(config: Config, verbose: bool) -> None:
    """Check privileges and open the daily log; exit on failure."""
    level = "DEBUG" if verbose else config.log_level
    try:
        ensure_privileges(config.require_root)
        setup_logging(config.log_dir, level)
    except StartupError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("run")
@click.argument("mode", type=click.Choice(["once", "continuous"]))
@click.pass_context
def run_cmd(ctx: click.Context, mode: str) -> None:
    """Run health checks.

    MODE is 'once' to run a single cycle and exit (status 1 if any check
    failed), or 'continuous' to run every poll interval until interrupted.
    """
    verbose = ctx.obj.get("verbose", False)
    config: Config = ctx.obj["config"]

    _startup(config, verbose)
    logger.info(f"=== Starting hostmon {__version__} ({mode}) ===")

    notifier = Notifier.from_config(config.alerts)
    orchestrator = build_orchestrator(config, LocalSystem(), notifier)
    daemon = MonitorDaemon(orchestrator, config.thresholds)

    try:
        if mode == "once":
            summary = daemon.run_once()
            click.echo(format_summary_table(summary, show_details=verbose))
            exit_code = 0 if summary.overall_passed else 1
        else:
            daemon.start()
            exit_code = 0
    finally:
        notifier.close()
        logger.info("=== Monitoring ended ===")

    sys.exit(exit_code)


@main.command("config")
@click.option(
    "--save", "save_path", type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the effective configuration to this file"
)
@click.pass_context
def config_cmd(ctx: click.Context, save_path: Path | None) -> None:
    """Show the effective configuration."""
    config: Config = ctx.obj["config"]
    if save_path:
        try:
            save_config(config, save_path)
        except OSError as e:
            click.echo(f"Error: Cannot write {save_path}: {e}", err=True)
            sys.exit(1)
        click.echo(f"Saved configuration to {save_path}", err=True)

    data = config.to_dict()
    if data["alerts"]["smtp_password"]:
        data["alerts"]["smtp_password"] = "********"
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


if __name__ == "__main__":
    main()
