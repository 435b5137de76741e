"""
Command-line interface for the cabinete tool.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import GranularityPolicy, OrganizerConfig
from .core import FileOrganizer, OrganizeReport
from .exceptions import CabineteError, DisplayStartError
from .pipeline import run_pipeline
from .render import ProgressView, RenderQueue

LOG_LEVEL_ENV_VAR = "CABINETE_LOG_LEVEL"

# Setup logging
logging.basicConfig(
    level=logging.WARNING,  # Default to WARNING to keep the live display clean
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger("cabinete")
console = Console()

app = typer.Typer(
    name="cabinete",
    help="Organize photos (or other files) into folders by date.",
    add_completion=True
)

# Global option for config path
CONFIG_PATH_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Custom path to config file (default: $CABINETE_CONFIG or ~/.cabinete.rc)"
)


def log_level_callback(level: Optional[str]) -> Optional[int]:
    """Convert string log level to corresponding logging level constant."""
    if level is None:
        return None
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        valid_levels = ["debug", "info", "warning", "error", "critical"]
        raise typer.BadParameter(f"Log level must be one of: {', '.join(valid_levels)}")
    return value


LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    "-l",
    help="Set logging level (debug, info, warning, error, critical)",
    callback=log_level_callback
)


def configure_logger(log_level: Optional[int], fallback: str = "warning"):
    """Configure logger with the specified level.

    Without an explicit level, $CABINETE_LOG_LEVEL and then `fallback` apply.
    """
    if log_level is None:
        name = os.environ.get(LOG_LEVEL_ENV_VAR, fallback)
        log_level = getattr(logging, name.upper(), logging.WARNING)
    logger.setLevel(log_level)
    # Also set level for root logger and all its handlers
    logging.getLogger().setLevel(log_level)
    for handler in logging.getLogger().handlers:
        handler.setLevel(log_level)


def resolve_policy(year: bool, month: bool, granularity: Optional[GranularityPolicy],
                   config: OrganizerConfig) -> GranularityPolicy:
    """--year/--month win over --granularity, which wins over the config file."""
    return GranularityPolicy.from_flags(year, month) or granularity or config.granularity


def print_report(report: OrganizeReport, dry_run: bool) -> None:
    """Print the final summary after the display has stopped."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Result", style="cyan")
    table.add_column("Files", justify="right")
    if dry_run:
        table.add_row("Would move", str(report.planned))
    else:
        table.add_row("Moved", str(report.moved))
    table.add_row("Already in place", str(report.in_place))
    table.add_row("Failed", str(report.failed), style="red" if report.failed else None)
    table.add_row("Total", str(report.total))
    console.print(table)

    for failure in report.failures:
        console.print(f"[red]Failed:[/red] {failure.source} ({failure.error})")


@app.command()
def organize(
    directory: Path = typer.Option(
        ...,
        "--dir",
        "-d",
        help="Directory containing files to organize",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    year: bool = typer.Option(
        False,
        "--year",
        "-y",
        help="Organize files by year"
    ),
    month: bool = typer.Option(
        False,
        "--month",
        "-m",
        help="Organize files by month within each year"
    ),
    granularity: Optional[GranularityPolicy] = typer.Option(
        None,
        "--granularity",
        "-g",
        help="Folder layout when no --year/--month flag is given (default: year/month/day)"
    ),
    exclude: List[str] = typer.Option(
        [],
        "--exclude",
        "-e",
        help="File name pattern to leave alone (e.g. '*.tmp'); repeatable"
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without moving anything"
    ),
    no_display: bool = typer.Option(
        False,
        "--no-display",
        help="Do not show the live progress table"
    ),
    config_path: Optional[Path] = CONFIG_PATH_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION
):
    """Move files into folders named after their modification date."""
    try:
        config = OrganizerConfig.load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        configure_logger(log_level)
        logger.error(f"Failed to load configuration: {e}")
        raise typer.Exit(1)

    configure_logger(log_level, config.log_level)

    if exclude:
        config = config.model_copy(update={"exclude_patterns": config.exclude_patterns + list(exclude)})

    policy = resolve_policy(year, month, granularity, config)
    organizer = FileOrganizer(config, directory, granularity=policy, dry_run=dry_run)
    logger.debug(f"Organizing {directory} with policy {policy.value}")

    if dry_run:
        console.print("[yellow]Running in dry-run mode (no changes will be made)[/yellow]")

    try:
        if no_display:
            report = organizer.run()
        else:
            render_queue = RenderQueue(
                ProgressView(policy, root=directory),
                console=console,
                refresh_per_second=config.refresh_per_second,
            )
            report = run_pipeline(organizer, render_queue).report
    except DisplayStartError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    except CabineteError as e:
        logger.error(f"Failed to organize files: {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted; files moved so far stay where they are[/yellow]")
        raise typer.Exit(130)

    print_report(report, dry_run)
    if dry_run:
        console.print(f"[yellow]Would organize {report.planned} files[/yellow]")
    else:
        console.print("[green]Files have been organized![/green]")


@app.command()
def init(
    granularity: GranularityPolicy = typer.Option(
        GranularityPolicy.MONTH,
        "--granularity",
        "-g",
        help="Default folder layout"
    ),
    exclude: List[str] = typer.Option(
        [],
        "--exclude",
        "-e",
        help="File name pattern to leave alone; repeatable"
    ),
    skip_hidden: bool = typer.Option(
        False,
        "--skip-hidden",
        help="Leave dot-files alone"
    ),
    refresh_per_second: float = typer.Option(
        10.0,
        "--refresh",
        help="Maximum display redraws per second"
    ),
    config_path: Optional[Path] = CONFIG_PATH_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION
):
    """Write a configuration file with default settings."""
    configure_logger(log_level)

    try:
        config = OrganizerConfig(
            granularity=granularity,
            exclude_patterns=list(exclude),
            skip_hidden=skip_hidden,
            refresh_per_second=refresh_per_second,
        )
        path = config.save_config(config_path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to initialize configuration: {e}")
        raise typer.Exit(1)

    console.print("[green]Configuration initialized successfully![/green]")
    console.print(f"Config path: [blue]{path}[/blue]")
    console.print(f"Granularity: [blue]{config.granularity.value}[/blue]")


@app.command()
def show_config(
    config_path: Optional[Path] = CONFIG_PATH_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION
):
    """Show the effective configuration."""
    configure_logger(log_level)

    try:
        config = OrganizerConfig.load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to show configuration: {e}")
        raise typer.Exit(1)

    path = OrganizerConfig.resolve_path(config_path)
    source = str(path) if path.exists() else f"{path} (not found, using defaults)"
    console.print(f"[bold]Configuration file:[/bold] {source}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="cyan")
    table.add_row("granularity", config.granularity.value)
    table.add_row("exclude_patterns", ", ".join(config.exclude_patterns) or "-")
    table.add_row("skip_hidden", str(config.skip_hidden))
    table.add_row("refresh_per_second", str(config.refresh_per_second))
    table.add_row("log_level", config.log_level)
    console.print(table)


def main():
    """Main entry point."""
    load_dotenv()
    try:
        app()
    except Exception as e:
        logger.error(f"Unhandled error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
