"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from wow_addon_updater import __version__
from wow_addon_updater.core.updater import AddonUpdater
from wow_addon_updater.exceptions import AddonUpdaterError
from wow_addon_updater.models.stats import UpdateStats
from wow_addon_updater.sources import SourceRegistry, close_sources, default_sources
from wow_addon_updater.storage.config_manager import DEFAULT_CONFIG_PATH, ConfigManager
from wow_addon_updater.storage.ledger import DEFAULT_LEDGER_PATH, VersionLedger

from .formatters import (
    print_summary_panel,
    print_validation_table,
    print_versions_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("wow_addon_updater")

app = typer.Typer(
    name="wow-addon-updater",
    help=(
        "Keeps your World of Warcraft addons up to date. Use 'wow-addon-updater"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_OPTION = typer.Option(
    DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to the YAML config file."
)
VERSIONS_OPTION = typer.Option(
    DEFAULT_LEDGER_PATH,
    "--versions-file",
    help="Hidden file recording the installed addon versions.",
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """WoW Addon Updater CLI"""
    if version:
        console.print(
            f"[bold]wow-addon-updater[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("wow_addon_updater").setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


async def run_update(config_path: Path, versions_path: Path) -> UpdateStats:
    """
    Loads the configuration and updates all addons.

    The sources are created here and always closed, whatever the outcome.
    """
    config = ConfigManager(config_path).load_config()
    sources = default_sources()
    try:
        updater = AddonUpdater(config, SourceRegistry(sources), versions_path)
        return await updater.update_addons()
    finally:
        await close_sources(sources)


@app.command()
def update(
    config_path: Path = CONFIG_OPTION,
    versions_path: Path = VERSIONS_OPTION,
    wait: bool = typer.Option(
        False, "--wait", help="Wait for Enter before exiting (keeps the window open)."
    ),
):
    """Check all configured addons and install new versions."""
    try:
        config_manager = ConfigManager(config_path)
        if not config_manager.exists():
            config_manager.save_default_config()
            console.print(
                f"[yellow]No config file found. Created an empty config at "
                f"'{config_path}'.[/yellow]"
            )
            console.print(
                "Add the install paths and addon URLs, then run "
                "[cyan]wow-addon-updater update[/cyan] again."
            )
            return

        console.print("[bold cyan]🧩 Starting the WoW addon updater...[/bold cyan]")
        start_time = time.monotonic()
        try:
            stats = asyncio.run(run_update(config_path, versions_path))
        except AddonUpdaterError as e:
            console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
            log.debug("Full traceback:", exc_info=True)
            raise typer.Exit(code=1) from e

        print_summary_panel(stats, time.monotonic() - start_time)
        console.print("[bold green]Enjoy the updates![/bold green]")
    finally:
        if wait:
            typer.prompt(
                "Press Enter to quit", default="", show_default=False
            )


@app.command()
def init(
    config_path: Path = CONFIG_OPTION,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config file without asking."
    ),
):
    """Create an empty configuration file."""
    config_manager = ConfigManager(config_path)
    if (
        config_manager.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    config_manager.save_default_config()
    console.print(f"[bold green]✓ Configuration saved to '{config_path}'[/bold green]")


@app.command()
def validate(config_path: Path = CONFIG_OPTION):
    """Validate the configuration and show which source serves each addon."""
    try:
        config = ConfigManager(config_path).load_config()
    except AddonUpdaterError as e:
        console.print(f"[red]✗ Configuration is invalid: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    sources = default_sources()
    try:
        all_supported = print_validation_table(
            config_path, config, SourceRegistry(sources)
        )
    finally:
        asyncio.run(close_sources(sources))

    if not all_supported:
        console.print("[red]✗ Some addon URLs are not supported.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Configuration is valid.[/green]")


@app.command()
def versions(versions_path: Path = VERSIONS_OPTION):
    """Show the installed addon versions."""
    try:
        ledger = VersionLedger.load(versions_path)
    except AddonUpdaterError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    print_versions_table(versions_path, ledger)
