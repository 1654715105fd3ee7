"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wow_addon_updater.models.config import UpdaterConfig
from wow_addon_updater.models.stats import UpdateStats
from wow_addon_updater.sources import SourceRegistry
from wow_addon_updater.storage.ledger import Profile, VersionLedger
from wow_addon_updater.utils.formatting import format_duration, format_version


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the YAML syntax of your configuration file.",
            "• Every profile with addons needs a 'path' to install into.",
            "• Run `wow-addon-updater init --force` to start from a clean file.",
        ],
        "SourceNotSupportedError": [
            "• Supported hosts are tukui.org, wowinterface.com and github.com.",
            "• Run `wow-addon-updater validate` to check every configured URL.",
        ],
        "RemoteCheckError": [
            "• The addon page or API may be temporarily unavailable.",
            "• GitHub limits anonymous API calls; set GITHUB_TOKEN to raise the limit.",
        ],
        "InstallError": [
            "• Check your internet connection.",
            "• Make sure the game's AddOns directory is writable.",
        ],
        "ArchiveError": [
            "• The downloaded archive is damaged. Please try again later.",
        ],
        "PathTraversalError": [
            "• The archive tried to write outside of the AddOns directory.",
            "• Report the addon to its author; nothing outside was written.",
        ],
        "LedgerError": [
            "• The versions file may be corrupt. Delete it to reinstall all addons.",
        ],
        "HiddenFileError": [
            "• The versions file name must start with a dot, e.g. '.versions'.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_validation_table(
    config_path: Path, config: UpdaterConfig, registry: SourceRegistry
) -> bool:
    """
    Displays every configured addon with the source that would update it.

    Returns:
        True if every addon URL is served by a source.
    """
    console = Console()
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Profile", style="bold cyan")
    table.add_column("Addon URL")
    table.add_column("Source")

    all_supported = True
    for profile in Profile:
        profile_config = config.profile(profile.value)
        for url in profile_config.addons:
            source = next((s for s in registry if s.matches(url)), None)
            if source is None:
                all_supported = False
                table.add_row(profile.value, escape(url), "[red]✗ not supported[/red]")
            else:
                table.add_row(profile.value, escape(url), f"[green]{source.name}[/green]")

    paths = "\n".join(
        f"{profile.value}: [dim]{config.profile(profile.value).path or '(not set)'}[/dim]"
        for profile in Profile
    )
    console.print(
        Panel(
            paths,
            title=f"Install Directories ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )
    if table.row_count:
        console.print(table)
    else:
        console.print("[dim]No addons configured yet.[/dim]")
    return all_supported


def print_versions_table(ledger_path: Path, ledger: VersionLedger):
    """Displays the installed addon versions recorded in the ledger."""
    console = Console()
    table = Table(title=f"Installed Versions ([dim]{ledger_path}[/dim])")
    table.add_column("Profile", style="bold cyan")
    table.add_column("Addon URL")
    table.add_column("Version", style="green")

    for profile in Profile:
        for record in ledger.records(profile):
            table.add_row(
                profile.value, escape(record.name), escape(format_version(record.version))
            )

    if table.row_count:
        console.print(table)
    else:
        console.print("[dim]No addon has been installed yet.[/dim]")


def print_summary_panel(stats: UpdateStats, duration_s: float):
    """Displays the final summary of an update run."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Checked:", f"[cyan]{stats.addons_checked}[/cyan]")
    stats_table.add_row(
        "✓ Updated:", f"[bold green]{stats.addons_updated}[/bold green]"
    )
    stats_table.add_row(
        "○ Up to date:", f"[yellow]{stats.addons_up_to_date}[/yellow]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    for update in stats.updates:
        stats_table.add_row("", "")
        stats_table.add_row(
            f"{update.profile}:",
            f"{escape(update.url)}\n[dim]{escape(format_version(update.old_version))}"
            f" → [/dim][green]{escape(format_version(update.new_version))}[/green]",
        )

    console.print()
    console.print(
        Panel(
            stats_table,
            title="🧩 [bold]Update Complete![/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
