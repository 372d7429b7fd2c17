from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppConfig
from .version import __version__


@dataclass
class BannerInfo:
    version: str
    dry_run: bool
    verbose: bool
    trakt_user: str
    output_dir: str
    history_path: str
    libraries: list[str]
    notifications_enabled: bool


def build_banner_info(config: AppConfig, verbose: bool = False) -> BannerInfo:
    """Build a BannerInfo instance from AppConfig and runtime settings."""
    return BannerInfo(
        version=__version__,
        dry_run=config.dry_run,
        verbose=verbose,
        trakt_user=config.trakt.user_id,
        output_dir=str(config.output_dir),
        history_path=str(config.history_path),
        libraries=[f"{library.name.capitalize()} ({library.kind.label.lower()})" for library in config.libraries],
        notifications_enabled=config.notifications.enabled,
    )


def print_startup_banner(info: BannerInfo, console: Console) -> None:
    """Print a styled startup banner showing version and configuration."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="cyan bold", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Version", f"[bold]{info.version}[/bold]")

    mode_parts = []
    if info.dry_run:
        mode_parts.append("[yellow]DRY-RUN[/yellow]")
    if info.verbose:
        mode_parts.append("[cyan]VERBOSE[/cyan]")
    if mode_parts:
        table.add_row("Mode", " ".join(mode_parts))

    table.add_row("Trakt User", info.trakt_user)
    table.add_row("Libraries", ", ".join(info.libraries) or "[dim]none[/dim]")
    table.add_row("Output", info.output_dir)
    table.add_row("History", info.history_path)
    table.add_row(
        "Notifications",
        "[green]enabled[/green]" if info.notifications_enabled else "[dim]disabled[/dim]",
    )

    console.print(Panel(table, title="[bold]watchlink[/bold]", border_style="cyan", expand=False))
