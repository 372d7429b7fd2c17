from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .banner import build_banner_info, print_startup_banner
from .config import AppConfig, load_config
from .errors import ConfigurationError, LedgerIOError, WatchlinkError
from .logging_utils import configure_logging
from .orchestrator import Orchestrator
from .persistence import HistoryLedger
from .version import __version__

LOGGER = logging.getLogger(__name__)
CONSOLE = Console()

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def _resolve_log_level(args: argparse.Namespace) -> int:
    if getattr(args, "verbose", False):
        return logging.DEBUG
    name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def _load(args: argparse.Namespace) -> AppConfig:
    config = load_config(config_file=args.config)
    if getattr(args, "dry_run", False) and not config.dry_run:
        config = replace(config, dry_run=True)
    return config


def run_pipeline(args: argparse.Namespace) -> int:
    configure_logging(_resolve_log_level(args), log_file=args.log_file)

    try:
        config = _load(args)
    except ConfigurationError as exc:
        LOGGER.error("Configuration error, aborting: %s", exc)
        return EXIT_CONFIG_ERROR

    print_startup_banner(build_banner_info(config, verbose=args.verbose), CONSOLE)

    orchestrator = Orchestrator(config)
    try:
        orchestrator.run()
    except WatchlinkError:
        # Already logged with context by the orchestrator
        return EXIT_RUN_FAILED
    finally:
        orchestrator.close()
    return EXIT_OK


def run_validate_config(args: argparse.Namespace) -> int:
    try:
        config = _load(args)
    except ConfigurationError as exc:
        CONSOLE.print(f"[red]✗ Configuration invalid:[/red] {exc}")
        return EXIT_CONFIG_ERROR

    table = Table(title="Enabled library services", show_lines=False)
    table.add_column("Service", style="cyan")
    table.add_column("Kind")
    table.add_column("URL")
    table.add_column("Container path")
    table.add_column("Host path")
    for library in config.libraries:
        table.add_row(
            library.name.capitalize(),
            library.kind.label,
            library.base_url,
            library.path_mapping.container_path,
            library.path_mapping.host_path,
        )
    CONSOLE.print(table)
    CONSOLE.print(f"[green]✓ Configuration passed validation[/green] (history: {config.history_path})")
    return EXIT_OK


def run_history(args: argparse.Namespace) -> int:
    try:
        config = _load(args)
    except ConfigurationError as exc:
        CONSOLE.print(f"[red]✗ Configuration invalid:[/red] {exc}")
        return EXIT_CONFIG_ERROR

    ledger = HistoryLedger(config.history_path)
    if not ledger.exists():
        CONSOLE.print(f"No history ledger at {ledger.path} yet")
        return EXIT_OK
    try:
        ids = ledger.ids()
    except LedgerIOError as exc:
        CONSOLE.print(f"[red]✗ {exc}[/red]")
        return EXIT_RUN_FAILED

    for external_id in ids:
        CONSOLE.print(external_id)
    CONSOLE.print(f"[dim]{len(ids)} processed item(s) in {ledger.path}[/dim]")
    return EXIT_OK


def _common_options(*, suppress_defaults: bool) -> argparse.ArgumentParser:
    # Subcommands suppress their defaults so options given before the subcommand survive
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        default=argparse.SUPPRESS if suppress_defaults else None,
        help="Optional YAML config file (environment variables take precedence)",
    )
    common.add_argument(
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_defaults else False,
        help="Enable debug logging",
    )
    common.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_defaults else None,
        help="Also write logs to this file",
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watchlink",
        description="Symlink newly available Trakt watchlist items from Radarr/Sonarr into an output folder.",
        parents=[_common_options(suppress_defaults=False)],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--dry-run", action="store_true", help="Log what would be linked without touching disk")
    parser.set_defaults(handler=run_pipeline)

    common = _common_options(suppress_defaults=True)
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", parents=[common], help="Run one reconciliation pass (default)")
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Log what would be linked without touching disk",
    )
    run_parser.set_defaults(handler=run_pipeline)

    validate_parser = subparsers.add_parser("validate-config", parents=[common], help="Check the configuration")
    validate_parser.set_defaults(handler=run_validate_config)

    history_parser = subparsers.add_parser("history", parents=[common], help="List already processed ids")
    history_parser.set_defaults(handler=run_history)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler: Callable[[argparse.Namespace], int] = args.handler
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
