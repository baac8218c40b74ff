"""CLI module for schema diffing and upgrade SQL generation.

Provides commands to diff two databases, save schema snapshots, and
list configured profiles.

Usage:
    db-differ diff --type mysql --new "app:pw@tcp(new-db:3306)/app" --old "app:pw@tcp(old-db:3306)/app"
    db-differ diff -t mysql -n prod -o staging --summary
    db-differ diff -t mysql -n prod.json -o staging.json --prefix app_
    db-differ snapshot -t mysql --db prod --output prod.json
    db-differ profiles

Commands:
    diff      - Diff two databases and print upgrade SQL for the older one
    snapshot  - Save a database schema snapshot as JSON
    profiles  - List available profiles
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from db_differ.backends import UnknownBackendError, available_backends, get_backend
from db_differ.config.loader import default_config_path, load_db_config
from db_differ.config.models import DatabaseConfig
from db_differ.factory import ProfileNotFoundError, get_differ, resolve_source
from db_differ.schema.delta import Delta
from db_differ.schema.generator import DataIntegrityError
from db_differ.schema.snapshot import save_snapshot

# Status and reports go to stderr; stdout carries only SQL
console = Console(stderr=True)

logger = logging.getLogger(__name__)

# Errors reported as a one-line message and exit code 1
_HANDLED_ERRORS = (
    DataIntegrityError,
    FileNotFoundError,
    ProfileNotFoundError,
    SQLAlchemyError,
    UnknownBackendError,
    ValueError,
)


# ============================================================================
# Helpers
# ============================================================================


def _load_optional_config(args: argparse.Namespace) -> DatabaseConfig | None:
    """Load db.toml if present.

    An explicitly passed ``--config`` must exist; the default location is
    optional because URLs, DSNs and snapshot files need no config.
    """
    if args.config:
        return load_db_config(Path(args.config))
    path = default_config_path()
    if path.exists():
        return load_db_config(path)
    return None


def _print_summary(delta: Delta) -> None:
    table = Table(title="Schema Differences", show_header=True, header_style="bold")
    table.add_column("Change", style="dim")
    table.add_column("Count", justify="right")
    for label, count in delta.summary().items():
        table.add_row(label, str(count) if count else "-")
    console.print(table)


# ============================================================================
# Command implementations
# ============================================================================


def cmd_diff(args: argparse.Namespace) -> int:
    """Diff the new and old databases and print the upgrade statements.

    Args:
        args: Parsed arguments with type, new, old, prefix, summary.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        config = _load_optional_config(args)
        prefix = args.prefix
        if prefix is None:
            prefix = config.diff.prefix if config else ""

        console.print(f"driver: [bold]{escape(args.type)}[/bold]", style="dim")
        console.print(f"new db: [bold cyan]{escape(args.new)}[/bold cyan]", style="dim")
        console.print(f"old db: [bold]{escape(args.old)}[/bold]", style="dim")

        differ = get_differ(args.type, args.new, args.old, config)
        try:
            delta = differ.diff(prefix)
            statements = differ.generate(delta)
        finally:
            differ.close()
    except _HANDLED_ERRORS as e:
        logger.debug("diff failed", exc_info=True)
        console.print(f"[bold red]x[/bold red] {escape(str(e))}", highlight=False)
        return 1

    if args.summary:
        _print_summary(delta)

    if not statements:
        console.print("[bold green]v[/bold green] Schemas are identical")
        return 0

    for statement in statements:
        print(statement)
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    """Save the schema of one database as a JSON snapshot file.

    Args:
        args: Parsed arguments with type, db, output, prefix.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        config = _load_optional_config(args)
        get_backend(args.type)
        source = resolve_source(args.db, config, args.type)
        try:
            snapshot = source.snapshot(args.prefix or "")
        finally:
            source.close()
        path = save_snapshot(snapshot, args.output)
    except _HANDLED_ERRORS as e:
        logger.debug("snapshot failed", exc_info=True)
        console.print(f"[bold red]x[/bold red] {escape(str(e))}", highlight=False)
        return 1

    console.print(
        f"[bold green]v[/bold green] Saved {len(snapshot.tables)} tables to "
        f"[cyan]{path}[/cyan]"
    )
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 if db.toml not found or invalid.
    """
    path = Path(args.config) if args.config else default_config_path()
    try:
        config = load_db_config(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.provider, profile.description or "")

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-differ",
        description="Diff databases and generate upgrade SQL",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: $DB_DIFFER_CONFIG or ./db.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    database_help = "profile name, URL, DSN (user:pw@tcp(host:port)/db) or .json snapshot"

    # diff command
    p_diff = subparsers.add_parser(
        "diff",
        help="Diff two databases and print upgrade SQL for the older one",
    )
    p_diff.add_argument(
        "--type",
        "-t",
        required=True,
        help=f"Database type, valid values: {available_backends()}",
    )
    p_diff.add_argument(
        "--new",
        "-n",
        required=True,
        help=f"Database in higher version: {database_help}",
    )
    p_diff.add_argument(
        "--old",
        "-o",
        required=True,
        help=f"Database in lower version: {database_help}",
    )
    p_diff.add_argument(
        "--prefix",
        default=None,
        help="Only compare tables whose name starts with this prefix",
    )
    p_diff.add_argument(
        "--summary",
        action="store_true",
        help="Print a table of difference counts to stderr",
    )
    p_diff.set_defaults(func=cmd_diff)

    # snapshot command
    p_snapshot = subparsers.add_parser(
        "snapshot",
        help="Save a database schema snapshot as JSON",
    )
    p_snapshot.add_argument(
        "--type",
        "-t",
        required=True,
        help=f"Database type, valid values: {available_backends()}",
    )
    p_snapshot.add_argument("--db", required=True, help=f"Database: {database_help}")
    p_snapshot.add_argument("--output", required=True, help="Snapshot file to write")
    p_snapshot.add_argument(
        "--prefix",
        default=None,
        help="Only include tables whose name starts with this prefix",
    )
    p_snapshot.set_defaults(func=cmd_snapshot)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    return parser


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
