#!/usr/bin/env python3
"""
Kindling Command-Line Interface
-------------------------------

Modular command-line interface for the manuscript store.

This module provides the main CLI group and the shared context setup
for every command.

Command Structure:
    - Setup & Import (init, import, projects, reimport)
    - Export (export docx, export markdown)
    - Snapshots (snapshot create|list|preview|restore|delete)
    - Settings (settings show|set)

Usage:
    # Get general help
    kindling --help

    # Import an outline and list projects
    kindling import outline.md
    kindling projects

    # Export a manuscript
    kindling export docx <project-id> novel.docx --scene-break asterisks
"""
import click
import logging
from pathlib import Path

from kindling.core.logging_manager import KindlingLogger
from kindling.core.paths import APP_DATA_DIR, DB_FILENAME, SETTINGS_FILENAME
from kindling.core.settings import AppSettings
from kindling.database import ExportManager, KindlingDB, SnapshotManager


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(),
    default=str(APP_DATA_DIR),
    help="App data directory (database, snapshots, settings, logs)",
)
@click.option(
    "--db-path",
    type=click.Path(),
    default=None,
    help="Path to database file (default: <data-dir>/kindling.db)",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=None,
    help="Path to log directory (default: <data-dir>/logs)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, data_dir, db_path, log_dir, verbose):
    """Kindling manuscript manager"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    data_dir = Path(data_dir).expanduser()

    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["db_path"] = Path(db_path) if db_path else data_dir / DB_FILENAME
    ctx.obj["log_dir"] = Path(log_dir) if log_dir else data_dir / "logs"
    ctx.obj["snapshot_dir"] = data_dir / "snapshots"
    ctx.obj["settings_path"] = data_dir / SETTINGS_FILENAME
    ctx.obj["verbose"] = verbose


def get_logger(ctx) -> KindlingLogger:
    """Get or create the CLI logger from context."""
    if "logger" not in ctx.obj:
        ctx.obj["logger"] = KindlingLogger(ctx.obj["log_dir"], component_name="cli")
    return ctx.obj["logger"]


def get_db(ctx) -> KindlingDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = KindlingDB(db_path=ctx.obj["db_path"], logger=get_logger(ctx))
    return ctx.obj["db"]


def get_settings(ctx) -> AppSettings:
    """Load app settings from the settings file in context."""
    return AppSettings.load(ctx.obj["settings_path"])


def get_snapshots(ctx) -> SnapshotManager:
    """Snapshot manager rooted at the context's snapshot directory."""
    return SnapshotManager(get_db(ctx), ctx.obj["snapshot_dir"], logger=get_logger(ctx))


def get_exporter(ctx) -> ExportManager:
    """Export manager wired to the context's snapshots and settings."""
    return ExportManager(
        get_db(ctx),
        snapshots=get_snapshots(ctx),
        settings=get_settings(ctx),
        logger=get_logger(ctx),
    )


# Import and register command modules
# These imports must come after CLI group definition
from .projects import init, import_source, projects, reimport  # noqa: E402
from .export import export  # noqa: E402
from .snapshots import snapshot  # noqa: E402
from .settings import settings  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(import_source)
cli.add_command(projects)
cli.add_command(reimport)

# Register command groups
cli.add_command(export)
cli.add_command(snapshot)
cli.add_command(settings)


if __name__ == "__main__":
    cli(obj={})
