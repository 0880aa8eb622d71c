"""
Setup & Import Commands
-----------------------

Store initialization, outline import and project listing.

Commands:
    - init: Create the data directory and database schema
    - import: Import a Plottr, yWriter 7, Markdown or Longform source
    - projects: List projects with their structure counts
    - reimport: Refresh a project from its Plottr or yWriter source

Usage:
    # Create the store under the default data directory
    kindling init

    # Import with format detection, or force one
    kindling import ~/outlines/novel.pltr
    kindling import ~/vault/Novel --format longform

    # Pull outline edits back in, keeping written prose
    kindling reimport <project-id> --dry-run
"""
import click

from kindling.core.exceptions import DatabaseError, ImporterError, ValidationError
from kindling.core.logging_manager import handle_cli_error
from kindling.importers import IMPORTERS, import_project
from kindling.importers.reimport import reimport_project
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the data directory and database schema."""
    try:
        click.echo("🚀 Initializing Kindling store...")
        db = get_db(ctx)
        ctx.obj["snapshot_dir"].mkdir(parents=True, exist_ok=True)
        click.echo(f"🗄️  Database: {db.db_path}")
        click.echo(f"📦 Snapshots: {ctx.obj['snapshot_dir']}")
        click.echo("✅ Store ready!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.command("import")
@click.argument("source", type=click.Path(exists=True))
@click.option(
    "--format",
    "source_format",
    type=click.Choice(sorted(IMPORTERS)),
    default=None,
    help="Source format (detected from the path when omitted)",
)
@click.pass_context
def import_source(ctx, source, source_format):
    """Import an outline as a new project."""
    try:
        click.echo(f"📥 Importing {source}...")
        db = get_db(ctx)
        project = import_project(db, source, source_format=source_format)

        with db.session_scope():
            counts = db.projects.structure_counts(project.id)

        click.echo(f"✅ Imported '{project.name}' ({project.source_type})")
        click.echo(f"  • id: {project.id}")
        click.echo(
            f"  • {counts['chapters']} chapters, "
            f"{counts['scenes']} scenes, {counts['beats']} beats"
        )

    except (ImporterError, ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "import",
            additional_context={"source": source, "format": source_format},
        )


@click.command()
@click.pass_context
def projects(ctx):
    """List all projects."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            rows = []
            for project in db.projects.list_projects():
                counts = db.projects.structure_counts(project.id)
                rows.append((project.id, project.name, project.source_type, counts))

        click.echo("\n📚 Projects")
        click.echo("=" * 70)

        if not rows:
            click.echo("\n  No projects found")
            return

        for project_id, name, source_type, counts in rows:
            click.echo(f"\n• {name} [{source_type}]")
            click.echo(f"    id: {project_id}")
            click.echo(
                f"    {counts['chapters']} chapters, "
                f"{counts['scenes']} scenes, {counts['beats']} beats"
            )

        click.echo(f"\nTotal projects: {len(rows)}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "projects")


@click.command()
@click.argument("project_id")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would change without writing",
)
@click.pass_context
def reimport(ctx, project_id, dry_run):
    """Refresh a Plottr or yWriter project from its source file."""
    try:
        db = get_db(ctx)
        summary = reimport_project(db, project_id, dry_run=dry_run)

        if dry_run:
            click.echo("🔍 Dry run, nothing written")
        elif summary.changed:
            click.echo("✅ Reimported from source")
        else:
            click.echo("✅ Already up to date")
        click.echo(
            f"  • chapters: {summary.chapters_added} added, "
            f"{summary.chapters_updated} updated"
        )
        click.echo(
            f"  • scenes: {summary.scenes_added} added, {summary.scenes_updated} updated"
        )
        click.echo(f"  • beats: {summary.beats_added} added, {summary.beats_updated} updated")
        click.echo(f"  • prose preserved: {summary.prose_preserved}")
        if summary.locked_skipped:
            click.echo(f"  • locked, left unchanged: {summary.locked_skipped}")

    except (ImporterError, ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx, e, "reimport", additional_context={"project_id": project_id}
        )
