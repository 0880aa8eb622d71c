"""
Snapshot Commands
-----------------

Project snapshots: capture, browse, restore and delete.

Commands:
    - create: Capture a project into a compressed archive
    - list: List a project's snapshots, newest first
    - preview: Show one snapshot's metadata and archived project name
    - restore: Restore in place or as a new project
    - delete: Remove a snapshot and its archive

Usage:
    kindling snapshot create <project-id> "Before rewrite"
    kindling snapshot list <project-id>
    kindling snapshot restore <snapshot-id> --mode create_new --name "Draft 2"
"""
import click

from kindling.core.exceptions import DatabaseError, ValidationError
from kindling.core.logging_manager import handle_cli_error
from kindling.database.models import RestoreMode, SnapshotTrigger
from . import get_snapshots


def _size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.1f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes} bytes"


@click.group()
@click.pass_context
def snapshot(ctx: click.Context) -> None:
    """Create, list, restore and delete project snapshots."""
    pass


@snapshot.command("create")
@click.argument("project_id")
@click.argument("name")
@click.option("--description", default=None, help="Longer note stored with the snapshot")
@click.option(
    "--trigger",
    type=click.Choice(SnapshotTrigger.choices()),
    default=SnapshotTrigger.MANUAL.value,
    show_default=True,
)
@click.pass_context
def create(ctx, project_id, name, description, trigger):
    """Capture a project into a new snapshot."""
    try:
        click.echo(f"💾 Creating snapshot '{name}'...")
        metadata = get_snapshots(ctx).create_snapshot(
            project_id, name, description=description, trigger=trigger
        )
        click.echo(f"✅ Snapshot created: {metadata['id']}")
        click.echo(f"  • File: {metadata['file_path']}")
        click.echo(f"  • Size: {_size(metadata['file_size'])}")

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx, e, "snapshot_create", additional_context={"project_id": project_id}
        )


@snapshot.command("list")
@click.argument("project_id")
@click.pass_context
def list_snapshots(ctx, project_id):
    """List a project's snapshots, newest first."""
    try:
        rows = get_snapshots(ctx).list_snapshots(project_id)

        click.echo("\n📦 Snapshots")
        click.echo("=" * 70)

        if not rows:
            click.echo("\n  No snapshots found")
            return

        for row in rows:
            click.echo(f"\n• {row['name']} [{row['trigger_type']}]")
            click.echo(f"    id: {row['id']}")
            click.echo(f"    Created: {row['created_at']}")
            click.echo(
                f"    {row['chapter_count']} chapters, {row['scene_count']} scenes, "
                f"{row['word_count']:,} words"
            )

        click.echo(f"\nTotal snapshots: {len(rows)}")

    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "snapshot_list", additional_context={"project_id": project_id}
        )


@snapshot.command("preview")
@click.argument("snapshot_id")
@click.pass_context
def preview(ctx, snapshot_id):
    """Show a snapshot's metadata."""
    try:
        info = get_snapshots(ctx).preview_snapshot(snapshot_id)

        click.echo(f"\n🔎 {info['name']}")
        click.echo(f"  • Project: {info['project_name']}")
        click.echo(f"  • Created: {info['created_at']}")
        click.echo(f"  • Trigger: {info['trigger_type']}")
        if info.get("description"):
            click.echo(f"  • Description: {info['description']}")
        click.echo(f"  • Chapters: {info['chapter_count']}")
        click.echo(f"  • Scenes: {info['scene_count']}")
        click.echo(f"  • Beats: {info['beat_count']}")
        click.echo(f"  • Words: {info['word_count']:,}")
        click.echo(
            f"  • Size: {_size(info['file_size'])} "
            f"({_size(info['uncompressed_size'])} uncompressed)"
        )

    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "snapshot_preview", additional_context={"snapshot_id": snapshot_id}
        )


@snapshot.command("restore")
@click.argument("snapshot_id")
@click.option(
    "--mode",
    type=click.Choice(RestoreMode.choices()),
    default=RestoreMode.REPLACE_CURRENT.value,
    show_default=True,
)
@click.option("--name", "new_project_name", default=None, help="Name for create_new")
@click.option("--yes", is_flag=True, help="Do not ask before replacing the project")
@click.pass_context
def restore(ctx, snapshot_id, mode, new_project_name, yes):
    """Restore a snapshot."""
    if mode == RestoreMode.REPLACE_CURRENT.value and not yes:
        click.confirm(
            "⚠️  This will overwrite the current project! Continue?", abort=True
        )

    try:
        click.echo(f"♻️  Restoring snapshot {snapshot_id} ({mode})...")
        project = get_snapshots(ctx).restore_snapshot(
            snapshot_id, mode=mode, new_project_name=new_project_name
        )
        click.echo(f"✅ Restored '{project.name}'")
        click.echo(f"  • id: {project.id}")

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "snapshot_restore",
            additional_context={"snapshot_id": snapshot_id, "mode": mode},
        )


@snapshot.command("delete")
@click.argument("snapshot_id")
@click.confirmation_option(prompt="⚠️  Delete this snapshot and its archive?")
@click.pass_context
def delete(ctx, snapshot_id):
    """Delete a snapshot."""
    try:
        get_snapshots(ctx).delete_snapshot(snapshot_id)
        click.echo(f"🗑️  Snapshot deleted: {snapshot_id}")

    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "snapshot_delete", additional_context={"snapshot_id": snapshot_id}
        )
