"""
Settings Commands
-----------------

Author and contact details used on SMF title pages.

Commands:
    - show: Print the current settings
    - set: Change one field (an empty value clears it)

Usage:
    kindling settings set author_name "Jane Q. Writer"
    kindling settings set contact_phone ""
    kindling settings show
"""
import click

from kindling.core.exceptions import ValidationError
from kindling.core.logging_manager import handle_cli_error
from kindling.core.settings import AppSettings
from . import get_settings


@click.group()
@click.pass_context
def settings(ctx: click.Context) -> None:
    """Show or change author and contact settings."""
    pass


@settings.command("show")
@click.pass_context
def show(ctx):
    """Print the current settings."""
    try:
        current = get_settings(ctx)

        click.echo(f"\n⚙️  Settings ({ctx.obj['settings_path']})")
        click.echo("=" * 70)
        for key, value in current.to_dict().items():
            click.echo(f"  • {key}: {value if value is not None else '-'}")

    except ValidationError as e:
        handle_cli_error(ctx, e, "settings_show")


@settings.command("set")
@click.argument("key", type=click.Choice(AppSettings.field_names()))
@click.argument("value")
@click.pass_context
def set_value(ctx, key, value):
    """Set one settings field."""
    try:
        data = get_settings(ctx).to_dict()
        data[key] = value
        updated = AppSettings.from_dict(data)
        updated.save(ctx.obj["settings_path"])

        shown = getattr(updated, key)
        if shown is None:
            click.echo(f"✅ Cleared {key}")
        else:
            click.echo(f"✅ {key} = {shown}")

    except (ValidationError, OSError) as e:
        handle_cli_error(ctx, e, "settings_set", additional_context={"key": key})
