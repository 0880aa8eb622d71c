"""
Export Commands
---------------

Manuscript export to DOCX (Standard Manuscript Format) and Markdown.

Commands:
    - docx: Write a `.docx` manuscript
    - markdown: Write one Markdown file per scene in chapter folders

Usage:
    # Whole project, SMF defaults
    kindling export docx <project-id> ~/out/novel.docx

    # One chapter, Times New Roman, asterism breaks
    kindling export docx <project-id> ch3.docx --scope chapter --scope-id <chapter-id> \\
        --font times_new_roman --scene-break asterism

    # Markdown, replacing a previous export
    kindling export markdown <project-id> ~/out --delete-existing
"""
import click

from kindling.builders import (
    ChapterHeadingStyle,
    DocxExportOptions,
    ExportResult,
    ExportScope,
    FontFamily,
    LineSpacing,
    MarkdownExportOptions,
    SceneBreakStyle,
)
from kindling.core.exceptions import DatabaseError, ValidationError
from kindling.core.logging_manager import handle_cli_error
from . import get_exporter


def _scope_options(func):
    func = click.option(
        "--scope-id", default=None, help="Chapter or scene id for the narrower scopes"
    )(func)
    func = click.option(
        "--scope",
        type=click.Choice(ExportScope.choices()),
        default=ExportScope.PROJECT.value,
        show_default=True,
        help="Part of the project to export",
    )(func)
    return func


def _echo_result(result: ExportResult) -> None:
    click.echo(f"\n✅ Export Complete: {result.output_path}")
    click.echo(f"  • Files: {result.files_created}")
    click.echo(f"  • Chapters: {result.chapters_exported}")
    click.echo(f"  • Scenes: {result.scenes_exported}")


@click.group()
@click.pass_context
def export(ctx: click.Context) -> None:
    """Export manuscripts to DOCX or Markdown."""
    pass


@export.command("docx")
@click.argument("project_id")
@click.argument("output_file", type=click.Path())
@_scope_options
@click.option("--beat-markers", is_flag=True, help="Render scene titles and beat notes as headings")
@click.option("--synopsis", is_flag=True, help="Include scene synopses")
@click.option("--snapshot", is_flag=True, help="Take a snapshot before exporting")
@click.option(
    "--no-page-breaks", is_flag=True, help="Do not start each chapter on a new page"
)
@click.option("--no-title-page", is_flag=True, help="Omit the SMF title page")
@click.option(
    "--heading-style",
    type=click.Choice(ChapterHeadingStyle.choices()),
    default=ChapterHeadingStyle.NUMBER_ONLY.value,
    show_default=True,
)
@click.option(
    "--scene-break",
    type=click.Choice(SceneBreakStyle.choices()),
    default=SceneBreakStyle.HASH.value,
    show_default=True,
)
@click.option(
    "--font",
    type=click.Choice(FontFamily.choices()),
    default=FontFamily.COURIER_NEW.value,
    show_default=True,
)
@click.option(
    "--line-spacing",
    type=click.Choice(LineSpacing.choices()),
    default=LineSpacing.DOUBLE.value,
    show_default=True,
)
@click.pass_context
def export_docx(
    ctx,
    project_id,
    output_file,
    scope,
    scope_id,
    beat_markers,
    synopsis,
    snapshot,
    no_page_breaks,
    no_title_page,
    heading_style,
    scene_break,
    font,
    line_spacing,
):
    """Export a project to a Standard Manuscript Format .docx file."""
    try:
        options = DocxExportOptions(
            output_path=output_file,
            scope=scope,
            scope_id=scope_id,
            include_beat_markers=beat_markers,
            include_synopsis=synopsis,
            create_snapshot=snapshot,
            page_breaks_between_chapters=not no_page_breaks,
            include_title_page=not no_title_page,
            chapter_heading_style=heading_style,
            scene_break_style=scene_break,
            font_family=font,
            line_spacing=line_spacing,
        )
        click.echo(f"📤 Exporting DOCX: {output_file}")
        result = get_exporter(ctx).export_docx(project_id, options)
        _echo_result(result)

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "export_docx",
            additional_context={"project_id": project_id, "output_file": output_file},
        )


@export.command("markdown")
@click.argument("project_id")
@click.argument("output_dir", type=click.Path(file_okay=False))
@_scope_options
@click.option(
    "--beat-markers/--no-beat-markers",
    default=True,
    show_default=True,
    help="Write beat notes as ## headings",
)
@click.option("--delete-existing", is_flag=True, help="Remove the previous export first")
@click.option("--name", "export_name", default=None, help="Project folder name")
@click.option("--snapshot", is_flag=True, help="Take a snapshot before exporting")
@click.pass_context
def export_markdown(
    ctx, project_id, output_dir, scope, scope_id, beat_markers, delete_existing, export_name, snapshot
):
    """Export a project to Markdown files."""
    try:
        options = MarkdownExportOptions(
            output_path=output_dir,
            scope=scope,
            scope_id=scope_id,
            include_beat_markers=beat_markers,
            delete_existing=delete_existing,
            export_name=export_name,
            create_snapshot=snapshot,
        )
        click.echo(f"📤 Exporting Markdown: {output_dir}")
        result = get_exporter(ctx).export_markdown(project_id, options)
        _echo_result(result)

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "export_markdown",
            additional_context={"project_id": project_id, "output_dir": output_dir},
        )
