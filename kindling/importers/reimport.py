"""
Reimport a project from the source it was imported from.

The stored `source_path` is parsed again with the project's importer and
the result is merged into the existing rows by `source_id`, so outline
edits made in Plottr or yWriter reach the store while prose written in
Kindling stays put.

Only sources with stable ids can be matched. Markdown and Longform
number their chapters by position, so a reordered outline would merge
onto the wrong rows; those projects are rejected.

Usage:
    from kindling.importers.reimport import reimport_project

    summary = reimport_project(db, project_id)
    print(summary.scenes_added, summary.prose_preserved)
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from kindling.core.exceptions import ValidationError
from kindling.core.logging_manager import safe_logger
from kindling.dataclasses import ReimportSummary
from . import get_importer

if TYPE_CHECKING:
    from kindling.database import KindlingDB

REIMPORT_FORMATS = ("plottr", "ywriter")


def reimport_project(
    db: "KindlingDB", project_id: str, dry_run: bool = False
) -> ReimportSummary:
    """
    Re-parse a project's source and merge it into the store.

    The source is parsed inside the session scope, after the project row
    has been read; the merge then runs in that same transaction. With
    `dry_run` the merge is rolled back and only the counts are returned.

    Args:
        db: Database manager
        project_id: Project to refresh
        dry_run: Report what would change without writing

    Returns:
        Counts of added and updated rows and of preserved prose

    Raises:
        NotFoundError: If the project does not exist
        ValidationError: If the project has no source path or its format
            cannot be reimported
        ImporterError: If the source can no longer be read or parsed
    """
    logger = safe_logger(db.logger)

    with db.session_scope() as session:
        project = db.projects.get_project(project_id)
        if not project.source_path:
            raise ValidationError(f"Project has no source path to reimport from: {project_id}")
        if project.source_type not in REIMPORT_FORMATS:
            raise ValidationError(
                f"Reimport is not supported for {project.source_type} projects. "
                f"Use one of: {', '.join(REIMPORT_FORMATS)}"
            )

        source_path = Path(project.source_path)
        bundle = get_importer(project.source_type, logger=db.logger).parse(source_path)
        summary = db.bundles.merge_bundle(project_id, bundle)

        if dry_run:
            session.rollback()

    logger.log_operation(
        "project_reimported",
        {
            "project_id": project_id,
            "source": str(source_path),
            "dry_run": dry_run,
            **summary.to_dict(),
        },
    )
    return summary
