"""
Importers for external manuscript formats.

Each importer parses one source into a `ParsedBundle`; `import_project`
inserts that bundle in a single transaction.

Usage:
    from kindling.importers import import_project

    project = import_project(db, Path("draft.pltr"))
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Type, Union

from kindling.core.exceptions import ValidationError
from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.dataclasses import ProjectData
from kindling.database.managers.bundle_manager import project_record
from .base import BaseImporter
from .longform import LongformImporter
from .markdown import MarkdownImporter
from .plottr import PlottrImporter
from .ywriter import YWriterImporter

if TYPE_CHECKING:
    from kindling.database import KindlingDB

IMPORTERS: Dict[str, Type[BaseImporter]] = {
    "plottr": PlottrImporter,
    "ywriter": YWriterImporter,
    "markdown": MarkdownImporter,
    "longform": LongformImporter,
}

EXTENSION_FORMATS = {
    ".pltr": "plottr",
    ".json": "plottr",
    ".yw7": "ywriter",
    ".md": "markdown",
    ".markdown": "markdown",
}


def detect_format(path: Union[str, Path]) -> str:
    """
    Guess the source format from a path.

    Raises:
        ValidationError: If the extension is not recognised
    """
    path = Path(path).expanduser()
    if path.is_dir():
        return "longform"
    source_format = EXTENSION_FORMATS.get(path.suffix.lower())
    if source_format is None:
        raise ValidationError(
            f"Cannot detect import format for '{path.name}'. "
            f"Use one of: {', '.join(IMPORTERS)}"
        )
    return source_format


def get_importer(source_format: str, logger: Optional[KindlingLogger] = None) -> BaseImporter:
    """
    Instantiate the importer for a format name.

    Raises:
        ValidationError: If the format is unknown
    """
    try:
        importer_cls = IMPORTERS[source_format.lower()]
    except KeyError:
        raise ValidationError(
            f"Unknown import format '{source_format}'. Use one of: {', '.join(IMPORTERS)}"
        ) from None
    return importer_cls(logger=logger)


def import_project(
    db: "KindlingDB",
    path: Union[str, Path],
    source_format: Optional[str] = None,
) -> ProjectData:
    """
    Parse a source and insert it as a new project.

    Parsing happens before the transaction opens; the whole bundle is
    then inserted in one session scope, so a failure leaves no rows.

    Args:
        db: Database manager
        path: Source file or folder
        source_format: Format name; detected from the path when omitted

    Returns:
        The inserted project

    Raises:
        ImporterError: If the source cannot be parsed
        DatabaseError: If the insert fails (nothing is committed)
    """
    path = Path(path).expanduser()
    source_format = source_format or detect_format(path)
    logger = safe_logger(db.logger)

    bundle = get_importer(source_format, logger=db.logger).parse(path)

    with db.session_scope():
        project = db.bundles.insert_bundle(bundle)
        record = project_record(project)

    logger.log_operation(
        "project_imported",
        {"project_id": record.id, "format": source_format, **bundle.summary()},
    )
    return record


__all__ = [
    "BaseImporter",
    "IMPORTERS",
    "LongformImporter",
    "MarkdownImporter",
    "PlottrImporter",
    "YWriterImporter",
    "detect_format",
    "get_importer",
    "import_project",
]
