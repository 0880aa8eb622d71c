#!/usr/bin/env python3
"""
base.py
-------------------
Base class for importers.

Provides:
- BaseImporter: Abstract base class for format-specific parsers

Every importer turns one external source (file or folder) into a
`ParsedBundle`. Importers never touch the database: inserting the bundle
in one transaction is `import_project()`'s job.

Guarantees shared by every importer:
    - identifiers are fresh UUIDs, stable within one parse
    - `source_id` values are distinct per entity kind
    - `position` values are dense from 0 within each parent
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from kindling.core.exceptions import EncodingError, SourceIOError
from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.dataclasses import ParsedBundle


class BaseImporter(ABC):
    """
    Abstract base class for importer implementations.

    Attributes:
        source_type: Value stored in `Project.source_type`
        logger: Optional logger for operation tracking
    """

    source_type: str = ""

    def __init__(self, logger: Optional[KindlingLogger] = None):
        self.logger = logger

    @abstractmethod
    def parse(self, path: Path) -> ParsedBundle:
        """
        Parse a source into a canonical bundle.

        Raises:
            SourceIOError: Source missing or unreadable
            ParseError: Malformed JSON, XML or YAML
            InvalidStructureError: Well-formed input missing required fields
        """
        pass

    # ---- Shared helpers ----
    @staticmethod
    def _require_file(path: Path) -> Path:
        path = Path(path).expanduser()
        if not path.is_file():
            raise SourceIOError(f"File not found: {path}")
        return path

    @staticmethod
    def _require_dir(path: Path) -> Path:
        path = Path(path).expanduser()
        if not path.is_dir():
            raise SourceIOError(f"Folder not found: {path}")
        return path

    @staticmethod
    def _read_text(path: Path) -> str:
        """
        Read a UTF-8 text file.

        Raises:
            SourceIOError: If the file cannot be read
            EncodingError: If the bytes are not valid UTF-8
        """
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise EncodingError(f"{path.name} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise SourceIOError(f"Cannot read {path}: {e}") from e

    def _log_summary(self, path: Path, bundle: ParsedBundle) -> None:
        safe_logger(self.logger).log_operation(
            f"{self.source_type}_parsed",
            {"path": str(path), **bundle.summary()},
        )

    def _log_debug(self, message: str) -> None:
        safe_logger(self.logger).log_debug(message)

    def _log_warning(self, message: str) -> None:
        safe_logger(self.logger).log_warning(message)
