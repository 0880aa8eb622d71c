"""
Enumeration Types
------------------

Enum classes for the Kindling database models.

Enums:
    - SourceType: Where a project was imported from
    - SceneType: Role of a scene in the manuscript (normal, notes, todo, unused)
    - SceneStatus: Revision state of a scene (draft, revised, final)
    - SnapshotTrigger: What caused a snapshot (manual, export, auto)
    - RestoreMode: How a snapshot is restored (replace_current, create_new)

Columns store the plain string values; `parse()` maps free-form input
onto a member and falls back to the default member where one exists.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum
from typing import List, Optional


class SourceType(str, Enum):
    """
    Enumeration of import sources.

    The column is an open string; new importers extend this enum and the
    importer registry together.
    """

    SCRIVENER = "scrivener"
    PLOTTR = "plottr"
    MARKDOWN = "markdown"
    LONGFORM = "longform"
    YWRITER = "ywriter"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available source type choices."""
        return [source.value for source in cls]

    @property
    def display_name(self) -> str:
        display_map = {
            self.SCRIVENER: "Scrivener",
            self.PLOTTR: "Plottr",
            self.MARKDOWN: "Markdown",
            self.LONGFORM: "Longform",
            self.YWRITER: "yWriter",
        }
        return display_map.get(self, self.value.title())


class SceneType(str, Enum):
    """
    Enumeration of scene roles.
    - NORMAL: Part of the manuscript
    - NOTES: Research or planning notes
    - TODO: Placeholder for unwritten material
    - UNUSED: Cut material kept for reference
    """

    NORMAL = "normal"
    NOTES = "notes"
    TODO = "todo"
    UNUSED = "unused"

    @classmethod
    def choices(cls) -> List[str]:
        return [scene_type.value for scene_type in cls]

    @classmethod
    def parse(cls, value: Optional[str]) -> "SceneType":
        """Lenient parse; unknown values become NORMAL."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NORMAL


class SceneStatus(str, Enum):
    """
    Enumeration of scene revision states.
    - DRAFT: First pass
    - REVISED: Edited at least once
    - FINAL: Ready for submission
    """

    DRAFT = "draft"
    REVISED = "revised"
    FINAL = "final"

    @classmethod
    def choices(cls) -> List[str]:
        return [status.value for status in cls]

    @classmethod
    def parse(cls, value: Optional[str]) -> "SceneStatus":
        """Lenient parse; unknown values become DRAFT."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DRAFT


class SnapshotTrigger(str, Enum):
    """
    Enumeration of snapshot triggers.
    - MANUAL: Requested by the author
    - EXPORT: Taken automatically before an export
    - AUTO: Taken by a scheduled or background process
    """

    MANUAL = "manual"
    EXPORT = "export"
    AUTO = "auto"

    @classmethod
    def choices(cls) -> List[str]:
        return [trigger.value for trigger in cls]


class RestoreMode(str, Enum):
    """
    Enumeration of snapshot restore modes.
    - REPLACE_CURRENT: Overwrite the project in place, keeping identifiers
    - CREATE_NEW: Clone into a new project with fresh identifiers
    """

    REPLACE_CURRENT = "replace_current"
    CREATE_NEW = "create_new"

    @classmethod
    def choices(cls) -> List[str]:
        return [mode.value for mode in cls]
