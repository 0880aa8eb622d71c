#!/usr/bin/env python3
"""
base.py
-------------------
Base classes for export builders.

Provides:
- BuilderStats: Abstract base class for tracking build statistics
- ExportStats: Counters shared by the DOCX and Markdown builders
- BaseBuilder: Abstract base class for builder implementations
- ManuscriptContent / ChapterContent / SceneContent: the already-filtered
  tree a builder renders (archived chapters and scenes removed, numbers
  assigned)

Builders never query the database; the export manager assembles the
content tree and hands it over.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.dataclasses import BeatData, ChapterData, ProjectData, SceneData
from .options import ExportResult, ExportScope


# ----- Content tree -----
@dataclass
class SceneContent:
    scene: SceneData
    beats: List[BeatData] = field(default_factory=list)
    number: int = 1


@dataclass
class ChapterContent:
    chapter: ChapterData
    number: int
    scenes: List[SceneContent] = field(default_factory=list)


@dataclass
class ManuscriptContent:
    """
    What an export renders.

    Attributes:
        project: Project record
        chapters: Non-archived chapters in order, each with its scenes
        scope: Export scope the tree was built for
        word_count: Stripped-prose word total of the whole project
    """

    project: ProjectData
    chapters: List[ChapterContent] = field(default_factory=list)
    scope: ExportScope = ExportScope.PROJECT
    word_count: int = 0

    @property
    def scene_count(self) -> int:
        return sum(len(chapter.scenes) for chapter in self.chapters)


# ----- Statistics -----
class BuilderStats(ABC):
    """
    Abstract base class for tracking builder statistics.

    Attributes:
        start_time: Timestamp when processing started
    """

    def __init__(self) -> None:
        self.start_time: datetime = datetime.now()

    def duration(self) -> float:
        """Elapsed seconds since initialization."""
        return (datetime.now() - self.start_time).total_seconds()

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of the build."""
        pass


class ExportStats(BuilderStats):
    """Counters for one export run."""

    def __init__(self, output_path: str = "") -> None:
        super().__init__()
        self.output_path = output_path
        self.files_created: int = 0
        self.chapters_exported: int = 0
        self.scenes_exported: int = 0
        self.scene_breaks: int = 0

    def summary(self) -> str:
        return (
            f"{self.chapters_exported} chapters, "
            f"{self.scenes_exported} scenes, "
            f"{self.files_created} files in {self.duration():.2f}s"
        )

    def to_result(self) -> ExportResult:
        return ExportResult(
            output_path=self.output_path,
            files_created=self.files_created,
            chapters_exported=self.chapters_exported,
            scenes_exported=self.scenes_exported,
        )


# ----- Builder -----
class BaseBuilder(ABC):
    """
    Abstract base class for builder implementations.

    Attributes:
        content: Manuscript tree to render
        logger: Optional logger for operation tracking
    """

    def __init__(self, content: ManuscriptContent, logger: Optional[KindlingLogger] = None):
        self.content = content
        self.logger = logger

    @abstractmethod
    def build(self) -> ExportStats:
        """
        Render the content and write the output.

        Raises:
            ExportError: If the output cannot be written
        """
        pass

    def _log_operation(self, operation: str, details: Optional[dict] = None) -> None:
        safe_logger(self.logger).log_operation(operation, details or {})

    def _log_debug(self, message: str) -> None:
        safe_logger(self.logger).log_debug(message)

    def _log_warning(self, message: str) -> None:
        safe_logger(self.logger).log_warning(message)

    def _log_error(self, error: Exception, context: Optional[dict] = None) -> None:
        safe_logger(self.logger).log_error(error, context or {})
