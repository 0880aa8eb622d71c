#!/usr/bin/env python3
"""
export_manager.py
-----------------
Export orchestration: snapshot, collect, render.

An export runs in three steps:
    1. Optionally take an `export` snapshot (its own transaction; never
       nested inside the read below)
    2. Read the project into a `ManuscriptContent` tree: archived chapters
       and scenes dropped, chapters and scenes numbered from 1 among the
       non-archived ones
    3. Hand the tree to DocxBuilder or MarkdownBuilder

The store mutex is held from the read until the output is written.

Scopes:
    - project: every non-archived chapter
    - chapter: one chapter, numbered by its place in the project
    - scene: one scene (DOCX renders it without a chapter heading)

Missing ids, or ids belonging to another project, raise NotFoundError.

Usage:
    exporter = ExportManager(db, snapshots=SnapshotManager(db))
    result = exporter.export_docx(project_id, DocxExportOptions(output_path=out))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Iterable, List, Optional

# --- Local imports ---
from kindling.builders import (
    ChapterContent,
    DocxBuilder,
    DocxExportOptions,
    ExportResult,
    ExportScope,
    ManuscriptContent,
    MarkdownBuilder,
    MarkdownExportOptions,
    SceneContent,
)
from kindling.core.exceptions import NotFoundError
from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.core.settings import AppSettings
from kindling.dataclasses import BeatData, ChapterData, SceneData
from kindling.utils.smart_text import count_words
from .manager import KindlingDB
from .managers.bundle_manager import project_record, record_from_row
from .models import Chapter, Scene, SnapshotTrigger
from .snapshot_manager import SnapshotManager

PRE_EXPORT_SNAPSHOT = "Pre-export snapshot"


def number_among_active(items: Iterable[Any], target_id: str) -> int:
    """
    One-based number of `target_id` counting only non-archived items.

    Raises:
        NotFoundError: If the target is missing or archived
    """
    number = 0
    for item in items:
        if item.archived:
            if item.id == target_id:
                raise NotFoundError(f"Item is archived: {target_id}")
            continue
        number += 1
        if item.id == target_id:
            return number
    raise NotFoundError(f"Item not found: {target_id}")


class ExportManager:
    """
    Runs DOCX and Markdown exports for a project.

    Attributes:
        db: Database manager
        snapshots: Snapshot manager used for pre-export snapshots
        settings: App settings (title-page contact block)
        logger: Logger for export operations
    """

    def __init__(
        self,
        db: KindlingDB,
        snapshots: Optional[SnapshotManager] = None,
        settings: Optional[AppSettings] = None,
        logger: Optional[KindlingLogger] = None,
    ) -> None:
        self.db = db
        self.logger = safe_logger(logger or db.logger)
        self.snapshots = snapshots or SnapshotManager(db, logger=self.logger)
        self.settings = settings or AppSettings()

    # ---- Content ----
    def collect(
        self,
        project_id: str,
        scope: ExportScope = ExportScope.PROJECT,
        scope_id: Optional[str] = None,
    ) -> ManuscriptContent:
        """
        Read the export tree for a scope. Must run inside a session scope.

        Raises:
            NotFoundError: If the project, chapter or scene is missing,
                archived or belongs to another project
        """
        projects = self.db.projects
        project = projects.get_project(project_id)
        all_chapters = projects.get_chapters(project_id, include_archived=True)
        active = [chapter for chapter in all_chapters if not chapter.archived]

        content = ManuscriptContent(
            project=project_record(project),
            scope=scope,
            word_count=self._word_count(active),
        )

        if scope is ExportScope.PROJECT:
            content.chapters = [
                self._chapter_content(chapter, number)
                for number, chapter in enumerate(active, 1)
            ]
        elif scope is ExportScope.CHAPTER:
            chapter = self._owned_chapter(project_id, scope_id)
            if chapter.archived:
                raise NotFoundError(f"Chapter is archived: {scope_id}")
            number = number_among_active(all_chapters, chapter.id)
            content.chapters = [self._chapter_content(chapter, number)]
        else:
            scene = projects.get_scene(scope_id)
            chapter = self._owned_chapter(project_id, scene.chapter_id, scene_id=scope_id)
            if scene.archived:
                raise NotFoundError(f"Scene is archived: {scope_id}")
            if chapter.archived:
                raise NotFoundError(f"Scene {scope_id} is in an archived chapter")
            scenes = projects.get_scenes(chapter.id, include_archived=True)
            content.chapters = [
                ChapterContent(
                    chapter=record_from_row(ChapterData, chapter),
                    number=number_among_active(all_chapters, chapter.id),
                    scenes=[
                        self._scene_content(scene, number_among_active(scenes, scene.id))
                    ],
                )
            ]
        return content

    def _owned_chapter(
        self, project_id: str, chapter_id: Optional[str], scene_id: Optional[str] = None
    ) -> Chapter:
        chapter = self.db.projects.get_chapter(chapter_id)
        if chapter.project_id != project_id:
            what = f"Scene {scene_id}" if scene_id else f"Chapter {chapter_id}"
            raise NotFoundError(f"{what} does not belong to project {project_id}")
        return chapter

    def _chapter_content(self, chapter: Chapter, number: int) -> ChapterContent:
        scenes = self.db.projects.get_scenes(chapter.id, include_archived=False)
        return ChapterContent(
            chapter=record_from_row(ChapterData, chapter),
            number=number,
            scenes=[self._scene_content(scene, n) for n, scene in enumerate(scenes, 1)],
        )

    def _scene_content(self, scene: Scene, number: int) -> SceneContent:
        beats = self.db.projects.get_beats(scene.id)
        return SceneContent(
            scene=record_from_row(SceneData, scene),
            beats=[record_from_row(BeatData, beat) for beat in beats],
            number=number,
        )

    def _word_count(self, chapters: List[Chapter]) -> int:
        """Stripped beat-prose words over non-archived chapters and scenes."""
        total = 0
        for chapter in chapters:
            for scene in self.db.projects.get_scenes(chapter.id, include_archived=False):
                for beat in self.db.projects.get_beats(scene.id):
                    total += count_words(beat.prose)
        return total

    # ---- Exports ----
    def _pre_export_snapshot(self, project_id: str, name: str, description: str) -> None:
        self.snapshots.create_snapshot(
            project_id, name, description=description, trigger=SnapshotTrigger.EXPORT
        )

    def export_docx(self, project_id: str, options: DocxExportOptions) -> ExportResult:
        """
        Export a project (or one chapter / scene) to an SMF `.docx`.

        Raises:
            NotFoundError: If the project or scoped id is missing
            ExportError: If the file cannot be written
        """
        if options.create_snapshot:
            self._pre_export_snapshot(
                project_id,
                PRE_EXPORT_SNAPSHOT,
                "Automatic snapshot created before DOCX export",
            )

        with self.db.lock:
            with self.db.session_scope():
                content = self.collect(project_id, options.scope, options.scope_id)
            builder = DocxBuilder(content, options, self.settings, logger=self.logger)
            stats = builder.build()

        self.logger.log_info(f"DOCX export: {stats.summary()}")
        return stats.to_result()

    def export_markdown(self, project_id: str, options: MarkdownExportOptions) -> ExportResult:
        """
        Export a project (or one chapter / scene) to Markdown files.

        Raises:
            NotFoundError: If the project or scoped id is missing
            ExportError: If a file cannot be written
        """
        if options.create_snapshot:
            name = (options.export_name or "").strip() or PRE_EXPORT_SNAPSHOT
            self._pre_export_snapshot(
                project_id, name, "Automatic snapshot created before export"
            )

        with self.db.lock:
            with self.db.session_scope():
                content = self.collect(project_id, options.scope, options.scope_id)
            builder = MarkdownBuilder(content, options, logger=self.logger)
            stats = builder.build()

        self.logger.log_info(f"Markdown export: {stats.summary()}")
        return stats.to_result()
