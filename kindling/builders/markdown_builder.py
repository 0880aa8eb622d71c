#!/usr/bin/env python3
"""
markdown_builder.py
-------------------
Write a manuscript as a folder of Markdown files.

Layout:
    {output}/{ProjectName}/{NN - ChapterTitle}/{NN - SceneTitle}.md

Numbers are two-digit, one-based and count only non-archived chapters
and scenes. Names pass through `sanitize_filename`.

Scene file:
    # Scene title

    > Synopsis line one
    > Synopsis line two

    ## Beat content        (when beat markers are on)

    Prose paragraph one.

    Prose paragraph two.

`delete_existing` removes only what the scope targets: the project
folder, the chapter folder or the single scene file.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import shutil
from pathlib import Path
from typing import List, Optional

# --- Local imports ---
from kindling.core.exceptions import ExportError
from kindling.core.logging_manager import KindlingLogger
from kindling.utils.fs import sanitize_filename
from kindling.utils.smart_text import strip_html
from .base import BaseBuilder, ChapterContent, ExportStats, ManuscriptContent, SceneContent
from .options import ExportScope, MarkdownExportOptions


def numbered_name(number: int, title: str) -> str:
    """`{NN} - {sanitized title}`."""
    return f"{number:02} - {sanitize_filename(title)}"


def render_scene_markdown(content: SceneContent, include_beat_markers: bool) -> str:
    """Markdown text of one scene file."""
    scene = content.scene
    parts: List[str] = [f"# {scene.title}\n\n"]

    if scene.synopsis and scene.synopsis.strip():
        quoted = scene.synopsis.strip().replace("\n", "\n> ")
        parts.append(f"> {quoted}\n\n")

    for beat in content.beats:
        if include_beat_markers:
            parts.append(f"## {beat.content}\n\n")
        prose = strip_html(beat.prose or "")
        if prose:
            parts.append(f"{prose}\n\n")

    return "".join(parts)


class MarkdownBuilder(BaseBuilder):
    """
    Export a manuscript tree to Markdown files.

    Attributes:
        content: Manuscript tree (archived rows already removed)
        options: Markdown export options
        project_folder: `{output_path}/{export name}`
    """

    def __init__(
        self,
        content: ManuscriptContent,
        options: MarkdownExportOptions,
        logger: Optional[KindlingLogger] = None,
    ):
        super().__init__(content, logger)
        self.options = options

        name = (options.export_name or "").strip() or content.project.name
        self.project_folder: Path = options.output_path / sanitize_filename(name)
        self.stats = ExportStats(str(self.project_folder))

    # ---- Filesystem ----
    def _remove(self, path: Path) -> None:
        if not self.options.delete_existing or not path.exists():
            return
        self._log_debug(f"Removing existing export {path}")
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()

    def _write_scene(self, folder: Path, scene: SceneContent) -> Path:
        path = folder / f"{numbered_name(scene.number, scene.scene.title)}.md"
        if self.content.scope is ExportScope.SCENE:
            self._remove(path)
        path.write_text(
            render_scene_markdown(scene, self.options.include_beat_markers), encoding="utf-8"
        )
        self.stats.files_created += 1
        self.stats.scenes_exported += 1
        return path

    def _write_chapter(self, chapter: ChapterContent) -> None:
        folder = self.project_folder / numbered_name(chapter.number, chapter.chapter.title)
        if self.content.scope is ExportScope.CHAPTER:
            self._remove(folder)
        folder.mkdir(parents=True, exist_ok=True)

        for scene in chapter.scenes:
            self._write_scene(folder, scene)

        if self.content.scope is not ExportScope.SCENE:
            self.stats.chapters_exported += 1

    # ---- Build ----
    def build(self) -> ExportStats:
        """
        Write the scene files.

        Raises:
            ExportError: If a folder or file cannot be written
        """
        try:
            if self.content.scope is ExportScope.PROJECT:
                self._remove(self.project_folder)
            self.project_folder.mkdir(parents=True, exist_ok=True)

            for chapter in self.content.chapters:
                self._write_chapter(chapter)
        except OSError as e:
            self._log_error(e, {"operation": "markdown_export", "folder": str(self.project_folder)})
            raise ExportError(f"Markdown export failed: {e}") from e

        self._log_operation(
            "markdown_exported",
            {
                "output_path": str(self.project_folder),
                "files": self.stats.files_created,
                "chapters": self.stats.chapters_exported,
                "scenes": self.stats.scenes_exported,
            },
        )
        return self.stats
