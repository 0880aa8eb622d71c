#!/usr/bin/env python3
"""
markdown.py
-------------------
Importer for single-file Markdown outlines.

Heading levels:
    #     project name (first H1 only)
    ##    chapter
    ###   scene
    ####  beat

Body text under a beat heading is the beat's content; a beat heading
with no body keeps its heading text. Text (or a `>` blockquote) under a
scene heading, before any beat, is the scene synopsis. `- ` and `* `
list items under a scene are beats too.

Optional YAML frontmatter supplies `title`, `author`, `description` and
`word_target` (or `wordTarget`).

Example:
    ---
    author: J. Doe
    ---
    # The Book

    ## Chapter One

    ### Arrival
    > The stranger comes to town.

    #### Opening image
    Dust on the road.

    - The bell rings
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from kindling.core.exceptions import ParseError
from kindling.dataclasses import BeatData, ChapterData, ParsedBundle, ProjectData, SceneData
from kindling.database.models.enums import SourceType
from kindling.utils.md import (
    load_frontmatter,
    parse_blockquote,
    parse_bullet,
    parse_heading,
    split_frontmatter,
)
from .base import BaseImporter


def join_plain_paragraphs(lines: List[str]) -> Optional[str]:
    """
    Join body lines into plain text.

    Lines within a paragraph are joined with a space; paragraphs are
    separated by a blank line. Returns None when nothing is left.
    """
    paragraphs: List[str] = []
    current: List[str] = []
    for line in lines:
        if line.strip():
            current.append(line.strip())
        elif current:
            paragraphs.append(" ".join(current))
            current = []
    if current:
        paragraphs.append(" ".join(current))
    return "\n\n".join(paragraphs) if paragraphs else None


def frontmatter_word_target(data: Dict[str, Any]) -> Optional[int]:
    for key in ("word_target", "wordTarget"):
        value = data.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
    return None


class _OutlineBuilder:
    """Line-by-line state machine filling a bundle."""

    def __init__(self, bundle: ParsedBundle):
        self.bundle = bundle
        self.project_name: Optional[str] = None
        self.chapter: Optional[ChapterData] = None
        self.scene: Optional[SceneData] = None
        self.scene_positions: Dict[str, int] = {}
        self.beat_positions: Dict[str, int] = {}

        self.beat_heading: Optional[str] = None
        self.beat_lines: List[str] = []
        self.synopsis_lines: List[str] = []

    # ---- Structure ----
    def _ensure_chapter(self) -> ChapterData:
        if self.chapter is None:
            self._new_chapter(f"Chapter {len(self.bundle.chapters) + 1}")
        return self.chapter

    def _ensure_scene(self) -> SceneData:
        if self.scene is None:
            chapter = self._ensure_chapter()
            self._new_scene(f"Scene {self.scene_positions.get(chapter.id, 0) + 1}")
        return self.scene

    def _new_chapter(self, title: str) -> None:
        self.chapter = ChapterData(
            project_id=self.bundle.project.id,
            title=title,
            position=len(self.bundle.chapters),
            source_id=f"chapter-{len(self.bundle.chapters)}",
        )
        self.bundle.chapters.append(self.chapter)
        self.scene = None

    def _new_scene(self, title: str) -> None:
        chapter = self._ensure_chapter()
        position = self.scene_positions.get(chapter.id, 0)
        self.scene_positions[chapter.id] = position + 1
        self.scene = SceneData(
            chapter_id=chapter.id,
            title=title,
            position=position,
            source_id=f"scene-{len(self.bundle.scenes)}",
        )
        self.bundle.scenes.append(self.scene)

    def _add_beat(self, content: str) -> None:
        scene = self._ensure_scene()
        position = self.beat_positions.get(scene.id, 0)
        self.beat_positions[scene.id] = position + 1
        self.bundle.beats.append(
            BeatData(
                scene_id=scene.id,
                content=content,
                position=position,
                source_id=f"beat-{len(self.bundle.beats)}",
            )
        )

    def _scene_has_beats(self) -> bool:
        return self.scene is not None and self.beat_positions.get(self.scene.id, 0) > 0

    # ---- Pending text ----
    def _finish_beat(self) -> None:
        if self.beat_heading is None:
            return
        body = join_plain_paragraphs(self.beat_lines)
        self._add_beat(body or self.beat_heading)
        self.beat_heading = None
        self.beat_lines = []

    def _finish_synopsis(self) -> None:
        synopsis = join_plain_paragraphs(self.synopsis_lines)
        if synopsis and self.scene is not None and not self.scene.synopsis:
            self.scene.synopsis = synopsis
        self.synopsis_lines = []

    def finish(self) -> None:
        self._finish_beat()
        self._finish_synopsis()

    # ---- Lines ----
    def feed(self, line: str) -> None:
        heading = parse_heading(line)
        if heading is not None:
            self.finish()
            self._handle_heading(*heading)
            return

        if self.beat_heading is not None:
            bullet = parse_bullet(line)
            if bullet is None:
                quoted = parse_blockquote(line)
                self.beat_lines.append(quoted if quoted is not None else line)
                return
            self._finish_beat()

        bullet = parse_bullet(line)
        if bullet is not None:
            self._finish_synopsis()
            if bullet:
                self._add_beat(bullet)
            return

        if self.scene is None or self._scene_has_beats():
            # Text under a chapter heading, or loose text between beats
            return

        quoted = parse_blockquote(line)
        self.synopsis_lines.append(quoted if quoted is not None else line)

    def _handle_heading(self, level: int, text: str) -> None:
        if level == 1:
            if self.project_name is None:
                self.project_name = text
        elif level == 2:
            self._new_chapter(text or f"Chapter {len(self.bundle.chapters) + 1}")
        elif level == 3:
            chapter = self._ensure_chapter()
            self._new_scene(text or f"Scene {self.scene_positions.get(chapter.id, 0) + 1}")
        else:
            self._ensure_scene()
            self.beat_heading = text


class MarkdownImporter(BaseImporter):
    """Parse a Markdown outline into a bundle."""

    source_type = SourceType.MARKDOWN.value

    def parse(self, path: Path) -> ParsedBundle:
        path = self._require_file(path)
        frontmatter, body = split_frontmatter(self._read_text(path))
        try:
            meta = load_frontmatter(frontmatter)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid frontmatter in {path.name}: {e}") from e

        project = ProjectData(
            name=path.stem,
            source_type=self.source_type,
            source_path=str(path),
        )
        bundle = ParsedBundle(project=project)

        builder = _OutlineBuilder(bundle)
        for line in body:
            builder.feed(line)
        builder.finish()

        title = str(meta.get("title") or "").strip()
        project.name = builder.project_name or title or path.stem
        if meta.get("author"):
            project.author_pen_name = str(meta["author"]).strip()
        if meta.get("description"):
            project.description = str(meta["description"]).strip()
        project.word_target = frontmatter_word_target(meta)

        self._log_summary(path, bundle)
        return bundle
