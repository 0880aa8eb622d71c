#!/usr/bin/env python3
"""
longform.py
-------------------
Importer for Longform (Obsidian plugin) project folders.

The folder holds a YAML manifest plus one Markdown file per scene. The
manifest is either `longform.yaml` / `longform.yml` at the folder root,
or the `longform:` key in the frontmatter of an index note (`Index.md`
preferred, otherwise the first root note carrying the key).

Manifest keys:
    format       Optional; when present must be "scenes"
    title        Project name (defaults to the folder name)
    sceneFolder  Scene folder relative to the manifest ("/" = same folder)
    chapters     [{title, scenes: [...]}, ...]
    scenes       Scenes outside any chapter; nested lists are flattened

Scene entries are file names (`.md` optional) or `{file, title}` maps.
Scenes listed outside a chapter go to a synthesized default chapter.

Scene file layout:
    ---
    (frontmatter, ignored)
    ---
    <!-- kindling: type=flashback status=revised synopsis="Short summary" -->
    Synopsis text (or prose, when the comment set a synopsis)

    <!-- kindling: beats -->
    #### First beat
    Beat prose...
    - Second beat
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from kindling.core.exceptions import InvalidStructureError, ParseError, SourceIOError
from kindling.dataclasses import BeatData, ChapterData, ParsedBundle, ProjectData, SceneData
from kindling.database.models.enums import SceneStatus, SceneType, SourceType
from kindling.utils.md import (
    load_frontmatter,
    paragraphs_to_html,
    parse_bullet,
    parse_heading,
    split_frontmatter,
)
from .base import BaseImporter

DEFAULT_CHAPTER_SOURCE_ID = "longform:default"
BEATS_MARKER = "<!-- kindling: beats -->"
MANIFEST_FILES = ("longform.yaml", "longform.yml")
INDEX_NOTE = "Index.md"

_BEATS_MARKER = re.compile(r"^<!--\s*kindling:\s*beats\s*-->$", re.IGNORECASE)
_METADATA_COMMENT = re.compile(r"^<!--\s*kindling:\s*(.*?)\s*-->$", re.IGNORECASE | re.DOTALL)
_KEY_VALUE = re.compile(r'([^\s=]+)\s*=\s*(?:"((?:\\.|[^"\\])*)"?|(\S*))')
_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


# ----- Comment metadata -----
def unescape_quoted(value: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), value)


def parse_key_values(text: str) -> Dict[str, str]:
    """
    Parse `key=value key="quoted value"` pairs.

    Quoted values honour `\\n`, `\\t`, `\\\\` and `\\"` escapes. Keys with
    an empty value are dropped.

    Examples:
        >>> parse_key_values('type=flashback synopsis="A \\\\"big\\\\" day"')
        {'type': 'flashback', 'synopsis': 'A "big" day'}
    """
    values: Dict[str, str] = {}
    for match in _KEY_VALUE.finditer(text):
        key, quoted, raw = match.groups()
        value = unescape_quoted(quoted) if quoted is not None else raw
        if value:
            values[key] = value
    return values


# ----- Manifest -----
def normalize_scene_folder(value: Any) -> str:
    """`/`, `.` and empty values mean the manifest's own folder."""
    folder = str(value or "").strip().strip("/")
    return "" if folder in ("", ".") else folder


def flatten_scene_entries(value: Any) -> List[Any]:
    """Flatten nested scene lists; scalars other than maps become strings."""
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]

    entries: List[Any] = []
    for item in value:
        if isinstance(item, list):
            entries.extend(flatten_scene_entries(item))
        elif isinstance(item, dict):
            entries.append(item)
        elif item is not None:
            entries.append(str(item))
    return entries


def scene_file_and_title(entry: Any) -> Tuple[Optional[str], Optional[str]]:
    if isinstance(entry, dict):
        name = entry.get("file") or entry.get("path")
        title = entry.get("title")
    else:
        name, title = entry, None
    if name is None or not str(name).strip():
        return None, None
    name = str(name).strip()
    if not name.lower().endswith(".md"):
        name = f"{name}.md"
    title = str(title).strip() if title is not None and str(title).strip() else None
    return name, title


class LongformImporter(BaseImporter):
    """Parse a Longform project folder into a bundle."""

    source_type = SourceType.LONGFORM.value

    def parse(self, path: Path) -> ParsedBundle:
        root = self._require_dir(path)
        manifest, manifest_dir = self._load_manifest(root)

        fmt = manifest.get("format")
        if fmt is not None and str(fmt).strip().lower() != "scenes":
            raise InvalidStructureError(
                f"Unsupported Longform format '{fmt}': only multi-scene projects are supported"
            )

        title = str(manifest.get("title") or "").strip()
        bundle = ParsedBundle(
            project=ProjectData(
                name=title or root.name,
                source_type=self.source_type,
                source_path=str(root),
            )
        )

        folder = normalize_scene_folder(manifest.get("sceneFolder"))
        scene_dir = manifest_dir / folder if folder else manifest_dir
        seen_files: set = set()

        for entry in manifest.get("chapters") or []:
            if not isinstance(entry, dict):
                raise InvalidStructureError("Each Longform chapter must be a mapping")
            chapter = self._new_chapter(
                bundle,
                str(entry.get("title") or "").strip()
                or f"Chapter {len(bundle.chapters) + 1}",
                source_id=f"longform:chapter:{len(bundle.chapters)}",
            )
            self._add_scenes(
                flatten_scene_entries(entry.get("scenes")), chapter, root, scene_dir, seen_files, bundle
            )

        orphans = flatten_scene_entries(manifest.get("scenes"))
        if orphans:
            chapter = self._new_chapter(
                bundle,
                f"Chapter {len(bundle.chapters) + 1}",
                source_id=DEFAULT_CHAPTER_SOURCE_ID,
            )
            self._add_scenes(orphans, chapter, root, scene_dir, seen_files, bundle)

        self._log_summary(root, bundle)
        return bundle

    # ---- Manifest ----
    def _load_manifest(self, root: Path) -> Tuple[Dict[str, Any], Path]:
        for name in MANIFEST_FILES:
            candidate = root / name
            if candidate.is_file():
                try:
                    data = yaml.safe_load(self._read_text(candidate))
                except yaml.YAMLError as e:
                    raise ParseError(f"Invalid YAML in {name}: {e}") from e
                if not isinstance(data, dict):
                    raise InvalidStructureError(f"{name} must contain a mapping")
                # Tolerate a manifest that nests everything under `longform:`
                if isinstance(data.get("longform"), dict):
                    data = data["longform"]
                return data, root

        notes = sorted(root.glob("*.md"), key=lambda p: (p.name != INDEX_NOTE, p.name))
        for note in notes:
            frontmatter, _ = split_frontmatter(self._read_text(note))
            try:
                data = load_frontmatter(frontmatter)
            except yaml.YAMLError as e:
                raise ParseError(f"Invalid frontmatter in {note.name}: {e}") from e
            manifest = data.get("longform")
            if isinstance(manifest, dict):
                self._log_debug(f"Using Longform index note {note.name}")
                return manifest, root

        raise InvalidStructureError(f"No Longform manifest found in {root}")

    # ---- Structure ----
    @staticmethod
    def _new_chapter(bundle: ParsedBundle, title: str, source_id: str) -> ChapterData:
        chapter = ChapterData(
            project_id=bundle.project.id,
            title=title,
            position=len(bundle.chapters),
            source_id=source_id,
        )
        bundle.chapters.append(chapter)
        return chapter

    def _add_scenes(
        self,
        entries: List[Any],
        chapter: ChapterData,
        root: Path,
        scene_dir: Path,
        seen_files: set,
        bundle: ParsedBundle,
    ) -> None:
        position = 0
        for entry in entries:
            name, title = scene_file_and_title(entry)
            if name is None:
                continue
            scene_path = scene_dir / name
            if not scene_path.is_file():
                raise SourceIOError(f"Longform scene file not found: {scene_path}")

            source_id = scene_path.relative_to(root).as_posix()
            if source_id in seen_files:
                self._log_warning(f"Scene {source_id} listed twice; keeping the first entry")
                continue
            seen_files.add(source_id)

            scene = SceneData(
                chapter_id=chapter.id,
                title=title or Path(name).stem,
                position=position,
                source_id=source_id,
            )
            self._parse_scene_file(scene_path, scene, bundle)
            bundle.scenes.append(scene)
            position += 1

    # ---- Scene files ----
    def _parse_scene_file(self, path: Path, scene: SceneData, bundle: ParsedBundle) -> None:
        _, lines = split_frontmatter(self._read_text(path))

        metadata: Dict[str, str] = {}
        body: List[str] = []
        beat_lines: Optional[List[str]] = None
        for line in lines:
            stripped = line.strip()
            if beat_lines is None and _BEATS_MARKER.match(stripped):
                beat_lines = []
                continue
            comment = _METADATA_COMMENT.match(stripped)
            if comment and not metadata and beat_lines is None:
                metadata = parse_key_values(comment.group(1))
                continue
            if beat_lines is None:
                body.append(line)
            else:
                beat_lines.append(line)

        scene.scene_type = SceneType.parse(metadata.get("type") or metadata.get("scene_type")).value
        scene.scene_status = SceneStatus.parse(
            metadata.get("status") or metadata.get("scene_status")
        ).value
        meta_synopsis = (metadata.get("synopsis") or "").strip() or None

        text = "\n".join(body).strip()
        if beat_lines is None:
            scene.synopsis = meta_synopsis
            scene.prose = paragraphs_to_html(text)
            return

        if meta_synopsis:
            scene.synopsis = meta_synopsis
            scene.prose = paragraphs_to_html(text)
        else:
            scene.synopsis = text or None

        for position, (content, prose_lines) in enumerate(self._split_beats(beat_lines)):
            bundle.beats.append(
                BeatData(
                    scene_id=scene.id,
                    content=content,
                    position=position,
                    prose=paragraphs_to_html("\n".join(prose_lines)),
                    source_id=f"{scene.source_id}#beat-{position}",
                )
            )

    @staticmethod
    def _split_beats(lines: List[str]) -> List[Tuple[str, List[str]]]:
        """Beats start at a heading or list item; later lines are its prose."""
        beats: List[Tuple[str, List[str]]] = []
        for line in lines:
            heading = parse_heading(line)
            bullet = parse_bullet(line) if heading is None else None
            start = heading[1] if heading is not None else bullet
            if start:
                beats.append((start, []))
            elif start is None and beats:
                beats[-1][1].append(line)
        return beats
