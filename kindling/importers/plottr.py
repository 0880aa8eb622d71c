#!/usr/bin/env python3
"""
plottr.py
-------------------
Importer for Plottr project files (`.pltr`, JSON).

Mapping:
    - Plottr beat (timeline column) -> Chapter
    - Plottr card attached to a beat -> Scene
    - card description and scenarios -> Beats
    - characters / places -> Character / Location
    - card `characters` / `places` id lists -> scene joins

Plottr stores beats per book: `beats = {"1": {"index": {id: beat}}, ...,
"series": {...}}`. Older files keep a flat list instead; both shapes are
accepted. Descriptions and notes are either plain strings or Slate rich
text (`[{"type": "paragraph", "children": [{"text": ...}]}]`).
"""
from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from kindling.core.exceptions import InvalidStructureError, ParseError
from kindling.dataclasses import (
    BeatData,
    ChapterData,
    CharacterData,
    LocationData,
    ParsedBundle,
    ProjectData,
    SceneCharacterRef,
    SceneData,
    SceneLocationRef,
)
from kindling.database.models.enums import SourceType
from .base import BaseImporter

# Keys on character/place objects that are structure, not custom attributes
STRUCTURAL_KEYS = frozenset(
    {
        "id",
        "name",
        "description",
        "notes",
        "color",
        "cards",
        "noteIds",
        "templates",
        "tags",
        "categoryId",
        "imageId",
        "bookIds",
    }
)


def id_to_str(value: Any) -> str:
    """Plottr ids are ints or strings; normalise to str."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def rich_text_to_plain(value: Any) -> Optional[str]:
    """
    Flatten a plain string or Slate rich-text value.

    Paragraphs are joined with newlines; nested children are walked.
    Returns None when there is no text.
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, list):
        return None

    paragraphs: List[str] = []
    for node in value:
        text = _node_text(node)
        if text:
            paragraphs.append(text)
    return "\n".join(paragraphs) if paragraphs else None


def _node_text(node: Any) -> str:
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""
    if "text" in node and isinstance(node["text"], str):
        return node["text"]
    return "".join(_node_text(child) for child in node.get("children") or [])


def attribute_value(value: Any) -> Optional[str]:
    """Render a custom attribute value as text, or None to skip it."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (str, list)):
        return rich_text_to_plain(value)
    return None


class PlottrImporter(BaseImporter):
    """Parse a Plottr JSON file into a bundle."""

    source_type = SourceType.PLOTTR.value

    def parse(self, path: Path) -> ParsedBundle:
        path = self._require_file(path)
        try:
            data = json.loads(self._read_text(path))
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid Plottr JSON in {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidStructureError("Plottr file must contain a JSON object")

        project = ProjectData(
            name=self._project_name(data, path),
            source_type=self.source_type,
            source_path=str(path),
        )
        series = data.get("series") if isinstance(data.get("series"), dict) else {}
        if series.get("premise"):
            project.description = str(series["premise"])
        if series.get("genre"):
            project.genre = str(series["genre"])

        bundle = ParsedBundle(project=project)

        beat_chapters = self._build_chapters(data.get("beats"), bundle)
        characters = self._build_references(data.get("characters"), CharacterData, bundle)
        locations = self._build_references(data.get("places"), LocationData, bundle)
        bundle.characters = list(characters.values())
        bundle.locations = list(locations.values())

        self._build_scenes(data.get("cards"), beat_chapters, characters, locations, bundle)

        self._log_summary(path, bundle)
        return bundle

    # ---- Project ----
    @staticmethod
    def _project_name(data: Dict[str, Any], path: Path) -> str:
        series = data.get("series")
        if isinstance(series, dict) and str(series.get("name") or "").strip():
            return str(series["name"]).strip()

        books = data.get("books")
        if isinstance(books, dict):
            all_ids = books.get("allIds") or [k for k in books if k != "allIds"]
            for book_id in all_ids:
                book = books.get(str(book_id)) or books.get(book_id)
                if isinstance(book, dict) and str(book.get("title") or "").strip():
                    return str(book["title"]).strip()

        return path.stem

    # ---- Chapters ----
    @staticmethod
    def _collect_beats(beats_value: Any) -> List[Dict[str, Any]]:
        if isinstance(beats_value, list):
            return [b for b in beats_value if isinstance(b, dict) and "id" in b]

        beats: List[Dict[str, Any]] = []
        if isinstance(beats_value, dict):
            for book_id, book_beats in beats_value.items():
                if book_id == "series" or not isinstance(book_beats, dict):
                    continue
                index = book_beats.get("index")
                if isinstance(index, dict):
                    beats.extend(b for b in index.values() if isinstance(b, dict) and "id" in b)
        return beats

    def _build_chapters(
        self, beats_value: Any, bundle: ParsedBundle
    ) -> Dict[str, ChapterData]:
        beats = self._collect_beats(beats_value)
        beats.sort(key=lambda b: b.get("position") or 0)

        chapters: Dict[str, ChapterData] = {}
        for beat in beats:
            source_id = id_to_str(beat["id"])
            if source_id in chapters:
                continue
            title = str(beat.get("title") or "").strip()
            if not title or title == "auto":
                title = f"Chapter {len(chapters) + 1}"
            chapter = ChapterData(
                project_id=bundle.project.id,
                title=title,
                position=len(chapters),
                source_id=source_id,
            )
            chapters[source_id] = chapter
            bundle.chapters.append(chapter)
        return chapters

    # ---- References ----
    def _build_references(
        self, entries: Any, record_cls: type, bundle: ParsedBundle
    ) -> Dict[str, Any]:
        records: Dict[str, Any] = {}
        for entry in entries or []:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            source_id = id_to_str(entry["id"])
            if source_id in records:
                continue

            attributes: Dict[str, str] = {}
            notes = rich_text_to_plain(entry.get("notes"))
            if notes:
                attributes["notes"] = notes
            for key, value in entry.items():
                if key in STRUCTURAL_KEYS:
                    continue
                rendered = attribute_value(value)
                if rendered is not None and rendered != "":
                    attributes[key] = rendered

            records[source_id] = record_cls(
                project_id=bundle.project.id,
                name=str(entry.get("name") or "Unnamed"),
                description=attribute_value(entry.get("description")) or None,
                attributes=attributes,
                source_id=source_id,
            )
        return records

    # ---- Scenes and beats ----
    def _build_scenes(
        self,
        cards: Any,
        chapters: Dict[str, ChapterData],
        characters: Dict[str, CharacterData],
        locations: Dict[str, LocationData],
        bundle: ParsedBundle,
    ) -> None:
        cards_by_beat: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        seen_cards = set()
        for card in cards or []:
            if not isinstance(card, dict) or "id" not in card:
                continue
            card_id = id_to_str(card["id"])
            if card_id in seen_cards:
                continue
            seen_cards.add(card_id)
            cards_by_beat[id_to_str(card.get("beatId"))].append(card)

        dropped = sum(len(v) for k, v in cards_by_beat.items() if k not in chapters)
        if dropped:
            self._log_warning(f"Skipped {dropped} Plottr cards attached to unknown beats")

        # Chapter order, then card order within the chapter
        for beat_id, chapter in chapters.items():
            chapter_cards = sorted(
                cards_by_beat.get(beat_id, []),
                key=lambda c: (c.get("positionWithinLine") or 0, c.get("position") or 0),
            )
            for position, card in enumerate(chapter_cards):
                self._build_scene(card, chapter, position, characters, locations, bundle)

    def _build_scene(
        self,
        card: Dict[str, Any],
        chapter: ChapterData,
        position: int,
        characters: Dict[str, CharacterData],
        locations: Dict[str, LocationData],
        bundle: ParsedBundle,
    ) -> None:
        card_id = id_to_str(card["id"])
        synopsis = rich_text_to_plain(card.get("description"))
        synopsis = synopsis.strip() if synopsis and synopsis.strip() else None

        scene = SceneData(
            chapter_id=chapter.id,
            title=str(card.get("title") or f"Scene {position + 1}"),
            position=position,
            synopsis=synopsis,
            source_id=card_id,
        )
        bundle.scenes.append(scene)

        beat_texts: List[str] = []
        if synopsis:
            beat_texts.append(synopsis)
        beat_texts.extend(self._scenario_texts(card.get("scenarios")))

        for index, text in enumerate(beat_texts):
            bundle.beats.append(
                BeatData(
                    scene_id=scene.id,
                    content=text,
                    position=index,
                    source_id=f"{card_id}-{index}",
                )
            )

        linked = set()
        for char_id in card.get("characters") or []:
            character = characters.get(id_to_str(char_id))
            if character and ("c", character.id) not in linked:
                linked.add(("c", character.id))
                bundle.scene_character_refs.append(
                    SceneCharacterRef(scene_id=scene.id, character_id=character.id)
                )
        for place_id in card.get("places") or []:
            location = locations.get(id_to_str(place_id))
            if location and ("l", location.id) not in linked:
                linked.add(("l", location.id))
                bundle.scene_location_refs.append(
                    SceneLocationRef(scene_id=scene.id, location_id=location.id)
                )

    @staticmethod
    def _scenario_texts(value: Any) -> List[str]:
        """Scenario beats: a string, a list of strings, or rich text."""
        if value is None:
            return []
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            candidates = value
        else:
            text = rich_text_to_plain(value)
            candidates = text.split("\n") if text else []
        return [c.strip() for c in candidates if c and c.strip()]
