#!/usr/bin/env python3
"""
ywriter.py
-------------------
Importer for yWriter 7 project files (`.yw7`, XML).

Mapping:
    - CHAPTER (Type 0) -> Chapter; <SectionStart> marks a part separator
    - SCENE -> Scene, in the order the chapter's <Scenes> list gives
    - Goal / Conflict / Outcome -> three beats ("Goal: ...")
      (Response / Dilemma / Decision for reaction scenes)
    - SceneContent -> a fourth "Scene Content" beat carrying the prose
    - CHARACTER / LOCATION -> Character / Location
    - ITEM -> ReferenceItem of type "item"
    - scene <Characters>, <Locations>, <Items> -> scene joins

Notes and to-do chapters (Type 1/2) and scenes flagged <Unused> are
skipped. Chapters keep their document order.

Encoding: a UTF-16 LE/BE or UTF-8 byte-order mark selects the codec;
without one the file is read as UTF-8.
"""
from __future__ import annotations

import html
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from kindling.core.exceptions import EncodingError, InvalidStructureError, ParseError, SourceIOError
from kindling.dataclasses import (
    BeatData,
    ChapterData,
    CharacterData,
    LocationData,
    ParsedBundle,
    ProjectData,
    ReferenceItemData,
    SceneCharacterRef,
    SceneData,
    SceneLocationRef,
    SceneReferenceItemRef,
)
from kindling.database.models.enums import SceneStatus, SourceType
from .base import BaseImporter

ITEM_REFERENCE_TYPE = "item"

ACTION_LABELS = ("Goal", "Conflict", "Outcome")
REACTION_LABELS = ("Response", "Dilemma", "Decision")
BEAT_KEYS = ("goal", "conflict", "outcome")

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


# ----- Decoding -----
def detect_encoding(raw: bytes) -> str:
    """Codec name from the byte-order mark or NUL-byte pattern; UTF-8 otherwise."""
    if raw.startswith(b"\xff\xfe"):
        return "utf-16-le"
    if raw.startswith(b"\xfe\xff"):
        return "utf-16-be"
    if raw.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    # BOM-less UTF-16: ASCII markup leaves every other byte NUL
    head = raw[:64]
    if len(head) >= 4:
        if head[1::2].count(0) == len(head[1::2]) and 0 not in head[0::2]:
            return "utf-16-le"
        if head[0::2].count(0) == len(head[0::2]) and 0 not in head[1::2]:
            return "utf-16-be"
    return "utf-8"


def decode_ywriter_bytes(raw: bytes) -> str:
    """
    Decode file bytes, dropping any byte-order mark.

    Raises:
        EncodingError: If the bytes do not decode with the detected codec
    """
    encoding = detect_encoding(raw)
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise EncodingError(f"Failed to decode yWriter file as {encoding}: {e}") from e
    return text.lstrip("\ufeff")


# ----- Markup -----
def convert_ywriter_markup(text: Optional[str]) -> str:
    """
    Convert yWriter prose to HTML.

    `[i]`/`[b]` become `<em>`/`<strong>`, blank lines separate paragraphs
    and single newlines become `<br>`.

    Examples:
        >>> convert_ywriter_markup("[i]Hi[/i]\\n\\nBye")
        '<p><em>Hi</em></p>\\n<p>Bye</p>'
    """
    if not text or not text.strip():
        return ""
    escaped = html.escape(text.replace("\r\n", "\n"), quote=False)
    for tag, replacement in (
        ("[i]", "<em>"),
        ("[/i]", "</em>"),
        ("[b]", "<strong>"),
        ("[/b]", "</strong>"),
    ):
        escaped = escaped.replace(tag, replacement)

    paragraphs = [p.strip() for p in escaped.split("\n\n") if p.strip()]
    return "\n".join(f"<p>{p.replace(chr(10), '<br>')}</p>" for p in paragraphs)


def parse_id_list(text: Optional[str]) -> List[str]:
    """Split a `;` separated id list, keeping integer ids only."""
    ids = []
    for part in (text or "").split(";"):
        part = part.strip()
        if part.lstrip("-").isdigit():
            ids.append(str(int(part)))
    return ids


def scene_status_from_ywriter(value: Optional[str]) -> str:
    """yWriter Status 1-2 -> draft, 3-4 -> revised, 5 -> final."""
    try:
        status = int((value or "").strip())
    except ValueError:
        return SceneStatus.DRAFT.value
    if status >= 5:
        return SceneStatus.FINAL.value
    if status >= 3:
        return SceneStatus.REVISED.value
    return SceneStatus.DRAFT.value


# ----- Element helpers -----
def _text(element: Optional[ET.Element], tag: str) -> Optional[str]:
    if element is None:
        return None
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text


def _stripped(element: Optional[ET.Element], tag: str) -> Optional[str]:
    value = _text(element, tag)
    if value is None or not value.strip():
        return None
    return value.strip()


def _id_children(element: ET.Element, container: str, child_tag: str) -> List[str]:
    """Ids from `<container><child_tag>n</child_tag></container>` or `n;m` text."""
    block = element.find(container)
    if block is None:
        return []
    children = block.findall(child_tag)
    if children:
        ids = []
        for child in children:
            ids.extend(parse_id_list(child.text))
        return ids
    return parse_id_list(block.text)


def _flag(element: ET.Element, tag: str) -> bool:
    value = _text(element, tag)
    return value is not None and value.strip() not in ("", "0")


class YWriterImporter(BaseImporter):
    """Parse a yWriter 7 file into a bundle."""

    source_type = SourceType.YWRITER.value

    def parse(self, path: Path) -> ParsedBundle:
        path = self._require_file(path)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise SourceIOError(f"Cannot read {path}: {e}") from e

        text = _XML_DECLARATION.sub("", decode_ywriter_bytes(raw), count=1)
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise ParseError(f"Invalid yWriter XML in {path.name}: {e}") from e

        if root.find("PROJECT") is None and root.find("CHAPTERS") is None:
            raise InvalidStructureError(f"{path.name} has no PROJECT or CHAPTERS section")

        bundle = ParsedBundle(project=self._build_project(root, path))

        characters = self._build_characters(root, bundle)
        locations = self._build_locations(root, bundle)
        items = self._build_items(root, bundle)
        scenes: Dict[str, ET.Element] = {}
        for element in root.iter("SCENE"):
            scene_id = _stripped(element, "ID")
            if scene_id and scene_id not in scenes:
                scenes[scene_id] = element

        self._build_structure(root, scenes, characters, locations, items, bundle)

        self._log_summary(path, bundle)
        return bundle

    # ---- Project ----
    def _build_project(self, root: ET.Element, path: Path) -> ProjectData:
        element = root.find("PROJECT")
        project = ProjectData(
            name=_stripped(element, "Title") or path.stem,
            source_type=self.source_type,
            source_path=str(path),
        )
        project.author_pen_name = _stripped(element, "AuthorName") or _stripped(element, "Author")

        word_target = _stripped(element, "WordTarget")
        if word_target and word_target.isdigit():
            project.word_target = int(word_target)

        parts: List[str] = []
        description = _stripped(element, "Desc")
        if description:
            parts.append(description)

        notes = self._project_notes(root)
        if notes:
            parts.append("Project Notes:")
            parts.extend(notes)
        if parts:
            project.description = "\n\n".join(parts)
        return project

    @staticmethod
    def _project_notes(root: ET.Element) -> List[str]:
        notes: List[Tuple[int, int, str]] = []
        for index, note in enumerate(root.iter("PROJECTNOTE")):
            title = _stripped(note, "Title") or ""
            desc = _stripped(note, "Desc") or ""
            block = "\n".join(part for part in (title, desc) if part)
            if not block:
                continue
            sort_order = _stripped(note, "SortOrder") or "0"
            order = int(sort_order) if sort_order.lstrip("-").isdigit() else 0
            notes.append((order, index, block))
        return [block for _, _, block in sorted(notes)]

    # ---- References ----
    def _build_characters(
        self, root: ET.Element, bundle: ParsedBundle
    ) -> Dict[str, CharacterData]:
        characters: Dict[str, CharacterData] = {}
        for element in root.iter("CHARACTER"):
            source_id = _stripped(element, "ID")
            if not source_id or source_id in characters:
                continue

            parts: List[str] = []
            if _stripped(element, "Desc"):
                parts.append(convert_ywriter_markup(_text(element, "Desc")))
            bio = _stripped(element, "Bio")
            if bio:
                parts.append(f"<p><strong>Bio:</strong> {self._inline(bio)}</p>")
            goals = _stripped(element, "Goals")
            if goals:
                parts.append(f"<p><strong>Goals:</strong> {self._inline(goals)}</p>")
            if _stripped(element, "Notes"):
                parts.append(convert_ywriter_markup(_text(element, "Notes")))

            attributes = {}
            if _flag(element, "Major"):
                attributes["role"] = "Major"

            character = CharacterData(
                project_id=bundle.project.id,
                name=_stripped(element, "FullName") or _stripped(element, "Title") or "Unnamed",
                description="\n".join(parts) or None,
                attributes=attributes,
                source_id=source_id,
            )
            characters[source_id] = character
            bundle.characters.append(character)
        return characters

    def _build_locations(self, root: ET.Element, bundle: ParsedBundle) -> Dict[str, LocationData]:
        locations: Dict[str, LocationData] = {}
        for element in root.iter("LOCATION"):
            source_id = _stripped(element, "ID")
            if not source_id or source_id in locations:
                continue

            parts: List[str] = []
            if _stripped(element, "Desc"):
                parts.append(convert_ywriter_markup(_text(element, "Desc")))
            aka = _stripped(element, "Aka")
            if aka:
                parts.append(f"<p><em>Also known as:</em> {self._inline(aka)}</p>")

            location = LocationData(
                project_id=bundle.project.id,
                name=_stripped(element, "Title") or "Unnamed",
                description="\n".join(parts) or None,
                source_id=source_id,
            )
            locations[source_id] = location
            bundle.locations.append(location)
        return locations

    def _build_items(self, root: ET.Element, bundle: ParsedBundle) -> Dict[str, ReferenceItemData]:
        items: Dict[str, ReferenceItemData] = {}
        for element in root.iter("ITEM"):
            source_id = _stripped(element, "ID")
            if not source_id or source_id in items:
                continue

            parts: List[str] = []
            if _stripped(element, "Desc"):
                parts.append(convert_ywriter_markup(_text(element, "Desc")))
            aka = _stripped(element, "Aka")
            if aka:
                parts.append(f"<p><em>Also known as:</em> {self._inline(aka)}</p>")

            item = ReferenceItemData(
                project_id=bundle.project.id,
                reference_type=ITEM_REFERENCE_TYPE,
                name=_stripped(element, "Title") or "Unnamed",
                description="\n".join(parts) or None,
                source_id=source_id,
            )
            items[source_id] = item
            bundle.reference_items.append(item)

        if items and ITEM_REFERENCE_TYPE not in bundle.project.reference_types:
            bundle.project.reference_types.append(ITEM_REFERENCE_TYPE)
        return items

    @staticmethod
    def _inline(text: str) -> str:
        return html.escape(text, quote=False).replace("\n", "<br>")

    # ---- Chapters, scenes, beats ----
    def _build_structure(
        self,
        root: ET.Element,
        scenes: Dict[str, ET.Element],
        characters: Dict[str, CharacterData],
        locations: Dict[str, LocationData],
        items: Dict[str, ReferenceItemData],
        bundle: ParsedBundle,
    ) -> None:
        used_scene_ids = set()

        for element in root.iter("CHAPTER"):
            chapter_type = _stripped(element, "Type") or "0"
            if chapter_type != "0" or _flag(element, "Unused"):
                continue

            chapter = ChapterData(
                project_id=bundle.project.id,
                title=_stripped(element, "Title") or f"Chapter {len(bundle.chapters) + 1}",
                position=len(bundle.chapters),
                source_id=_stripped(element, "ID"),
                is_part=element.find("SectionStart") is not None,
            )
            bundle.chapters.append(chapter)

            position = 0
            for scene_id in _id_children(element, "Scenes", "ScID"):
                scene_element = scenes.get(scene_id)
                if scene_element is None or scene_id in used_scene_ids:
                    continue
                if _flag(scene_element, "Unused"):
                    continue
                used_scene_ids.add(scene_id)
                self._build_scene(
                    scene_element,
                    scene_id,
                    chapter,
                    position,
                    characters,
                    locations,
                    items,
                    bundle,
                )
                position += 1

    def _build_scene(
        self,
        element: ET.Element,
        scene_id: str,
        chapter: ChapterData,
        position: int,
        characters: Dict[str, CharacterData],
        locations: Dict[str, LocationData],
        items: Dict[str, ReferenceItemData],
        bundle: ParsedBundle,
    ) -> None:
        scene = SceneData(
            chapter_id=chapter.id,
            title=_stripped(element, "Title") or f"Scene {position + 1}",
            position=position,
            synopsis=_stripped(element, "Desc"),
            source_id=scene_id,
            scene_status=scene_status_from_ywriter(_text(element, "Status")),
        )
        bundle.scenes.append(scene)

        labels = REACTION_LABELS if _flag(element, "ReactionScene") else ACTION_LABELS
        beat_position = 0
        for label, key in zip(labels, BEAT_KEYS):
            value = _stripped(element, key.capitalize())
            if not value:
                continue
            bundle.beats.append(
                BeatData(
                    scene_id=scene.id,
                    content=f"{label}: {value}",
                    position=beat_position,
                    source_id=f"{scene_id}-{key}",
                )
            )
            beat_position += 1

        prose = convert_ywriter_markup(_text(element, "SceneContent"))
        if prose:
            bundle.beats.append(
                BeatData(
                    scene_id=scene.id,
                    content="Scene Content",
                    position=beat_position,
                    prose=prose,
                    source_id=f"{scene_id}-content",
                )
            )

        for char_id in dict.fromkeys(_id_children(element, "Characters", "CharID")):
            if char_id in characters:
                bundle.scene_character_refs.append(
                    SceneCharacterRef(scene_id=scene.id, character_id=characters[char_id].id)
                )
        for loc_id in dict.fromkeys(_id_children(element, "Locations", "LocID")):
            if loc_id in locations:
                bundle.scene_location_refs.append(
                    SceneLocationRef(scene_id=scene.id, location_id=locations[loc_id].id)
                )
        for item_id in dict.fromkeys(_id_children(element, "Items", "ItemID")):
            if item_id in items:
                bundle.scene_reference_item_refs.append(
                    SceneReferenceItemRef(scene_id=scene.id, reference_item_id=items[item_id].id)
                )
