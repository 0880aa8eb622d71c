#!/usr/bin/env python3
"""
bundle.py
-------------------
Whole-project containers.

- ParsedBundle: what an importer emits, inserted under one transaction.
- SnapshotData: what a snapshot archive holds (version 1).
- ReimportSummary: what merging a re-parsed source changed.

SnapshotData serializes to a single JSON object whose top-level keys are
exactly:

    version, created_at, project, chapters, scenes, beats, characters,
    locations, reference_items, scene_character_refs, scene_location_refs,
    scene_reference_item_refs, scene_reference_states

Decoding ignores unknown keys and treats missing lists as empty.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Type

from .records import (
    BeatData,
    ChapterData,
    CharacterData,
    LocationData,
    ProjectData,
    ReferenceItemData,
    SceneCharacterRef,
    SceneData,
    SceneLocationRef,
    SceneReferenceItemRef,
    SceneReferenceStateData,
    utc_now,
)

SNAPSHOT_VERSION = 1

# List key -> record class, in insertion order
LIST_FIELDS: Dict[str, Type[Any]] = {
    "chapters": ChapterData,
    "scenes": SceneData,
    "beats": BeatData,
    "characters": CharacterData,
    "locations": LocationData,
    "reference_items": ReferenceItemData,
    "scene_character_refs": SceneCharacterRef,
    "scene_location_refs": SceneLocationRef,
    "scene_reference_item_refs": SceneReferenceItemRef,
    "scene_reference_states": SceneReferenceStateData,
}


@dataclass
class ParsedBundle:
    """
    Canonical output of every importer.

    Lists are in insertion order: parents precede children so the bundle
    can be written front to back under foreign-key enforcement.
    """

    project: ProjectData
    chapters: List[ChapterData] = field(default_factory=list)
    scenes: List[SceneData] = field(default_factory=list)
    beats: List[BeatData] = field(default_factory=list)
    characters: List[CharacterData] = field(default_factory=list)
    locations: List[LocationData] = field(default_factory=list)
    reference_items: List[ReferenceItemData] = field(default_factory=list)
    scene_character_refs: List[SceneCharacterRef] = field(default_factory=list)
    scene_location_refs: List[SceneLocationRef] = field(default_factory=list)
    scene_reference_item_refs: List[SceneReferenceItemRef] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "chapters": len(self.chapters),
            "scenes": len(self.scenes),
            "beats": len(self.beats),
            "characters": len(self.characters),
            "locations": len(self.locations),
            "reference_items": len(self.reference_items),
        }


@dataclass
class SnapshotData:
    """Full captured state of one project."""

    project: ProjectData
    version: int = SNAPSHOT_VERSION
    created_at: str = field(default_factory=utc_now)
    chapters: List[ChapterData] = field(default_factory=list)
    scenes: List[SceneData] = field(default_factory=list)
    beats: List[BeatData] = field(default_factory=list)
    characters: List[CharacterData] = field(default_factory=list)
    locations: List[LocationData] = field(default_factory=list)
    reference_items: List[ReferenceItemData] = field(default_factory=list)
    scene_character_refs: List[SceneCharacterRef] = field(default_factory=list)
    scene_location_refs: List[SceneLocationRef] = field(default_factory=list)
    scene_reference_item_refs: List[SceneReferenceItemRef] = field(default_factory=list)
    scene_reference_states: List[SceneReferenceStateData] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "version": self.version,
            "created_at": self.created_at,
            "project": self.project.to_dict(),
        }
        for key in LIST_FIELDS:
            data[key] = [item.to_dict() for item in getattr(self, key)]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotData":
        """
        Rebuild snapshot data from a decoded JSON object.

        Raises:
            KeyError: If the project record is missing
            TypeError: If a record lacks a required field
        """
        lists = {
            key: [record_cls.from_dict(item) for item in data.get(key) or []]
            for key, record_cls in LIST_FIELDS.items()
        }
        return cls(
            project=ProjectData.from_dict(data["project"]),
            version=int(data.get("version", SNAPSHOT_VERSION)),
            created_at=data.get("created_at") or utc_now(),
            **lists,
        )

    def word_count(self) -> int:
        """Whitespace-split token count over raw scene and beat prose."""
        total = 0
        for item in [*self.scenes, *self.beats]:
            if item.prose:
                total += len(item.prose.split())
        return total


@dataclass
class ReimportSummary:
    """Counts of what a reimport changed in the store."""

    chapters_added: int = 0
    chapters_updated: int = 0
    scenes_added: int = 0
    scenes_updated: int = 0
    beats_added: int = 0
    beats_updated: int = 0
    prose_preserved: int = 0
    locked_skipped: int = 0

    @property
    def changed(self) -> bool:
        return any(
            (
                self.chapters_added,
                self.chapters_updated,
                self.scenes_added,
                self.scenes_updated,
                self.beats_added,
                self.beats_updated,
            )
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
