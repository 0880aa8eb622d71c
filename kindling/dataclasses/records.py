#!/usr/bin/env python3
"""
records.py
-------------------
Canonical in-memory records for a Kindling project.

These dataclasses are the lingua franca between the layers: importers
emit them, the store converts them to and from ORM rows, snapshots
serialize them to JSON and the exporters read them.

Identifiers are UUID4 strings; timestamps are RFC 3339 strings in UTC.
Every record round-trips through `to_dict()` / `from_dict()`, where
`from_dict()` ignores unknown keys and falls back to field defaults for
missing optional keys.
"""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

T = TypeVar("T")

DEFAULT_REFERENCE_TYPES = ["characters", "locations"]


def new_id() -> str:
    """Generate a new opaque identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC time as an RFC 3339 string."""
    return datetime.now(timezone.utc).isoformat()


class RecordMixin:
    """Dict conversion shared by every record."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ProjectData(RecordMixin):
    """Root of a manuscript."""

    name: str
    source_type: str
    source_path: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now)
    modified_at: str = field(default_factory=utc_now)
    author_pen_name: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    word_target: Optional[int] = None
    reference_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_REFERENCE_TYPES)
    )


@dataclass
class ChapterData(RecordMixin):
    """Chapter (or part separator when `is_part`) ordered within a project."""

    project_id: str
    title: str
    position: int
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None
    archived: bool = False
    locked: bool = False
    is_part: bool = False


@dataclass
class SceneData(RecordMixin):
    """Scene ordered within a chapter."""

    chapter_id: str
    title: str
    position: int
    synopsis: Optional[str] = None
    prose: Optional[str] = None
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None
    archived: bool = False
    locked: bool = False
    scene_type: str = "normal"
    scene_status: str = "draft"


@dataclass
class BeatData(RecordMixin):
    """Structural note plus optional HTML prose, ordered within a scene."""

    scene_id: str
    content: str
    position: int
    prose: Optional[str] = None
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None


@dataclass
class CharacterData(RecordMixin):
    project_id: str
    name: str
    description: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None


@dataclass
class LocationData(RecordMixin):
    project_id: str
    name: str
    description: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None


@dataclass
class ReferenceItemData(RecordMixin):
    """Reference entry of a user-defined type (items, factions, lore...)."""

    project_id: str
    reference_type: str
    name: str
    description: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    source_id: Optional[str] = None


@dataclass
class SceneCharacterRef(RecordMixin):
    scene_id: str
    character_id: str


@dataclass
class SceneLocationRef(RecordMixin):
    scene_id: str
    location_id: str


@dataclass
class SceneReferenceItemRef(RecordMixin):
    scene_id: str
    reference_item_id: str


@dataclass
class SceneReferenceStateData(RecordMixin):
    """Per-scene ordering and expand/collapse state of one reference."""

    scene_id: str
    reference_type: str
    reference_id: str
    position: int = 0
    expanded: bool = False
