"""
Kindling Database Models
--------------------------

SQLAlchemy ORM models for the manuscript store.

Modules:
    - base: Declarative base, id type and the attribute-map mixin
    - enums: SourceType, SceneType, SceneStatus, SnapshotTrigger, RestoreMode
    - project: Project, Chapter, Scene, Beat
    - references: Character, Location, ReferenceItem and their attribute rows
    - associations: Scene join tables and SceneReferenceState
    - snapshot: SnapshotMetadata
"""
from .base import AttributeMapMixin, Base, IdType
from .enums import RestoreMode, SceneStatus, SceneType, SnapshotTrigger, SourceType
from .project import Beat, Chapter, Project, Scene
from .references import (
    Character,
    CharacterAttribute,
    Location,
    LocationAttribute,
    ReferenceItem,
    ReferenceItemAttribute,
)
from .associations import (
    SceneReferenceState,
    scene_character_refs,
    scene_location_refs,
    scene_reference_item_refs,
)
from .snapshot import SnapshotMetadata

__all__ = [
    "AttributeMapMixin",
    "Base",
    "IdType",
    "RestoreMode",
    "SceneStatus",
    "SceneType",
    "SnapshotTrigger",
    "SourceType",
    "Project",
    "Chapter",
    "Scene",
    "Beat",
    "Character",
    "CharacterAttribute",
    "Location",
    "LocationAttribute",
    "ReferenceItem",
    "ReferenceItemAttribute",
    "SceneReferenceState",
    "scene_character_refs",
    "scene_location_refs",
    "scene_reference_item_refs",
    "SnapshotMetadata",
]
