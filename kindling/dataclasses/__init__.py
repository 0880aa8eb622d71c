"""
Canonical project records shared by importers, the store, snapshots and exporters.
"""
from .records import (
    DEFAULT_REFERENCE_TYPES,
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
    new_id,
    utc_now,
)
from .bundle import ParsedBundle, ReimportSummary, SnapshotData, SNAPSHOT_VERSION

__all__ = [
    "DEFAULT_REFERENCE_TYPES",
    "BeatData",
    "ChapterData",
    "CharacterData",
    "LocationData",
    "ProjectData",
    "ReferenceItemData",
    "SceneCharacterRef",
    "SceneData",
    "SceneLocationRef",
    "SceneReferenceItemRef",
    "SceneReferenceStateData",
    "ParsedBundle",
    "ReimportSummary",
    "SnapshotData",
    "SNAPSHOT_VERSION",
    "new_id",
    "utc_now",
]
