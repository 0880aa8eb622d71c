#!/usr/bin/env python3
"""
snapshot_manager.py
--------------------
Project snapshots: gzip JSON archives plus an indexed metadata row.

Archive layout:
    {snapshot_dir}/{project_id}/{YYYY-MM-DD_HHMMSS}_{trigger}.json.gz

Each archive holds one `SnapshotData` document (version 1). The
`snapshots` table caches counts and sizes for listings.

Restore modes:
    - replace_current: wipe the project's contents and reinsert the
      archived rows with their original identifiers
    - create_new: clone the archive into a new project, every identifier
      remapped through one old -> new table built before any insert

Both restores run in a single transaction.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import gzip
import json
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# --- Third party imports ---
from sqlalchemy import select
from sqlalchemy.orm import Session

# --- Local imports ---
from kindling.core.exceptions import (
    CorruptSnapshotError,
    DatabaseError,
    NotFoundError,
    SnapshotError,
    ValidationError,
)
from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.core.paths import SNAPSHOT_DIR
from kindling.dataclasses import ProjectData, SnapshotData, new_id, utc_now
from kindling.utils.fs import atomic_write_bytes, unique_path
from .decorators import DatabaseOperation
from .manager import KindlingDB
from .managers.base_manager import insertion_order
from .managers.bundle_manager import project_record
from .models import Project, RestoreMode, SnapshotMetadata, SnapshotTrigger

ENTITY_LISTS = ("chapters", "scenes", "beats", "characters", "locations", "reference_items")
FILENAME_FORMAT = "%Y-%m-%d_%H%M%S"


# ----- Archive codec -----
def encode_snapshot(data: SnapshotData) -> Tuple[bytes, int]:
    """
    Serialize and gzip a snapshot.

    Returns:
        (compressed bytes, length of the uncompressed JSON in bytes)
    """
    payload = json.dumps(data.to_dict(), ensure_ascii=False).encode("utf-8")
    return gzip.compress(payload), len(payload)


def decode_document(raw: bytes) -> Dict[str, Any]:
    """
    Gunzip and JSON-decode an archive without building records.

    Raises:
        CorruptSnapshotError: If the bytes are not a gzip JSON object
    """
    try:
        document = json.loads(gzip.decompress(raw).decode("utf-8"))
    except (OSError, EOFError, UnicodeDecodeError, ValueError) as e:
        raise CorruptSnapshotError(f"Snapshot archive is unreadable: {e}") from e
    if not isinstance(document, dict):
        raise CorruptSnapshotError("Snapshot archive does not hold a JSON object")
    return document


def decode_snapshot(raw: bytes) -> SnapshotData:
    """
    Decode archive bytes into snapshot data.

    Raises:
        CorruptSnapshotError: If decoding fails or required fields are missing
    """
    document = decode_document(raw)
    try:
        return SnapshotData.from_dict(document)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CorruptSnapshotError(f"Snapshot archive is incomplete: {e}") from e


def read_archive(path: Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot file {path}: {e}") from e


# ----- Identity remapping -----
def remap_identifiers(data: SnapshotData, name: Optional[str] = None) -> SnapshotData:
    """
    Copy snapshot data under fresh identifiers.

    The old -> new table is filled for every entity first; foreign keys,
    join pairs and reference-state targets are then translated through
    it. Reference states pointing outside the archive are dropped.

    Args:
        data: Decoded snapshot
        name: New project name; defaults to "{original} (Copy)"

    Raises:
        KeyError: If a foreign key points at an id missing from the archive
    """
    id_map: Dict[str, str] = {data.project.id: new_id()}
    for key in ENTITY_LISTS:
        for record in getattr(data, key):
            id_map[record.id] = new_id()

    now = utc_now()
    project = replace(
        data.project,
        id=id_map[data.project.id],
        name=name or f"{data.project.name} (Copy)",
        created_at=now,
        modified_at=now,
        reference_types=list(data.project.reference_types or []),
    )
    project_id = project.id

    states = []
    for state in data.scene_reference_states:
        if state.scene_id in id_map and state.reference_id in id_map:
            states.append(
                replace(
                    state,
                    scene_id=id_map[state.scene_id],
                    reference_id=id_map[state.reference_id],
                )
            )

    return SnapshotData(
        project=project,
        version=data.version,
        created_at=data.created_at,
        chapters=[
            replace(c, id=id_map[c.id], project_id=project_id) for c in data.chapters
        ],
        scenes=[
            replace(s, id=id_map[s.id], chapter_id=id_map[s.chapter_id]) for s in data.scenes
        ],
        beats=[replace(b, id=id_map[b.id], scene_id=id_map[b.scene_id]) for b in data.beats],
        characters=[
            replace(c, id=id_map[c.id], project_id=project_id, attributes=dict(c.attributes))
            for c in data.characters
        ],
        locations=[
            replace(loc, id=id_map[loc.id], project_id=project_id, attributes=dict(loc.attributes))
            for loc in data.locations
        ],
        reference_items=[
            replace(r, id=id_map[r.id], project_id=project_id, attributes=dict(r.attributes))
            for r in data.reference_items
        ],
        scene_character_refs=[
            replace(
                ref,
                scene_id=id_map[ref.scene_id],
                character_id=id_map[ref.character_id],
            )
            for ref in data.scene_character_refs
        ],
        scene_location_refs=[
            replace(
                ref,
                scene_id=id_map[ref.scene_id],
                location_id=id_map[ref.location_id],
            )
            for ref in data.scene_location_refs
        ],
        scene_reference_item_refs=[
            replace(
                ref,
                scene_id=id_map[ref.scene_id],
                reference_item_id=id_map[ref.reference_item_id],
            )
            for ref in data.scene_reference_item_refs
        ],
        scene_reference_states=states,
    )


# ----- Manager -----
class SnapshotManager:
    """
    Creates, lists, previews, restores and deletes project snapshots.

    Every operation opens its own session scope on the database, so the
    store mutex is held for the whole operation (archive I/O included).
    """

    def __init__(
        self,
        db: KindlingDB,
        snapshot_dir: Union[str, Path] = SNAPSHOT_DIR,
        logger: Optional[KindlingLogger] = None,
    ) -> None:
        """
        Initialize snapshot manager.

        Args:
            db: Database manager
            snapshot_dir: Root folder for archives (created on demand)
            logger: Optional logger; defaults to the database's logger
        """
        self.db = db
        self.snapshot_dir = Path(snapshot_dir).expanduser()
        self.logger = safe_logger(logger or db.logger)

    # ---- Helpers ----
    def _archive_path(self, project_id: str, trigger: str) -> Path:
        stamp = datetime.now(timezone.utc).strftime(FILENAME_FORMAT)
        return unique_path(self.snapshot_dir / project_id / f"{stamp}_{trigger}.json.gz")

    @staticmethod
    def _get_metadata(session: Session, snapshot_id: str) -> SnapshotMetadata:
        metadata = session.get(SnapshotMetadata, snapshot_id)
        if metadata is None:
            raise NotFoundError(f"Snapshot not found: {snapshot_id}")
        return metadata

    # ---- Create ----
    def create_snapshot(
        self,
        project_id: str,
        name: str,
        description: Optional[str] = None,
        trigger: Union[str, SnapshotTrigger] = SnapshotTrigger.MANUAL,
    ) -> Dict[str, Any]:
        """
        Capture a project into a new archive.

        Args:
            project_id: Project to capture
            name: Label shown in listings
            description: Optional longer note
            trigger: manual, export or auto

        Returns:
            The new snapshot's metadata as a dict

        Raises:
            ValidationError: If the trigger is unknown
            NotFoundError: If the project does not exist
            SnapshotError: If the archive cannot be written
        """
        try:
            trigger_value = SnapshotTrigger(trigger).value
        except ValueError:
            raise ValidationError(
                f"Unknown snapshot trigger '{trigger}'. Use one of: "
                f"{', '.join(SnapshotTrigger.choices())}"
            ) from None

        archive: Optional[Path] = None
        try:
            with self.db.session_scope() as session:
                data = self.db.bundles.load_snapshot_data(project_id)
                payload, uncompressed_size = encode_snapshot(data)

                archive = self._archive_path(project_id, trigger_value)
                atomic_write_bytes(archive, payload)

                metadata = SnapshotMetadata(
                    id=new_id(),
                    project_id=project_id,
                    name=name,
                    description=description,
                    trigger_type=trigger_value,
                    created_at=data.created_at,
                    file_path=str(archive),
                    file_size=archive.stat().st_size,
                    uncompressed_size=uncompressed_size,
                    chapter_count=len(data.chapters),
                    scene_count=len(data.scenes),
                    beat_count=len(data.beats),
                    word_count=data.word_count(),
                    schema_version=data.version,
                )
                session.add(metadata)
                session.flush()
                result = metadata.to_dict()
        except DatabaseError:
            if archive is not None:
                archive.unlink(missing_ok=True)
            raise
        except OSError as e:
            if archive is not None:
                archive.unlink(missing_ok=True)
            self.logger.log_error(e, {"operation": "create_snapshot", "project_id": project_id})
            raise SnapshotError(f"Failed to write snapshot: {e}") from e

        self.logger.log_operation(
            "snapshot_created",
            {
                "snapshot_id": result["id"],
                "project_id": project_id,
                "trigger": trigger_value,
                "file_path": result["file_path"],
                "file_size": result["file_size"],
            },
        )
        return result

    # ---- Read ----
    def list_snapshots(self, project_id: str) -> List[Dict[str, Any]]:
        """Snapshots of a project, newest first."""
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(SnapshotMetadata)
                .where(SnapshotMetadata.project_id == project_id)
                .order_by(
                    SnapshotMetadata.created_at.desc(),
                    insertion_order(SnapshotMetadata).desc(),
                )
            ).all()
            return [row.to_dict() for row in rows]

    def get_snapshot(self, snapshot_id: str) -> Dict[str, Any]:
        """
        Metadata of one snapshot.

        Raises:
            NotFoundError: If no such snapshot exists
        """
        with self.db.session_scope() as session:
            return self._get_metadata(session, snapshot_id).to_dict()

    def preview_snapshot(self, snapshot_id: str) -> Dict[str, Any]:
        """
        Metadata plus the archived project's name.

        Raises:
            NotFoundError: If no such snapshot exists
            SnapshotError: If the archive file is missing
            CorruptSnapshotError: If the archive cannot be decoded
        """
        with self.db.session_scope() as session:
            preview = self._get_metadata(session, snapshot_id).to_dict()
            document = decode_document(read_archive(Path(preview["file_path"])))

        project = document.get("project")
        if not isinstance(project, dict) or "name" not in project:
            raise CorruptSnapshotError("Snapshot archive has no project record")
        preview["project_name"] = project["name"]
        return preview

    # ---- Restore ----
    def restore_snapshot(
        self,
        snapshot_id: str,
        mode: Union[str, RestoreMode] = RestoreMode.REPLACE_CURRENT,
        new_project_name: Optional[str] = None,
    ) -> ProjectData:
        """
        Restore a snapshot in one transaction.

        Args:
            snapshot_id: Snapshot to restore
            mode: replace_current or create_new
            new_project_name: Name for create_new (default "{original} (Copy)")

        Returns:
            The restored (or newly created) project

        Raises:
            ValidationError: If the mode is unknown
            NotFoundError: If the snapshot or its project does not exist
            CorruptSnapshotError: If the archive cannot be decoded
            DatabaseError: If any statement fails (nothing is committed)
        """
        try:
            mode = RestoreMode(mode)
        except ValueError:
            raise ValidationError(
                f"Unknown restore mode '{mode}'. Use one of: {', '.join(RestoreMode.choices())}"
            ) from None

        with self.db.session_scope() as session:
            metadata = self._get_metadata(session, snapshot_id)
            data = decode_snapshot(read_archive(Path(metadata.file_path)))

            with DatabaseOperation(self.logger, f"restore_snapshot_{mode.value}"):
                if mode is RestoreMode.REPLACE_CURRENT:
                    project = self._replace_current(session, metadata.project_id, data)
                else:
                    project = self._create_new(data, new_project_name)
                session.flush()
            record = project_record(project)

        self.logger.log_operation(
            "snapshot_restored",
            {"snapshot_id": snapshot_id, "mode": mode.value, "project_id": record.id},
        )
        return record

    def _replace_current(self, session: Session, project_id: str, data: SnapshotData) -> Project:
        project = session.get(Project, project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        if data.project.id != project_id:
            raise CorruptSnapshotError(
                f"Snapshot archive belongs to project {data.project.id}, not {project_id}"
            )

        self.db.bundles.delete_project_contents(project_id)

        for key, value in data.project.to_dict().items():
            if key != "id":
                setattr(project, key, value)
        project.modified_at = utc_now()

        self.db.bundles.insert_contents(data)
        return project

    def _create_new(self, data: SnapshotData, name: Optional[str]) -> Project:
        try:
            clone = remap_identifiers(data, name)
        except KeyError as e:
            raise CorruptSnapshotError(f"Snapshot archive references unknown id {e}") from e
        return self.db.bundles.insert_bundle(clone)

    # ---- Delete ----
    def delete_snapshot(self, snapshot_id: str) -> None:
        """
        Remove a snapshot's archive (if present) and its metadata row.

        Raises:
            NotFoundError: If no such snapshot exists
        """
        with self.db.session_scope() as session:
            metadata = self._get_metadata(session, snapshot_id)
            Path(metadata.file_path).unlink(missing_ok=True)
            session.delete(metadata)

        self.logger.log_operation("snapshot_deleted", {"snapshot_id": snapshot_id})
