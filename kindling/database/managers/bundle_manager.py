#!/usr/bin/env python3
"""
bundle_manager.py
--------------------
Whole-project reads and writes.

BundleManager moves complete projects between the canonical records
(`ParsedBundle`, `SnapshotData`) and the relational store:

    - insert_bundle: write a project and everything under it
    - load_snapshot_data: read a project back, archived rows included
    - delete_project_contents: clear a project but keep its row
    - merge_bundle: fold a re-parsed source into an existing project

Writes happen group by group in bundle order (project, chapters, scenes,
beats, references, joins, reference states), so each group's parents
already exist when foreign keys are checked. Rows of a group are added in
list order, which fixes their insertion order and therefore the order of
siblings sharing a `position`.

None of these methods commit: the caller's `session_scope()` owns the
transaction, so an import or restore either lands whole or not at all.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import fields, replace
from typing import Any, Dict, Iterable, List, Type, Union

# --- Third party imports ---
from sqlalchemy import delete, insert, select

# --- Local imports ---
from kindling.dataclasses import (
    BeatData,
    ChapterData,
    CharacterData,
    LocationData,
    ParsedBundle,
    ProjectData,
    ReimportSummary,
    ReferenceItemData,
    SceneCharacterRef,
    SceneData,
    SceneLocationRef,
    SceneReferenceItemRef,
    SceneReferenceStateData,
    SnapshotData,
)
from kindling.dataclasses.records import DEFAULT_REFERENCE_TYPES
from ..decorators import handle_db_errors, log_database_operation
from ..models import (
    Beat,
    Chapter,
    Character,
    Location,
    Project,
    ReferenceItem,
    Scene,
    SceneReferenceState,
    SnapshotMetadata,
    scene_character_refs,
    scene_location_refs,
    scene_reference_item_refs,
)
from .base_manager import BaseManager, insertion_order

Bundle = Union[ParsedBundle, SnapshotData]

_JOIN_TABLES = (
    ("scene_character_refs", scene_character_refs),
    ("scene_location_refs", scene_location_refs),
    ("scene_reference_item_refs", scene_reference_item_refs),
)


def record_from_row(record_cls: Type[Any], row: Any) -> Any:
    """Build a canonical record from an ORM row with matching attribute names."""
    return record_cls(**{f.name: getattr(row, f.name) for f in fields(record_cls)})


def project_record(project: Project) -> ProjectData:
    record = record_from_row(ProjectData, project)
    if record.reference_types is None:
        record.reference_types = list(DEFAULT_REFERENCE_TYPES)
    return record


class BundleManager(BaseManager):
    """Reads and writes complete projects."""

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("insert_bundle")
    def insert_bundle(self, bundle: Bundle) -> Project:
        """
        Insert a project and all of its contents.

        Args:
            bundle: Importer output or decoded snapshot

        Returns:
            The new Project row (flushed, not committed)
        """
        project = Project(**bundle.project.to_dict())
        self.session.add(project)
        self.session.flush()

        self.insert_contents(bundle)
        return project

    def insert_contents(self, bundle: Bundle) -> None:
        """Insert everything below the project row, which must already exist."""
        self._add_all(Chapter, bundle.chapters)
        self._add_all(Scene, bundle.scenes)
        self._add_all(Beat, bundle.beats)
        self._add_references(Character, bundle.characters)
        self._add_references(Location, bundle.locations)
        self._add_references(ReferenceItem, bundle.reference_items)

        for key, table in _JOIN_TABLES:
            rows = [ref.to_dict() for ref in getattr(bundle, key)]
            if rows:
                self.session.execute(insert(table), rows)

        states = getattr(bundle, "scene_reference_states", [])
        self._add_all(SceneReferenceState, states)

        self.logger.log_debug(
            "bundle_contents_inserted",
            {
                "project_id": bundle.project.id,
                "chapters": len(bundle.chapters),
                "scenes": len(bundle.scenes),
                "beats": len(bundle.beats),
            },
        )

    def _add_all(self, model: Type[Any], records: Iterable[Any]) -> None:
        rows = [model(**record.to_dict()) for record in records]
        if rows:
            self.session.add_all(rows)
            self.session.flush()

    def _add_references(self, model: Type[Any], records: Iterable[Any]) -> None:
        rows = []
        for record in records:
            data = record.to_dict()
            attributes = data.pop("attributes", None) or {}
            row = model(**data)
            row.set_attributes({str(k): str(v) for k, v in attributes.items()})
            rows.append(row)
        if rows:
            self.session.add_all(rows)
            self.session.flush()

    @handle_db_errors
    @log_database_operation("delete_project_contents")
    def delete_project_contents(self, project_id: str) -> None:
        """
        Delete every chapter and reference of a project, keeping the project row.

        Scenes, beats, attribute rows, joins and reference states go with
        them through ON DELETE CASCADE. Rows of the deleted kinds are evicted
        from the session so the same identifiers can be inserted again.
        """
        for model in (Chapter, Character, Location, ReferenceItem):
            self.session.execute(
                delete(model)
                .where(model.project_id == project_id)
                .execution_options(synchronize_session=False)
            )

        for obj in list(self.session.identity_map.values()):
            if not isinstance(obj, (Project, SnapshotMetadata)):
                self.session.expunge(obj)

    @handle_db_errors
    @log_database_operation("merge_bundle")
    def merge_bundle(self, project_id: str, bundle: ParsedBundle) -> ReimportSummary:
        """
        Merge a re-parsed source into an existing project by `source_id`.

        Matched chapters take the new title and position; matched scenes the
        new title, synopsis and position; matched beats the new content and
        position. Prose is never written on a matched row. Unmatched records
        are inserted under their matched (or newly inserted) parent. Rows
        missing from the source, references and joins are left alone. Locked
        chapters and scenes, and everything below them, keep their text.

        Args:
            project_id: Project to merge into
            bundle: Importer output for the project's source

        Returns:
            Counts of added, updated and preserved rows

        Raises:
            NotFoundError: If the project does not exist
        """
        self._get_or_raise(Project, project_id)
        summary = ReimportSummary()

        chapters = self._rows_by_source_id(
            select(Chapter).where(Chapter.project_id == project_id)
        )
        chapter_for: Dict[str, Chapter] = {}
        for record in bundle.chapters:
            if not record.source_id:
                continue
            existing = chapters.get(record.source_id)
            if existing is None:
                existing = Chapter(
                    **replace(
                        record, project_id=project_id, archived=False, locked=False
                    ).to_dict()
                )
                self.session.add(existing)
                chapters[record.source_id] = existing
                summary.chapters_added += 1
            elif existing.locked:
                summary.locked_skipped += 1
            elif self._assign(existing, title=record.title, position=record.position):
                summary.chapters_updated += 1
            chapter_for[record.id] = existing
        self.session.flush()

        scenes = self._rows_by_source_id(
            select(Scene)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
        )
        scene_for: Dict[str, Scene] = {}
        frozen_scenes = set()
        for record in bundle.scenes:
            parent = chapter_for.get(record.chapter_id)
            if not record.source_id or parent is None:
                continue
            existing = scenes.get(record.source_id)
            if existing is None:
                existing = Scene(
                    **replace(
                        record, chapter_id=parent.id, archived=False, locked=False
                    ).to_dict()
                )
                self.session.add(existing)
                scenes[record.source_id] = existing
                summary.scenes_added += 1
            else:
                if existing.prose:
                    summary.prose_preserved += 1
                home = self.session.get(Chapter, existing.chapter_id)
                if existing.locked or home.locked:
                    frozen_scenes.add(existing.id)
                    summary.locked_skipped += 1
                else:
                    changes = {"title": record.title, "synopsis": record.synopsis}
                    # Rows are never moved between chapters
                    if existing.chapter_id == parent.id:
                        changes["position"] = record.position
                    if self._assign(existing, **changes):
                        summary.scenes_updated += 1
            scene_for[record.id] = existing
        self.session.flush()

        beats = self._rows_by_source_id(
            select(Beat)
            .join(Scene, Beat.scene_id == Scene.id)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
        )
        for record in bundle.beats:
            parent = scene_for.get(record.scene_id)
            if not record.source_id or parent is None:
                continue
            existing = beats.get(record.source_id)
            if existing is None:
                self.session.add(Beat(**replace(record, scene_id=parent.id).to_dict()))
                summary.beats_added += 1
                continue
            if existing.prose:
                summary.prose_preserved += 1
            if existing.scene_id in frozen_scenes:
                continue
            changes = {"content": record.content}
            if existing.scene_id == parent.id:
                changes["position"] = record.position
            if self._assign(existing, **changes):
                summary.beats_updated += 1
        self.session.flush()

        if summary.changed:
            self._touch_project(project_id)
            self.session.flush()

        self.logger.log_debug(
            "bundle_merged", {"project_id": project_id, **summary.to_dict()}
        )
        return summary

    def _rows_by_source_id(self, query: Any) -> Dict[str, Any]:
        rows = self.session.scalars(query).all()
        return {row.source_id: row for row in rows if row.source_id}

    @staticmethod
    def _assign(row: Any, **values: Any) -> bool:
        """Set differing attributes; returns whether anything changed."""
        changed = False
        for key, value in values.items():
            if getattr(row, key) != value:
                setattr(row, key, value)
                changed = True
        return changed

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("load_snapshot_data")
    def load_snapshot_data(self, project_id: str) -> SnapshotData:
        """
        Capture a project's full state, archived rows included.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = self._get_or_raise(Project, project_id)

        chapters = self.session.scalars(
            select(Chapter)
            .where(Chapter.project_id == project_id)
            .order_by(Chapter.position, insertion_order(Chapter))
        ).all()
        scenes = self.session.scalars(
            select(Scene)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
            .order_by(
                Chapter.position,
                insertion_order(Chapter),
                Scene.position,
                insertion_order(Scene),
            )
        ).all()
        beats = self.session.scalars(
            select(Beat)
            .join(Scene, Beat.scene_id == Scene.id)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
            .order_by(
                Chapter.position,
                insertion_order(Chapter),
                Scene.position,
                insertion_order(Scene),
                Beat.position,
                insertion_order(Beat),
            )
        ).all()

        scene_ids = [scene.id for scene in scenes]

        data = SnapshotData(
            project=project_record(project),
            chapters=[record_from_row(ChapterData, row) for row in chapters],
            scenes=[record_from_row(SceneData, row) for row in scenes],
            beats=[record_from_row(BeatData, row) for row in beats],
            characters=self._load_references(Character, CharacterData, project_id),
            locations=self._load_references(Location, LocationData, project_id),
            reference_items=self._load_references(
                ReferenceItem, ReferenceItemData, project_id
            ),
            scene_character_refs=[
                SceneCharacterRef(**row)
                for row in self._load_joins(scene_character_refs, scene_ids)
            ],
            scene_location_refs=[
                SceneLocationRef(**row)
                for row in self._load_joins(scene_location_refs, scene_ids)
            ],
            scene_reference_item_refs=[
                SceneReferenceItemRef(**row)
                for row in self._load_joins(scene_reference_item_refs, scene_ids)
            ],
            scene_reference_states=self._load_states(scene_ids),
        )
        return data

    def _load_references(
        self, model: Type[Any], record_cls: Type[Any], project_id: str
    ) -> List[Any]:
        rows = self.session.scalars(
            select(model)
            .where(model.project_id == project_id)
            .order_by(insertion_order(model))
        ).all()
        return [record_from_row(record_cls, row) for row in rows]

    def _load_joins(self, table: Any, scene_ids: List[str]) -> List[Dict[str, Any]]:
        if not scene_ids:
            return []
        result = self.session.execute(
            select(table)
            .where(table.c.scene_id.in_(scene_ids))
            .order_by(insertion_order(table))
        )
        return [dict(row._mapping) for row in result]

    def _load_states(self, scene_ids: List[str]) -> List[SceneReferenceStateData]:
        if not scene_ids:
            return []
        rows = self.session.scalars(
            select(SceneReferenceState)
            .where(SceneReferenceState.scene_id.in_(scene_ids))
            .order_by(insertion_order(SceneReferenceState))
        ).all()
        return [record_from_row(SceneReferenceStateData, row) for row in rows]
