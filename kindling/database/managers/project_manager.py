#!/usr/bin/env python3
"""
project_manager.py
--------------------
Thin project-level CRUD used by commands, exporters and tests.

Every mutation also bumps the owning project's `modified_at`.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Dict, List, Optional

# --- Third party imports ---
from sqlalchemy import func, select

# --- Local imports ---
from kindling.core.exceptions import ValidationError
from ..decorators import DatabaseOperation
from ..models import Beat, Chapter, Project, Scene, SceneStatus, SceneType
from .base_manager import BaseManager, insertion_order

SCENE_FIELDS = ("title", "synopsis", "prose", "position", "scene_type", "scene_status", "locked")
BEAT_FIELDS = ("content", "prose", "position")


class ProjectManager(BaseManager):
    """Project, chapter, scene and beat access."""

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def list_projects(self) -> List[Project]:
        """All projects, most recently modified first."""
        return list(
            self.session.scalars(
                select(Project).order_by(Project.modified_at.desc(), Project.name)
            ).all()
        )

    def get_project(self, project_id: str) -> Project:
        return self._get_or_raise(Project, project_id)

    def find_projects(self, name: str) -> List[Project]:
        """Projects whose name matches exactly."""
        return list(self.session.scalars(select(Project).where(Project.name == name)).all())

    def count_projects(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Project)) or 0

    def delete_project(self, project_id: str) -> None:
        """Delete a project; chapters, references and snapshot rows cascade."""
        project = self.get_project(project_id)
        with DatabaseOperation(self.logger, "delete_project"):
            self.session.delete(project)
            self.session.flush()

    def structure_counts(self, project_id: str) -> Dict[str, int]:
        """Chapter, scene and beat totals, archived rows included."""
        self.get_project(project_id)
        chapters = self.session.scalar(
            select(func.count()).select_from(Chapter).where(Chapter.project_id == project_id)
        )
        scenes = self.session.scalar(
            select(func.count())
            .select_from(Scene)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
        )
        beats = self.session.scalar(
            select(func.count())
            .select_from(Beat)
            .join(Scene, Beat.scene_id == Scene.id)
            .join(Chapter, Scene.chapter_id == Chapter.id)
            .where(Chapter.project_id == project_id)
        )
        return {"chapters": chapters or 0, "scenes": scenes or 0, "beats": beats or 0}

    # -------------------------------------------------------------------------
    # Ordered children
    # -------------------------------------------------------------------------

    def get_chapter(self, chapter_id: str) -> Chapter:
        return self._get_or_raise(Chapter, chapter_id)

    def get_scene(self, scene_id: str) -> Scene:
        return self._get_or_raise(Scene, scene_id)

    def get_beat(self, beat_id: str) -> Beat:
        return self._get_or_raise(Beat, beat_id)

    def get_chapters(self, project_id: str, include_archived: bool = True) -> List[Chapter]:
        query = select(Chapter).where(Chapter.project_id == project_id)
        if not include_archived:
            query = query.where(Chapter.archived.is_(False))
        query = query.order_by(Chapter.position, insertion_order(Chapter))
        return list(self.session.scalars(query).all())

    def get_scenes(self, chapter_id: str, include_archived: bool = True) -> List[Scene]:
        query = select(Scene).where(Scene.chapter_id == chapter_id)
        if not include_archived:
            query = query.where(Scene.archived.is_(False))
        query = query.order_by(Scene.position, insertion_order(Scene))
        return list(self.session.scalars(query).all())

    def get_beats(self, scene_id: str) -> List[Beat]:
        query = (
            select(Beat)
            .where(Beat.scene_id == scene_id)
            .order_by(Beat.position, insertion_order(Beat))
        )
        return list(self.session.scalars(query).all())

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update_scene(self, scene_id: str, **changes: Any) -> Scene:
        """
        Update scene fields.

        Args:
            scene_id: Scene to update
            **changes: Any of title, synopsis, prose, position, scene_type,
                scene_status, locked

        Raises:
            NotFoundError: If the scene does not exist
            ValidationError: On an unknown field
        """
        unknown = set(changes) - set(SCENE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown scene fields: {', '.join(sorted(unknown))}")

        scene = self.get_scene(scene_id)
        if "scene_type" in changes:
            changes["scene_type"] = SceneType.parse(changes["scene_type"]).value
        if "scene_status" in changes:
            changes["scene_status"] = SceneStatus.parse(changes["scene_status"]).value

        with DatabaseOperation(self.logger, "update_scene"):
            for key, value in changes.items():
                setattr(scene, key, value)
            self._touch_project(self._project_id_for(scene))
            self.session.flush()
        return scene

    def update_beat(self, beat_id: str, **changes: Any) -> Beat:
        """Update beat content, prose or position."""
        unknown = set(changes) - set(BEAT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown beat fields: {', '.join(sorted(unknown))}")

        beat = self.get_beat(beat_id)
        with DatabaseOperation(self.logger, "update_beat"):
            for key, value in changes.items():
                setattr(beat, key, value)
            self._touch_project(self._project_id_for(beat))
            self.session.flush()
        return beat

    def set_chapter_archived(self, chapter_id: str, archived: bool = True) -> Chapter:
        chapter = self.get_chapter(chapter_id)
        with DatabaseOperation(self.logger, "archive_chapter" if archived else "unarchive_chapter"):
            chapter.archived = archived
            self._touch_project(chapter.project_id)
            self.session.flush()
        return chapter

    def set_scene_archived(self, scene_id: str, archived: bool = True) -> Scene:
        scene = self.get_scene(scene_id)
        with DatabaseOperation(self.logger, "archive_scene" if archived else "unarchive_scene"):
            scene.archived = archived
            self._touch_project(self._project_id_for(scene))
            self.session.flush()
        return scene

    def rename_project(self, project_id: str, name: Optional[str]) -> Project:
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")
        project = self.get_project(project_id)
        with DatabaseOperation(self.logger, "rename_project"):
            project.name = name.strip()
            self._touch_project(project_id)
            self.session.flush()
        return project
