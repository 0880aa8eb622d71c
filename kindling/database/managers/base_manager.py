#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing shared session utilities.
All entity managers inherit from this class.

Key Features:
    - Session + logger wiring
    - Fetch-by-id with NotFoundError
    - Owning-project lookup and `modified_at` bumping
    - Deterministic ordering (position, then insertion order)

Usage:
    class ProjectManager(BaseManager):
        def get_project(self, project_id: str) -> Project:
            return self._get_or_raise(Project, project_id)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from abc import ABC
from typing import Any, Optional, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import literal_column
from sqlalchemy.orm import Session

# --- Local imports ---
from kindling.core.exceptions import NotFoundError
from kindling.core.logging_manager import KindlingLogger, safe_logger
from kindling.dataclasses import utc_now
from ..models import Beat, Chapter, Project, Scene

T = TypeVar("T")


def insertion_order(model: Any) -> Any:
    """Order-by clause for a table's implicit SQLite rowid (model or Table)."""
    name = getattr(model, "__tablename__", None) or model.name
    return literal_column(f"{name}.rowid")


class BaseManager(ABC):
    """
    Abstract base manager.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Logger for operation tracking (NullLogger when absent)
    """

    def __init__(self, session: Session, logger: Optional[KindlingLogger] = None):
        self.session = session
        self.logger = safe_logger(logger)

    def _get_or_raise(self, model: Type[T], entity_id: str) -> T:
        """
        Fetch a row by primary key.

        Raises:
            NotFoundError: If no row has that id
        """
        entity = self.session.get(model, entity_id)
        if entity is None:
            raise NotFoundError(f"{model.__name__} not found: {entity_id}")
        return entity

    def _project_id_for(self, entity: Any) -> str:
        """Resolve the owning project of a chapter, scene or beat."""
        if isinstance(entity, Project):
            return entity.id
        if isinstance(entity, Chapter):
            return entity.project_id
        if isinstance(entity, Scene):
            return self._get_or_raise(Chapter, entity.chapter_id).project_id
        if isinstance(entity, Beat):
            return self._project_id_for(self._get_or_raise(Scene, entity.scene_id))
        return entity.project_id

    def _touch_project(self, project_id: str) -> str:
        """Set the project's `modified_at` to now; returns the timestamp."""
        stamp = utc_now()
        self._get_or_raise(Project, project_id).modified_at = stamp
        return stamp
