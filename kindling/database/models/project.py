#!/usr/bin/env python3
"""
project.py
-------------
Manuscript structure models for the Kindling database.

Structure Models:
    - Project: Root of a manuscript
    - Chapter: Ordered unit of a project (or a part separator)
    - Scene: Ordered unit of a chapter, with its own synopsis and prose
    - Beat: Smallest structural unit; a note plus optional prose

Design:
    - Children are ordered by `position`; ties break on insertion order
    - Deleting a parent removes its children through ON DELETE CASCADE
    - `archived` is semantic only: exporters skip archived rows while
      snapshots and restores carry them
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import Base, IdType
from .enums import SceneStatus, SceneType

if TYPE_CHECKING:
    from .references import Character, Location, ReferenceItem


class Project(Base):
    """
    Root of a manuscript.

    Attributes:
        id: UUID primary key
        name: Project title
        source_type: Importer that created the project
        source_path: Path of the imported file or folder
        created_at / modified_at: RFC 3339 timestamps
        author_pen_name: Name printed on the title page byline
        genre: Optional genre line for the title page
        description: Free-form description
        word_target: Target length in words
        reference_types: Enabled reference panels (JSON list)

    Relationships:
        chapters: One-to-many with Chapter (ordered by position)
        characters / locations / reference_items: One-to-many
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    source_type: Mapped[str] = mapped_column(String(32), nullable=False)
    source_path: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
    modified_at: Mapped[str] = mapped_column(String(40), nullable=False)
    author_pen_name: Mapped[Optional[str]] = mapped_column(String(255))
    genre: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    word_target: Mapped[Optional[int]] = mapped_column(Integer)
    reference_types: Mapped[Optional[List[str]]] = mapped_column(
        JSON, server_default='["characters", "locations"]'
    )

    # --- Relationships ---
    chapters: Mapped[List["Chapter"]] = relationship(
        "Chapter",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Chapter.position",
    )
    characters: Mapped[List["Character"]] = relationship(
        "Character", cascade="all, delete-orphan", passive_deletes=True
    )
    locations: Mapped[List["Location"]] = relationship(
        "Location", cascade="all, delete-orphan", passive_deletes=True
    )
    reference_items: Mapped[List["ReferenceItem"]] = relationship(
        "ReferenceItem", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"


class Chapter(Base):
    """
    Ordered unit of a project.

    Attributes:
        id: UUID primary key
        project_id: Owning project
        title: Chapter title
        position: Order within the project
        source_id: Opaque identifier from the importer
        archived: Excluded from exports and word counts
        locked: Protected from editing
        is_part: Marks a volume separator rather than a numbered chapter
    """

    __tablename__ = "chapters"

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))
    archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    is_part: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    # --- Relationships ---
    project: Mapped["Project"] = relationship("Project", back_populates="chapters")
    scenes: Mapped[List["Scene"]] = relationship(
        "Scene",
        back_populates="chapter",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Scene.position",
    )

    def __repr__(self) -> str:
        return f"<Chapter(id={self.id}, title='{self.title}', position={self.position})>"


class Scene(Base):
    """
    Ordered unit of a chapter.

    Attributes:
        id: UUID primary key
        chapter_id: Owning chapter
        title: Scene title
        synopsis: Short summary
        prose: Scene-level HTML prose
        position: Order within the chapter
        source_id: Opaque identifier from the importer
        archived / locked: See Chapter
        scene_type: normal, notes, todo or unused
        scene_status: draft, revised or final
    """

    __tablename__ = "scenes"

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    chapter_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    synopsis: Mapped[Optional[str]] = mapped_column(Text)
    prose: Mapped[Optional[str]] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))
    archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    scene_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SceneType.NORMAL.value, server_default="normal"
    )
    scene_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SceneStatus.DRAFT.value, server_default="draft"
    )

    # --- Relationships ---
    chapter: Mapped["Chapter"] = relationship("Chapter", back_populates="scenes")
    beats: Mapped[List["Beat"]] = relationship(
        "Beat",
        back_populates="scene",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Beat.position",
    )

    def __repr__(self) -> str:
        return f"<Scene(id={self.id}, title='{self.title}', position={self.position})>"


class Beat(Base):
    """
    Smallest structural unit of a scene.

    Attributes:
        id: UUID primary key
        scene_id: Owning scene
        content: Short structural note
        prose: HTML manuscript text for this beat
        position: Order within the scene
        source_id: Opaque identifier from the importer
    """

    __tablename__ = "beats"

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    scene_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("scenes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    prose: Mapped[Optional[str]] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))

    scene: Mapped["Scene"] = relationship("Scene", back_populates="beats")

    def __repr__(self) -> str:
        return f"<Beat(id={self.id}, position={self.position})>"
