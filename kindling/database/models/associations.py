#!/usr/bin/env python3
"""
associations.py
-------------------
Scene-to-reference join tables and per-scene reference panel state.

Tables:
    - scene_character_refs: Scene <-> Character
    - scene_location_refs: Scene <-> Location
    - scene_reference_item_refs: Scene <-> ReferenceItem

Models:
    - SceneReferenceState: Ordering and expand/collapse state of one
      reference inside one scene's panel

Join rows cascade from both sides. `SceneReferenceState.reference_id` is
not a foreign key: it may point at a character, a location
or a reference item depending on `reference_type`.
"""
# --- Annotations ---
from __future__ import annotations

# --- Third party imports ---
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base, IdType

scene_character_refs = Table(
    "scene_character_refs",
    Base.metadata,
    Column(
        "scene_id",
        IdType(),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "character_id",
        IdType(),
        ForeignKey("characters.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

scene_location_refs = Table(
    "scene_location_refs",
    Base.metadata,
    Column(
        "scene_id",
        IdType(),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "location_id",
        IdType(),
        ForeignKey("locations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

scene_reference_item_refs = Table(
    "scene_reference_item_refs",
    Base.metadata,
    Column(
        "scene_id",
        IdType(),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "reference_item_id",
        IdType(),
        ForeignKey("reference_items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class SceneReferenceState(Base):
    """
    Panel state of one reference within one scene.

    Attributes:
        scene_id: Owning scene
        reference_type: "characters", "locations" or a reference item type
        reference_id: Id of the referenced entity
        position: Order within the scene's panel
        expanded: Whether the entry is shown expanded
    """

    __tablename__ = "scene_reference_states"

    scene_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("scenes.id", ondelete="CASCADE"), primary_key=True
    )
    reference_type: Mapped[str] = mapped_column(String(64), primary_key=True)
    reference_id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    position: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    expanded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    def __repr__(self) -> str:
        return (
            f"<SceneReferenceState(scene_id={self.scene_id}, "
            f"{self.reference_type}={self.reference_id})>"
        )
