#!/usr/bin/env python3
"""
references.py
-------------------
Reference models: the story bible attached to a project.

Models:
    - Character / CharacterAttribute
    - Location / LocationAttribute
    - ReferenceItem / ReferenceItemAttribute

Each reference owner keeps an open-ended attribute map in an auxiliary
`(owner_id, key, value)` table; `AttributeMapMixin.attributes` rebuilds
the dict and `set_attributes()` replaces it.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import List, Optional

# --- Third party imports ---
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import AttributeMapMixin, Base, IdType


# --- Attribute rows ---
class CharacterAttribute(Base):
    __tablename__ = "character_attributes"

    character_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("characters.id", ondelete="CASCADE"), primary_key=True
    )
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class LocationAttribute(Base):
    __tablename__ = "location_attributes"

    location_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True
    )
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class ReferenceItemAttribute(Base):
    __tablename__ = "reference_item_attributes"

    reference_item_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("reference_items.id", ondelete="CASCADE"), primary_key=True
    )
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


# --- Owners ---
class Character(AttributeMapMixin, Base):
    """
    A person in the story.

    Attributes:
        id: UUID primary key
        project_id: Owning project
        name: Display name
        description: HTML or plain-text description
        source_id: Opaque identifier from the importer
        attributes: Free-form key/value map (via CharacterAttribute)
    """

    __tablename__ = "characters"
    attribute_class = CharacterAttribute

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))

    attribute_rows: Mapped[List[CharacterAttribute]] = relationship(
        CharacterAttribute,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=CharacterAttribute.key,
    )

    def __repr__(self) -> str:
        return f"<Character(id={self.id}, name='{self.name}')>"


class Location(AttributeMapMixin, Base):
    """A place in the story; same shape as Character."""

    __tablename__ = "locations"
    attribute_class = LocationAttribute

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))

    attribute_rows: Mapped[List[LocationAttribute]] = relationship(
        LocationAttribute,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=LocationAttribute.key,
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}')>"


class ReferenceItem(AttributeMapMixin, Base):
    """
    Reference entry of a user-defined type.

    `reference_type` names the panel the entry belongs to (e.g. "item",
    "faction"); yWriter items import as type "item".
    """

    __tablename__ = "reference_items"
    attribute_class = ReferenceItemAttribute

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reference_type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    source_id: Mapped[Optional[str]] = mapped_column(String(255))

    attribute_rows: Mapped[List[ReferenceItemAttribute]] = relationship(
        ReferenceItemAttribute,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=ReferenceItemAttribute.key,
    )

    def __repr__(self) -> str:
        return (
            f"<ReferenceItem(id={self.id}, type='{self.reference_type}', "
            f"name='{self.name}')>"
        )
