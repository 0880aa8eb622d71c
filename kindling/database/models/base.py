"""
Base Classes
------------

Foundational ORM classes for the Kindling database.

Classes:
    - Base: Declarative base for all SQLAlchemy models
    - AttributeMapMixin: Reassembles an owner's (key, value) rows as a dict

Identifiers are UUID strings (36 chars) and timestamps RFC 3339 strings,
so rows convert to the canonical records without reformatting.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Dict

# --- Third party ---
from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase

ID_LENGTH = 36


def IdType() -> String:
    """Column type for UUID identifiers."""
    return String(ID_LENGTH)


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation and migrations.
    """

    pass


class AttributeMapMixin:
    """
    Mixin for owners of a free-form attribute map.

    Subclasses declare an `attribute_rows` relationship to their
    `(owner_id, key, value)` table and name its row class in
    `attribute_class`.
    """

    attribute_class: type

    @property
    def attributes(self) -> Dict[str, str]:
        """Attribute map reassembled from the auxiliary table."""
        return {row.key: row.value for row in self.attribute_rows}  # type: ignore[attr-defined]

    def set_attributes(self, values: Dict[str, str]) -> None:
        """Replace the attribute map."""
        self.attribute_rows = [  # type: ignore[attr-defined]
            self.attribute_class(key=key, value=value) for key, value in values.items()
        ]
