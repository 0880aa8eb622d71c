#!/usr/bin/env python3
"""
snapshot.py
-------------------
Index of snapshot archives.

Each row points at one gzip JSON archive under
`{SNAPSHOT_DIR}/{project_id}/` and caches the figures shown in listings
so they never require opening the archive.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Dict, Optional

# --- Third party imports ---
from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base, IdType
from .enums import SnapshotTrigger


class SnapshotMetadata(Base):
    """
    Metadata row for a snapshot archive.

    Attributes:
        id: UUID primary key
        project_id: Project the snapshot was taken from
        name: User-supplied label
        description: Optional longer note
        trigger_type: manual, export or auto
        created_at: RFC 3339 timestamp
        file_path: Absolute path of the archive
        file_size: Compressed size on disk (bytes)
        uncompressed_size: Length of the JSON document (bytes)
        chapter_count / scene_count / beat_count: Structure totals
        word_count: Whitespace-split tokens over raw scene and beat prose
        schema_version: Archive format version
    """

    __tablename__ = "snapshots"

    id: Mapped[str] = mapped_column(IdType(), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        IdType(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    trigger_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SnapshotTrigger.MANUAL.value, server_default="manual"
    )
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    uncompressed_size: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    chapter_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    scene_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    beat_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    schema_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1"
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "trigger_type": self.trigger_type,
            "created_at": self.created_at,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "uncompressed_size": self.uncompressed_size,
            "chapter_count": self.chapter_count,
            "scene_count": self.scene_count,
            "beat_count": self.beat_count,
            "word_count": self.word_count,
            "schema_version": self.schema_version,
        }

    def __repr__(self) -> str:
        return f"<SnapshotMetadata(id={self.id}, name='{self.name}', trigger={self.trigger_type})>"
