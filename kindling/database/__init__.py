"""
Kindling Database Package
--------------------------

SQLite-backed store for manuscripts, snapshots and exports.

- KindlingDB: engine, store mutex, session scope
- run_migrations: schema bootstrap + additive column migrations
- SnapshotManager: gzip JSON snapshots with create/list/preview/restore/delete
- ExportManager: DOCX and Markdown export orchestration
"""
from .manager import KindlingDB
from .migrations import run_migrations
from .snapshot_manager import SnapshotManager
from .export_manager import ExportManager

__all__ = ["KindlingDB", "run_migrations", "SnapshotManager", "ExportManager"]
