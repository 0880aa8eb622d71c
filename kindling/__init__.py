"""
Kindling Manuscript Package
===========================

A desktop-local manuscript management backend for novel-length fiction.

This package ingests outlines authored in third-party tools, stores them
in a relational structure with revision snapshots, and emits manuscripts
in Standard Manuscript Format (SMF).

Main Components:
    - importers: Plottr, yWriter 7, Markdown outline and Longform parsers
    - database: SQLAlchemy ORM, migrations, snapshots and export orchestration
    - builders: DOCX (SMF) and Markdown manuscript generation
    - core: Logging, exceptions, paths, app settings
    - dataclasses: Canonical project records shared by every layer
    - utils: Smart-text pipeline, filesystem and markdown helpers

Primary Interfaces:
    - kindling.cli: Command-line interface
    - kindling.database.manager.KindlingDB: Main database interface

Example Usage:
    >>> from kindling.database import KindlingDB
    >>> from kindling.importers import import_project
    >>> db = KindlingDB(db_path="~/kindling.db")
    >>> project = import_project(db, "outline.md")
"""

__version__ = "0.1.0"
__author__ = "Kindling Project"

from kindling.database.manager import KindlingDB
from kindling.core.paths import APP_DATA_DIR, DB_PATH, LOG_DIR, SNAPSHOT_DIR

__all__ = [
    "KindlingDB",
    "APP_DATA_DIR",
    "DB_PATH",
    "LOG_DIR",
    "SNAPSHOT_DIR",
]
