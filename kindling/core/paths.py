#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the Kindling application data directory.

All persistent state lives under a single app-data directory:

    APP_DATA_DIR/
    ├── kindling.db      # SQLite store
    ├── settings.json    # App-wide author/contact settings
    ├── snapshots/       # {project_id}/{timestamp}_{trigger}.json.gz
    └── logs/            # Rotating component logs

The directory defaults to ~/.local/share/kindling and can be moved with
the KINDLING_DATA_DIR environment variable. Paths are resolved at import
time; nothing is created until a component needs it.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path

DATA_DIR_ENV = "KINDLING_DATA_DIR"


def _get_app_data_dir() -> Path:
    """
    Determine the app-data directory.

    Returns:
        Path from KINDLING_DATA_DIR when set, else ~/.local/share/kindling
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".local" / "share" / "kindling"


# ----- App data -----
APP_DATA_DIR: Path = _get_app_data_dir()

# ---- Database ----
DB_FILENAME = "kindling.db"
DB_PATH = APP_DATA_DIR / DB_FILENAME

# ---- Snapshots ----
SNAPSHOT_DIR = APP_DATA_DIR / "snapshots"

# ---- Settings ----
SETTINGS_FILENAME = "settings.json"
SETTINGS_PATH = APP_DATA_DIR / SETTINGS_FILENAME

# ---- Logs ----
LOG_DIR = APP_DATA_DIR / "logs"
