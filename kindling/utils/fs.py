#!/usr/bin/env python3
"""
fs.py
-------------------
Filesystem utilities for exports and snapshots.

Functions:
    sanitize_filename: Make a title safe to use as a file or folder name
    atomic_write_bytes: Write a file so readers see either nothing or all of it
    unique_path: First free variant of a path (`name`, `name_1`, ...)

Usage:
    from kindling.utils.fs import sanitize_filename, atomic_write_bytes

    target = out_dir / f"{sanitize_filename(project.name)}.docx"
    atomic_write_bytes(target, payload)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import tempfile
from pathlib import Path

INVALID_FILENAME_CHARS = '/\\:*?"<>|'
_FILENAME_TABLE = str.maketrans({char: "_" for char in INVALID_FILENAME_CHARS})


def sanitize_filename(name: str) -> str:
    """
    Replace characters that are invalid in file names and trim whitespace.

    Examples:
        >>> sanitize_filename("Multiple///Slashes")
        'Multiple___Slashes'
        >>> sanitize_filename("  What? ")
        'What_'
    """
    return name.translate(_FILENAME_TABLE).strip()


def atomic_write_bytes(path: Path, data: bytes) -> Path:
    """
    Write `data` to `path` through a temporary sibling and an atomic rename.

    The parent directory is created on demand. On failure the temporary
    file is removed and `path` is left untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def unique_path(path: Path) -> Path:
    """
    Return `path` if free, else the first free `{stem}_{n}{suffixes}`.

    Suffixes are kept whole, so `a.json.gz` becomes `a_1.json.gz`.
    """
    path = Path(path)
    if not path.exists():
        return path

    suffix = "".join(path.suffixes)
    stem = path.name[: len(path.name) - len(suffix)] if suffix else path.name
    counter = 1
    while True:
        candidate = path.with_name(f"{stem}_{counter}{suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
