#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Kindling project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all database-related errors
    │   ├── NotFoundError - Row missing by id
    │   ├── SnapshotError - Snapshot capture/restore failures
    │   │   └── CorruptSnapshotError - Archive fails to decode
    │   └── ExportError - Manuscript export failures
    ├── ImporterError - Base for all importer failures
    │   ├── SourceIOError - Source file or folder missing/unreadable
    │   ├── ParseError - JSON, XML or YAML syntax errors
    │   ├── InvalidStructureError - Well-formed input missing required fields
    │   └── EncodingError - Undecodable source bytes
    └── ValidationError - Option, settings or argument validation failures

Usage:
    from kindling.core.exceptions import DatabaseError, ImporterError

    try:
        import_project(db, path)
    except ImporterError as e:
        logger.error(f"Import failed: {e}")
    except DatabaseError as e:
        logger.error(f"Database operation failed: {e}")
"""


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    This is the parent class for all database-specific exceptions.
    Catch this to handle any database error, or catch specific
    subclasses for more granular error handling.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: FOREIGN KEY constraint failed")

    See Also:
        NotFoundError, SnapshotError, ExportError
    """

    pass


class NotFoundError(DatabaseError):
    """
    Exception for lookups of rows that do not exist.

    Examples:
        >>> raise NotFoundError("Project not found: 6f1c...")
        >>> raise NotFoundError("Snapshot not found: 0b7e...")
    """

    pass


class SnapshotError(DatabaseError):
    """
    Exception for snapshot capture and restoration failures.

    Raised when snapshot operations fail, including:
    - Writing the compressed archive
    - Reading an archive that has gone missing
    - Re-inserting the captured project during restore

    Examples:
        >>> raise SnapshotError("Failed to write snapshot archive: disk full")
        >>> raise SnapshotError("Snapshot archive missing: /data/snapshots/...")
    """

    pass


class CorruptSnapshotError(SnapshotError):
    """
    Exception for snapshot archives that cannot be decoded.

    Raised when the gzip stream is truncated, the payload is not valid
    JSON, or the decoded document lacks the project record.

    Examples:
        >>> raise CorruptSnapshotError("Snapshot is not valid JSON")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for manuscript export failures.

    Raised when exporting a project to DOCX or Markdown fails:
    - Output directory cannot be created
    - File writing errors
    - Archived chapters requested explicitly

    Examples:
        >>> raise ExportError("Failed to write DOCX file: permission denied")
    """

    pass


class ImporterError(Exception):
    """
    Base exception for importer failures.

    Every importer surfaces one of the subclasses below; the import command
    rolls back the whole transaction when any of them is raised.
    """

    pass


class SourceIOError(ImporterError):
    """
    Exception for unreadable import sources.

    Examples:
        >>> raise SourceIOError("Source file not found: outline.md")
        >>> raise SourceIOError("Longform folder not found: ~/vault/novel")
    """

    pass


class ParseError(ImporterError):
    """
    Exception for syntax errors in import sources (JSON, XML, YAML).

    Examples:
        >>> raise ParseError("Invalid Plottr JSON: Expecting value at line 1")
        >>> raise ParseError("Invalid yWriter XML: mismatched tag")
    """

    pass


class InvalidStructureError(ImporterError):
    """
    Exception for well-formed sources missing required structure.

    Examples:
        >>> raise InvalidStructureError("Plottr file has no beats section")
        >>> raise InvalidStructureError("Only multi-scene Longform projects are supported")
    """

    pass


class EncodingError(ImporterError):
    """
    Exception for source bytes that cannot be decoded.

    Examples:
        >>> raise EncodingError("Failed to decode yWriter file as utf-16-le")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Unknown export option values
    - Malformed settings file
    - Unsupported import format
    - Malformed identifiers

    Examples:
        >>> raise ValidationError("Unknown chapter heading style: 'roman'")
        >>> raise ValidationError("Settings file is not a JSON object")
    """

    pass
