#!/usr/bin/env python3
"""
migrations.py
--------------------
Forward-only schema bootstrap for the Kindling store.

The store has no revision history: every startup calls `run_migrations()`,
which

1. creates any table missing from the database (`create_all`), then
2. compares each model table with the live schema and adds every column
   the database lacks, through alembic's `Operations` API.

Columns added to an existing table keep the model's server default; a
non-null column without one is added as nullable so existing rows stay
valid. Both steps are no-ops on an up-to-date database, so the pass is
safe to run on every startup. There are no down-migrations.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Dict, List, Optional

# --- Third party imports ---
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, Engine, inspect

# --- Local imports ---
from kindling.core.logging_manager import KindlingLogger, safe_logger
from .models import Base


def _column_for_add(column: Column) -> Column:
    """Detached copy of a model column suitable for ALTER TABLE ADD COLUMN."""
    server_default = column.server_default.arg if column.server_default is not None else None  # type: ignore[attr-defined]
    return Column(
        column.name,
        column.type,
        nullable=True if server_default is None else column.nullable,
        server_default=server_default,
    )


def missing_columns(engine: Engine) -> Dict[str, List[str]]:
    """
    Report model columns absent from existing tables.

    Tables that do not exist yet are not reported; `create_all` handles them.

    Returns:
        Mapping of table name to missing column names
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    report: Dict[str, List[str]] = {}

    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue
        present = {col["name"] for col in inspector.get_columns(table.name)}
        absent = [col.name for col in table.columns if col.name not in present]
        if absent:
            report[table.name] = absent

    return report


def run_migrations(engine: Engine, logger: Optional[KindlingLogger] = None) -> Dict[str, List[str]]:
    """
    Bring the database schema up to the current models.

    Args:
        engine: Engine bound to the SQLite file
        logger: Optional logger

    Returns:
        Mapping of table name to the columns that were added
    """
    log = safe_logger(logger)

    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(engine)
    created = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
    if created:
        log.log_operation("schema_tables_created", {"tables": created})

    to_add = missing_columns(engine)
    if not to_add:
        log.log_debug("schema_up_to_date")
        return {}

    with engine.begin() as connection:
        operations = Operations(MigrationContext.configure(connection))
        for table_name, column_names in to_add.items():
            table = Base.metadata.tables[table_name]
            for name in column_names:
                operations.add_column(table_name, _column_for_add(table.columns[name]))

    log.log_operation("schema_columns_added", {"columns": to_add})
    return to_add
