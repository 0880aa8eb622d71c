"""Tests for the forward-only schema migration pass."""
import pytest
from sqlalchemy import create_engine, inspect, text

from kindling.database.migrations import missing_columns, run_migrations
from kindling.database.models import Base


LEGACY_SCHEMA = [
    """
    CREATE TABLE projects (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(500) NOT NULL,
        source_type VARCHAR(32) NOT NULL,
        source_path TEXT,
        created_at VARCHAR(40) NOT NULL,
        modified_at VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE chapters (
        id VARCHAR(36) PRIMARY KEY,
        project_id VARCHAR(36) NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
        title VARCHAR(500) NOT NULL,
        position INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE scenes (
        id VARCHAR(36) PRIMARY KEY,
        chapter_id VARCHAR(36) NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
        title VARCHAR(500) NOT NULL,
        synopsis TEXT,
        prose TEXT,
        position INTEGER NOT NULL
    )
    """,
    "INSERT INTO projects VALUES ('p1', 'Old', 'plottr', NULL, '2024-01-01', '2024-01-01')",
    "INSERT INTO chapters VALUES ('c1', 'p1', 'One', 0)",
    "INSERT INTO scenes VALUES ('s1', 'c1', 'Scene', NULL, NULL, 0)",
]


class TestRunMigrations:
    """Tests for run_migrations on fresh and legacy databases."""

    @pytest.fixture
    def engine(self, tmp_dir):
        engine = create_engine(f"sqlite:///{tmp_dir / 'migrate.db'}")
        yield engine
        engine.dispose()

    @pytest.fixture
    def legacy_engine(self, engine):
        with engine.begin() as connection:
            for statement in LEGACY_SCHEMA:
                connection.execute(text(statement))
        return engine

    def test_fresh_database_gets_every_table(self, engine):
        """A new file receives the full table set."""
        run_migrations(engine)

        tables = set(inspect(engine).get_table_names())
        assert set(Base.metadata.tables) <= tables

    def test_fresh_database_needs_no_columns(self, engine):
        """Nothing is added when tables are created from the models."""
        assert run_migrations(engine) == {}

    def test_legacy_columns_are_added(self, legacy_engine):
        """Missing columns on existing tables are added."""
        added = run_migrations(legacy_engine)

        assert "source_id" in added["chapters"]
        assert "is_part" in added["chapters"]
        assert {"scene_type", "scene_status", "archived", "locked"} <= set(added["scenes"])
        assert "reference_types" in added["projects"]
        assert missing_columns(legacy_engine) == {}

    def test_legacy_rows_get_server_defaults(self, legacy_engine):
        """Existing rows read the declared defaults for new columns."""
        run_migrations(legacy_engine)

        with legacy_engine.connect() as connection:
            row = connection.execute(
                text("SELECT scene_type, scene_status, archived FROM scenes WHERE id = 's1'")
            ).one()
        assert row.scene_type == "normal"
        assert row.scene_status == "draft"
        assert row.archived == 0

    def test_missing_tables_are_created(self, legacy_engine):
        """Join and reference-state tables absent from the legacy file appear."""
        run_migrations(legacy_engine)

        tables = set(inspect(legacy_engine).get_table_names())
        assert "scene_reference_states" in tables
        assert "scene_reference_item_refs" in tables
        assert "snapshots" in tables

    def test_second_run_is_a_noop(self, legacy_engine):
        """Running twice changes nothing the second time."""
        run_migrations(legacy_engine)
        assert run_migrations(legacy_engine) == {}
