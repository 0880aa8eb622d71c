#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the Kindling manuscript store.

Provides the KindlingDB class, which owns the SQLite engine and hands out
transactional sessions.

Handles:
    - Engine and session factory setup (foreign keys enforced)
    - Schema bootstrap + additive migrations on every startup
    - The single store mutex: one transaction at a time
    - Session-bound entity managers (db.projects, db.bundles)

Usage:
    db = KindlingDB("~/.local/share/kindling/kindling.db")
    with db.session_scope() as session:
        for project in db.projects.list_projects():
            print(project.name)

Notes
==============
- Every import and restore runs inside exactly one session_scope(), so
  any failure rolls the whole batch back.
- The mutex is reentrant so a thread already holding a scope may open a
  nested one; nested scopes are independent sessions and commit on their
  own.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from kindling.core.exceptions import DatabaseError
from kindling.core.logging_manager import KindlingLogger, safe_logger
from .managers import BundleManager, ProjectManager
from .migrations import run_migrations


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ----- Main Database Manager -----
class KindlingDB:
    """
    Main database manager for the Kindling store.

    Attributes:
        db_path (Path): Filesystem path to the SQLite database file
        engine (Engine): SQLAlchemy engine instance
        SessionLocal (sessionmaker): SQLAlchemy session factory
        logger: Logger for database operations (NullLogger when absent)
        lock (RLock): Store mutex held for the length of every session scope
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        logger: Optional[KindlingLogger] = None,
    ) -> None:
        """
        Initialize database engine, session factory and schema.

        Args:
            db_path: Path to the SQLite file (created if absent)
            log_dir: Directory for log files (optional)
            logger: Pre-built logger; takes precedence over log_dir

        Raises:
            DatabaseError: If the engine or schema cannot be set up
        """
        self.db_path = Path(db_path).expanduser().resolve()

        # --- Logging ---
        if logger is not None:
            self.logger = logger
        elif log_dir:
            self.logger = KindlingLogger(
                Path(log_dir).expanduser().resolve(), component_name="database"
            )
        else:
            self.logger = safe_logger(None)

        self.lock = threading.RLock()

        # Session-bound managers, populated inside session_scope()
        self._project_manager: Optional[ProjectManager] = None
        self._bundle_manager: Optional[BundleManager] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine, session factory and schema."""
        try:
            self.logger.log_operation("database_init_start", {"db_path": str(self.db_path)})

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                future=True,
                pool_pre_ping=True,
            )
            event.listen(self.engine, "connect", _enable_foreign_keys)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
                future=True,
            )

            run_migrations(self.engine, self.logger)

            self.logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            self.logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Holds the store mutex for the whole scope. Commits on success;
        on any exception rolls back, logs and re-raises.

        Usage:
            with db.session_scope() as session:
                project = db.bundles.insert_bundle(bundle)
        """
        with self.lock:
            session = self.SessionLocal()
            session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

            previous = (self._project_manager, self._bundle_manager)
            self._project_manager = ProjectManager(session, self.logger)
            self._bundle_manager = BundleManager(session, self.logger)

            self.logger.log_debug("session_start", {"session_id": session_id})

            try:
                yield session
                session.commit()
                self.logger.log_debug("session_commit", {"session_id": session_id})

            except Exception as e:
                session.rollback()
                self.logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
                raise
            finally:
                self._project_manager, self._bundle_manager = previous
                session.close()
                self.logger.log_debug("session_close", {"session_id": session_id})

    def get_session(self) -> Session:
        """Create and return a new SQLAlchemy session (caller manages it)."""
        return self.SessionLocal()

    # ---- Entity managers ----
    @property
    def projects(self) -> ProjectManager:
        """
        Access ProjectManager for project, chapter, scene and beat operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._project_manager is None:
            raise DatabaseError(
                "ProjectManager requires active session. Use within session_scope."
            )
        return self._project_manager

    @property
    def bundles(self) -> BundleManager:
        """
        Access BundleManager for whole-project inserts and captures.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._bundle_manager is None:
            raise DatabaseError(
                "BundleManager requires active session. Use within session_scope."
            )
        return self._bundle_manager

    # ---- Lifecycle ----
    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
        self.logger.log_debug("database_closed", {"db_path": str(self.db_path)})

    def __enter__(self) -> "KindlingDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
