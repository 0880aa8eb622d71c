#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for database operations.

- log_database_operation: timing + start/complete/error logging
- handle_db_errors: SQLAlchemy errors surface as DatabaseError
- DatabaseOperation: the two combined, for use inside a block
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from functools import wraps
from typing import Callable, Optional

# --- Third party imports ---
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

# --- Local imports ---
from kindling.core.exceptions import DatabaseError
from kindling.core.logging_manager import KindlingLogger, safe_logger


def log_database_operation(operation_name: str):
    """
    Decorator to log database operations with timing and context.

    The wrapped callable must be a method whose instance may carry a
    `logger` attribute; a missing or None logger disables logging.

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            logger = safe_logger(getattr(self, "logger", None))
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"

            logger.log_debug(
                f"Starting {operation_name}",
                {
                    "operation_id": operation_id,
                    "args_count": len(args),
                    "kwargs_keys": list(kwargs.keys()),
                },
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "operation_id": operation_id,
                        "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "operation_id": operation_id,
                    "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator to handle common database errors.

    Args:
        function: Function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except IntegrityError as e:
            raise DatabaseError(f"Data integrity violation: {e}") from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Database operation failed: {e}") from e

    return wrapper


class DatabaseOperation:
    """
    Context manager combining operation logging and error conversion.

    Usage:
        with DatabaseOperation(self.logger, "archive_scene"):
            ...

    IntegrityError and other SQLAlchemyError are re-raised as
    DatabaseError; any other exception propagates unchanged. Every
    failure is logged once.
    """

    def __init__(
        self,
        logger: Optional[KindlingLogger],
        operation_name: str,
        log_start: bool = False,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.log_start = log_start
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "DatabaseOperation":
        self.start_time = datetime.now()
        if self.log_start:
            self.logger.log_debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration = (datetime.now() - (self.start_time or datetime.now())).total_seconds()

        if exc_type is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {"duration_seconds": duration, "success": True},
            )
            return False

        self.logger.log_error(
            exc_val,
            {"operation": self.operation_name, "duration_seconds": duration},
        )
        if isinstance(exc_val, IntegrityError):
            raise DatabaseError(f"Data integrity violation: {exc_val}") from exc_val
        if isinstance(exc_val, SQLAlchemyError):
            raise DatabaseError(f"Database operation failed: {exc_val}") from exc_val
        return False
