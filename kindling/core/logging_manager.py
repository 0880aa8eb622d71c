#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Centralized logging for Kindling operations.

Every long-running component (database, importers, snapshot engine,
export builders) logs through a KindlingLogger. Each logger writes a
rotating `{component}.log` with all activity plus a shared `errors.log`
for quick scanning; warnings and above are echoed to the console.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

FILE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
)
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class KindlingLogger:
    """
    Structured logger with rotation for one Kindling component.

    Attributes:
        log_dir: Directory for log files
        component_name: Name of the component using this logger
        main_logger: Logger receiving every message of the component
        error_logger: Dedicated logger for errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "kindling",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """
        Initialize the logging system for a component.

        Args:
            log_dir: Directory for log files
            component_name: Name for the component logger
                (e.g. 'database', 'snapshots', 'export')
            max_bytes: Maximum log file size before rotation (default: 10MB)
            backup_count: Number of rotated files to keep (default: 5)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._setup_loggers()

    def _setup_loggers(self) -> None:
        """Create component and error loggers with their handlers."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = logging.getLogger(f"kindling.{self.component_name}")
        self.main_logger.setLevel(logging.DEBUG)
        self.main_logger.propagate = False
        # Reset only this logger's handlers (not global logger state)
        self.main_logger.handlers = []

        self.error_logger = logging.getLogger(f"kindling.{self.component_name}.errors")
        self.error_logger.setLevel(logging.ERROR)
        self.error_logger.propagate = False
        self.error_logger.handlers = []

        self._add_file_handler(
            self.main_logger,
            self.log_dir / f"{self.component_name}.log",
            logging.DEBUG,
        )
        self._add_file_handler(
            self.error_logger,
            self.log_dir / "errors.log",
            logging.ERROR,
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(
            logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S")
        )
        self.main_logger.addHandler(console_handler)

    def _add_file_handler(
        self, logger: logging.Logger, file_path: Path, level: int
    ) -> None:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    def close(self) -> None:
        """Close and detach every handler (releases rotating file handles)."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    @staticmethod
    def _format(prefix: str, message: str, details: Optional[Dict[str, Any]]) -> str:
        if details:
            return f"{prefix} - {message}: {json.dumps(details, default=str)}"
        return f"{prefix} - {message}"

    def log_operation(
        self, operation: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a completed or started operation.

        Args:
            operation: Name of the operation
            details: Optional operation details dictionary
        """
        self.main_logger.info(
            f"OPERATION - {operation}: {json.dumps(details or {}, default=str)}"
        )

    def log_error(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an error with context and traceback to errors.log.

        Args:
            error: Exception that occurred
            context: Optional context information dictionary
        """
        self.error_logger.error(f"ERROR - {type(error).__name__}: {error}")
        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            self.error_logger.error(f"Context: {context_str}")
        self.error_logger.error(f"Traceback:\n{traceback.format_exc()}")

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log debug information."""
        self.main_logger.debug(self._format("DEBUG", message, details))

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log general information."""
        self.main_logger.info(self._format("INFO", message, details))

    def log_warning(
        self, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log a warning."""
        self.main_logger.warning(self._format("WARNING", message, details))

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log full error details and return a short message for the terminal.

        Args:
            error: Exception to log
            context: Optional context information about where error occurred
            show_traceback: If True, include full traceback in CLI output

        Returns:
            Formatted error message suitable for CLI display

        Examples:
            >>> logger.log_cli_error(NotFoundError("Project not found: abc"))
            '❌ NotFoundError: Project not found: abc'
        """
        self.log_error(error, context or {"source": "cli"})
        message = f"❌ {type(error).__name__}: {error}"
        if show_traceback:
            return f"{message}\n\n{traceback.format_exc()}"
        return message


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Standardized error handling for all CLI commands.

    Logs the error through the logger stored in the click context, prints
    a clean message to stderr and exits.

    Args:
        ctx: Click context object containing logger and verbose flag
        error: Exception that occurred
        operation: Name of the operation that failed (e.g. 'import', 'export_docx')
        additional_context: Optional extra context (project id, file path, etc.)
        exit_code: Exit code for sys.exit() (default: 1)

    Note:
        This function never returns - it always calls sys.exit()
    """
    logger: Optional[KindlingLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    context = {"operation": operation}
    if additional_context:
        context.update(additional_context)

    error_msg = safe_logger(logger).log_cli_error(error, context, show_traceback=verbose)
    click.echo(error_msg, err=True)
    sys.exit(exit_code)


class NullLogger:
    """
    Null Object logger implementing the KindlingLogger interface.

    Lets code call logger methods unconditionally when no log directory
    was configured.
    """

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return f"❌ {type(error).__name__}: {error}"


_null_logger = NullLogger()


def safe_logger(logger: Optional[KindlingLogger]) -> KindlingLogger:
    """
    Return the provided logger or the shared NullLogger if None.

    Use:
        safe_logger(self.logger).log_info("message")

    Args:
        logger: KindlingLogger instance or None

    Returns:
        The provided logger or a NullLogger instance
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]
