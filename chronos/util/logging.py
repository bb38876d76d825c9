"""
Structured logging for chronology operations.
Record mutations, storage writes, and CSV import/export are logged as one-line operations.
"""

import logging
import os
from typing import Any, Dict, Optional


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for store, storage and codec operations."""

    def __init__(self, name: str = "chronos"):
        self.logger = logging.getLogger(name)
        debug = os.getenv("DEBUG", "false").lower() == "true"
        self.logger.setLevel(logging.DEBUG if debug else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.info(message)

    def log_record_operation(self, operation: str, record_id: str, name: Optional[str] = None, status: str = "success"):
        """Log a record mutation. Record names are truncated, notes are never logged."""
        details = {"record_id": record_id}
        if name is not None:
            details["name"] = _truncate(name)

        self.log_operation(f"record.{operation}", status, details)

    def log_storage_operation(self, operation: str, key: str, size: Optional[int] = None, status: str = "success"):
        """Log a persistence adapter call."""
        details = {"key": key}
        if size is not None:
            details["size"] = size

        self.log_operation(f"storage.{operation}", status, details)

    def log_import(self, added: int, malformed: int, duplicates: int, meta_applied: bool, status: str = "success"):
        """Log the outcome of a CSV import batch."""
        details = {
            "added": added,
            "skipped_malformed": malformed,
            "skipped_duplicates": duplicates,
            "meta_applied": meta_applied
        }
        self.log_operation("csv.import", status, details)

    def log_export(self, filename: str, record_count: int, status: str = "success"):
        """Log a CSV export."""
        details = {"filename": filename, "records": record_count}
        self.log_operation("csv.export", status, details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
