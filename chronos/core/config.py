"""
Runtime configuration for the chronology tracker.
All settings are read from the environment at import time.
"""

import os
from pathlib import Path

# Database path configuration
DB_PATH = os.getenv("CHRONOS_DB_PATH", "./data/chronos.db")

# Storage backend for snapshots
STORAGE_BACKEND = os.getenv("CHRONOS_STORAGE", "sqlite")  # sqlite|memory

# Default directory for CSV exports
EXPORT_DIR = os.getenv("CHRONOS_EXPORT_DIR", ".")

# Debug flag (API docs routes, debug log level)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Snapshot keys in the persistence adapter
META_KEY = "chronos_meta"
RECORDS_KEY = "chronos_records"
WARNING_DISMISSED_KEY = "chronos_warning_dismissed"

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def get_storage():
    """Get the configured persistence adapter."""
    if STORAGE_BACKEND == "memory":
        from .storage import InMemoryStorage
        return InMemoryStorage()

    # Default to SQLite for unknown backends
    from .storage import SQLiteStorage
    return SQLiteStorage(DB_PATH)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if STORAGE_BACKEND not in ["sqlite", "memory"]:
        issues.append(f"Invalid CHRONOS_STORAGE: {STORAGE_BACKEND}")

    if STORAGE_BACKEND == "sqlite" and not DB_PATH:
        issues.append("CHRONOS_DB_PATH must be set when CHRONOS_STORAGE=sqlite")

    if EXPORT_DIR and Path(EXPORT_DIR).exists() and not Path(EXPORT_DIR).is_dir():
        issues.append(f"CHRONOS_EXPORT_DIR is not a directory: {EXPORT_DIR}")

    return issues
