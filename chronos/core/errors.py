"""
Exception types raised by the chronology core.
"""


class ChronologyError(Exception):
    """Base exception for chronology operations."""
    pass


class StorageError(ChronologyError):
    """Raised when the persistence adapter cannot read or write a snapshot."""
    pass


class ImportFileError(ChronologyError):
    """Raised when an import file cannot be read."""
    pass
