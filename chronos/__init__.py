"""
Case chronology tracker: record store, query engine and CSV backup codec.
"""

from .core.config import VERSION

__version__ = VERSION
