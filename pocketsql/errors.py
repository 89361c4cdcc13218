"""
pocketsql/errors.py

Centralized exception types for PocketSQL.

This module defines:
- A common base exception for all shim-level errors
- Specialized error types raised by name normalization and the catalog layer

Engine failures are not wrapped: sqlite3.Error propagates as-is so that the
router can report the engine's own message verbatim.
"""

from __future__ import annotations


class PocketSQLError(Exception):
    """
    Base class for all PocketSQL errors.

    Catching this exception allows callers (router/REPL) to handle shim errors
    without accidentally swallowing unrelated system exceptions.
    """


class InvalidNameError(PocketSQLError):
    """
    Raised when a database name is empty, suffix-only, or escapes the
    managed data directory.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__("Invalid database name")


class CatalogError(PocketSQLError):
    """
    Raised when a catalog operation cannot be carried out.

    Examples:
      - DROP DATABASE on a file that does not exist
      - export with nothing open
    """


class NoDatabaseError(CatalogError):
    """Raised when an operation needs an open connection and none is open."""

    def __init__(self, message: str = "No database is open"):
        super().__init__(message)
