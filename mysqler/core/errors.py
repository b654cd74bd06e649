"""Exception hierarchy raised by the access layer."""

from __future__ import annotations

from typing import Optional


class MySQLerError(Exception):
    """Base class for every error raised by this package."""


class DatabaseConnectionError(MySQLerError):
    """Raised when no usable connection exists.

    Covers a failed connect, a failed charset switch right after connecting,
    and any use of a database object after `close()`.
    """


class QueryExecutionError(MySQLerError):
    """Raised when the driver rejects a statement.

    Attributes:
        sql: Statement text that failed.
        message: Driver error text, verbatim.
    """

    def __init__(self, message: str, *, sql: Optional[str] = None):
        super().__init__(f"Query error: {message}")
        self.message = message
        self.sql = sql


class ValidationError(MySQLerError, ValueError):
    """Raised for malformed call arguments before any SQL is sent."""
