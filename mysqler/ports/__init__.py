"""Public port exports for concrete adapter implementations."""

from .db_api import Database, Dialect, MySQLDialect, SQLiteDialect

__all__ = [
    "Database",
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
]
