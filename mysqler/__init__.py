"""Single-connection MySQL access layer with CRUD statement builders."""

from .core import (
    DEFAULT_ADDRESSING_MODE,
    DEFAULT_EXCLUDED_COLUMNS,
    AddressingMode,
    CompiledStatement,
    ConnectionSettings,
    DatabaseConnectionError,
    MySQLerError,
    Operand,
    OrderBy,
    QueryExecutionError,
    ResultSet,
    StatementBuilder,
    ValidationError,
    normalize,
)
from .ports import Database, Dialect, MySQLDialect, SQLiteDialect

__all__ = [
    "AddressingMode",
    "CompiledStatement",
    "ConnectionSettings",
    "DEFAULT_ADDRESSING_MODE",
    "DEFAULT_EXCLUDED_COLUMNS",
    "Database",
    "DatabaseConnectionError",
    "Dialect",
    "MySQLDialect",
    "MySQLerError",
    "Operand",
    "OrderBy",
    "QueryExecutionError",
    "ResultSet",
    "SQLiteDialect",
    "StatementBuilder",
    "ValidationError",
    "normalize",
]
