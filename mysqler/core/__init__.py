"""Public core API for statement building and result normalization."""

from .conditions import Operand, OrderBy, parse_order
from .config import ConnectionSettings
from .errors import (
    DatabaseConnectionError,
    MySQLerError,
    QueryExecutionError,
    ValidationError,
)
from .results import (
    DEFAULT_ADDRESSING_MODE,
    AddressingMode,
    ResultSet,
    normalize,
    shape_row,
)
from .statements import (
    DEFAULT_EXCLUDED_COLUMNS,
    CompiledStatement,
    StatementBuilder,
    coerce_limit,
    exclusion_set,
    strict_limit,
)

__all__ = [
    "AddressingMode",
    "CompiledStatement",
    "ConnectionSettings",
    "DEFAULT_ADDRESSING_MODE",
    "DEFAULT_EXCLUDED_COLUMNS",
    "DatabaseConnectionError",
    "MySQLerError",
    "Operand",
    "OrderBy",
    "QueryExecutionError",
    "ResultSet",
    "StatementBuilder",
    "ValidationError",
    "coerce_limit",
    "exclusion_set",
    "normalize",
    "parse_order",
    "shape_row",
    "strict_limit",
]
