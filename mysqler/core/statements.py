"""SQL statement builders for INSERT, UPDATE, DELETE, and SELECT.

This module turns a table name plus ordered column/value mappings into SQL
text. It performs no I/O: `Database` executes what is built here.

Two rendering modes share the same clause-assembly rules:

* parameterized (default): values become dialect placeholders and travel in
  `CompiledStatement.params`;
* literal: constructed with an `escape` callable, values are rendered inline
  as `'<escaped>'` and `params` is `None`.

Column names are trusted structural input and are only quoted. Values are
untrusted and are always bound or escaped. A `None` condition value matches
with `IS NULL`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Union

from .conditions import Operand, OrderInput, is_identifier, parse_order
from .contracts import DialectPort
from .errors import ValidationError
from .types import ColumnValueMap, EscapeFunc, ExclusionSet, QueryParams

DEFAULT_EXCLUDED_COLUMNS = frozenset({"MAX_FILE_SIZE"})
"""Columns never written by insert/update, whatever the caller passes.

Upload forms post a `MAX_FILE_SIZE` hidden field alongside the real columns;
it is dropped so form data can be handed over as-is.
"""

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_PLAIN_INT = re.compile(r"^\s*[+-]?\d+\s*$")

ColumnsInput = Union[str, Sequence[str]]
LimitInput = Union[None, int, str]


@dataclass(frozen=True)
class CompiledStatement:
    """Fully assembled SQL text with its bound parameters."""

    sql: str
    params: QueryParams = None

    def __str__(self) -> str:
        return self.sql


class _ParamBinder:
    """Collects bound values and hands out placeholders in dialect style."""

    def __init__(self, dialect: DialectPort) -> None:
        self._dialect = dialect
        self._counter = 0
        self._named = dialect.paramstyle in ("named", "pyformat")
        self._params: Any = {} if self._named else []

    def bind(self, col: str, value: Any) -> str:
        if not self._named:
            self._params.append(value)
            return self._dialect.placeholder(col)

        self._counter += 1
        safe = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in col)
        key = f"{safe}_{self._counter}"
        self._params[key] = value
        return self._dialect.placeholder(key)

    @property
    def params(self) -> QueryParams:
        return self._params if self._params else None


class _LiteralBinder:
    """Renders values inline as escaped, single-quoted literals."""

    def __init__(self, escape: EscapeFunc) -> None:
        self._escape = escape

    def bind(self, col: str, value: Any) -> str:
        if value is None:
            return "NULL"
        return f"'{self._escape(str(value))}'"

    @property
    def params(self) -> QueryParams:
        return None


class StatementBuilder:
    """Pure translation of structured input into SQL statements.

    Args:
        dialect: SQL dialect used for quoting, placeholders and INSERT form.
        escape: When given, values are inlined through this function instead
            of being bound as parameters.
    """

    def __init__(self, dialect: DialectPort, *, escape: Optional[EscapeFunc] = None):
        self.dialect = dialect
        self.escape = escape

    def _binder(self) -> Union[_ParamBinder, _LiteralBinder]:
        if self.escape is not None:
            return _LiteralBinder(self.escape)
        return _ParamBinder(self.dialect)

    def insert(
        self,
        table: str,
        contents: ColumnValueMap,
        excluded: ExclusionSet = (),
    ) -> CompiledStatement:
        """Build `INSERT INTO table SET col = val, ...`.

        Values are written as given (not trimmed). Excluded columns, plus
        `DEFAULT_EXCLUDED_COLUMNS`, are skipped.

        Raises:
            ValidationError: Blank table, non-mapping contents, or nothing
                left to insert after exclusions.
        """

        table_sql = self._table(table)
        items = self._content_items(contents, excluded, "contents")
        if not items:
            raise ValidationError("INSERT requires at least one non-excluded column.")

        binder = self._binder()
        if self.dialect.supports_insert_set:
            assignments = self._assignments(binder, items)
            sql = f"INSERT INTO {table_sql} SET {', '.join(assignments)}"
        else:
            column_sql = ", ".join(self.dialect.q(col) for col, _ in items)
            placeholders = ", ".join(binder.bind(col, value) for col, value in items)
            sql = f"INSERT INTO {table_sql} ({column_sql}) VALUES ({placeholders})"
        return CompiledStatement(sql, binder.params)

    def update(
        self,
        table: str,
        contents: ColumnValueMap,
        searches: ColumnValueMap,
        excluded: ExclusionSet = (),
    ) -> CompiledStatement:
        """Build `UPDATE table SET ... WHERE a = x AND b = y`.

        Search conditions are always joined with `AND`.

        Raises:
            ValidationError: Blank table, non-mapping contents or searches,
                nothing to set after exclusions, or no search conditions.
        """

        table_sql = self._table(table)
        items = self._content_items(contents, excluded, "contents")
        _require_mapping(searches, "searches")
        if not items:
            raise ValidationError("UPDATE requires at least one non-excluded column.")
        if not searches:
            raise ValidationError("UPDATE requires at least one search condition.")

        binder = self._binder()
        assignments = self._assignments(binder, items)
        conditions = [self._equals(binder, col, value) for col, value in searches.items()]
        sql = (
            f"UPDATE {table_sql} SET {', '.join(assignments)} "
            f"WHERE {' AND '.join(conditions)}"
        )
        return CompiledStatement(sql, binder.params)

    def delete(
        self,
        table: str,
        contents: ColumnValueMap,
        limit: LimitInput = "",
        like: bool = False,
    ) -> CompiledStatement:
        """Build `DELETE FROM table WHERE ... [LIMIT n]`.

        Conditions are joined with `AND`. `LIMIT` is only emitted when the
        limit coerces to an integer of at least 1.

        Raises:
            ValidationError: Blank table, or contents not a non-empty mapping.
        """

        table_sql = self._table(table)
        _require_mapping(contents, "contents")
        if not contents:
            raise ValidationError(
                "Invalid or empty conditions provided for delete operation."
            )

        binder = self._binder()
        sql = f"DELETE FROM {table_sql} WHERE "
        sql += " AND ".join(self._conditions(binder, contents, like))

        count = coerce_limit(limit)
        if count >= 1:
            sql += f" LIMIT {count}"
        return CompiledStatement(sql, binder.params)

    def select(
        self,
        table: str,
        contents: Optional[ColumnValueMap] = None,
        cols: ColumnsInput = "*",
        order: OrderInput = "",
        limit: LimitInput = "",
        like: bool = False,
        operand: Union[Operand, str] = Operand.AND,
    ) -> CompiledStatement:
        """Build `SELECT cols FROM table [WHERE ...] [ORDER BY ...] [LIMIT n]`.

        Empty contents omit `WHERE` entirely. `order` only accepts
        `column [ASC|DESC]` items; `operand` only `AND` or `OR`.

        Raises:
            ValidationError: Blank table, non-mapping contents, malformed
                columns, order, operand, or a limit that is not a
                non-negative integer.
        """

        table_sql = self._table(table)
        if contents is not None:
            _require_mapping(contents, "contents")
        joiner = Operand.parse(operand)
        ordering = parse_order(order)
        count = strict_limit(limit)

        binder = self._binder()
        sql = f"SELECT {self._columns(cols)} FROM {table_sql}"
        if contents:
            conditions = self._conditions(binder, contents, like)
            sql += f" WHERE {f' {joiner.value} '.join(conditions)}"
        if ordering:
            sql += f" ORDER BY {', '.join(item.sql() for item in ordering)}"
        if count:
            sql += f" LIMIT {count}"
        return CompiledStatement(sql, binder.params)

    def _table(self, table: str) -> str:
        if not isinstance(table, str) or not table.strip():
            raise ValidationError("Table name is required.")
        return self.dialect.q(table)

    def _content_items(
        self, contents: ColumnValueMap, excluded: ExclusionSet, label: str
    ) -> List[tuple[str, Any]]:
        _require_mapping(contents, label)
        skipped = exclusion_set(excluded)
        return [(col, value) for col, value in contents.items() if col not in skipped]

    def _assignments(self, binder: Any, items: Iterable[tuple[str, Any]]) -> List[str]:
        return [f"{self.dialect.q(col)} = {binder.bind(col, value)}" for col, value in items]

    def _conditions(self, binder: Any, contents: ColumnValueMap, like: bool) -> List[str]:
        conditions = []
        for col, value in contents.items():
            value = _trim(value)
            if like and value is None:
                raise ValidationError(f"LIKE condition on {col!r} needs a value, got None.")
            if like:
                conditions.append(f"{self.dialect.q(col)} LIKE {binder.bind(col, f'%{value}%')}")
            else:
                conditions.append(self._equals(binder, col, value))
        return conditions

    def _equals(self, binder: Any, col: str, value: Any) -> str:
        if value is None:
            return f"{self.dialect.q(col)} IS NULL"
        return f"{self.dialect.q(col)} = {binder.bind(col, value)}"

    def _columns(self, cols: ColumnsInput) -> str:
        names = cols.split(",") if isinstance(cols, str) else list(cols)
        names = [name.strip() for name in names]
        if names == ["*"]:
            return "*"
        if not names:
            raise ValidationError("SELECT requires at least one column.")
        for name in names:
            if not is_identifier(name):
                raise ValidationError(f"Invalid column name: {name!r}.")
        return ", ".join(
            ".".join(self.dialect.q(part) for part in name.split(".")) for name in names
        )


def exclusion_set(excluded: ExclusionSet) -> frozenset[str]:
    """Return caller exclusions unioned with `DEFAULT_EXCLUDED_COLUMNS`."""

    if not excluded:
        return DEFAULT_EXCLUDED_COLUMNS
    if isinstance(excluded, str):
        return DEFAULT_EXCLUDED_COLUMNS | {excluded}
    return DEFAULT_EXCLUDED_COLUMNS | frozenset(excluded)


def coerce_limit(limit: LimitInput) -> int:
    """Coerce a limit to int the lenient way: blank or non-numeric gives 0.

    Leading digits win, so `"10 rows"` coerces to 10.
    """

    if limit is None or isinstance(limit, bool):
        return 0
    if isinstance(limit, int):
        return limit
    match = _LEADING_INT.match(str(limit))
    return int(match.group(1)) if match else 0


def strict_limit(limit: LimitInput) -> int:
    """Parse a select limit: blank gives 0, otherwise a plain non-negative integer.

    Raises:
        ValidationError: Anything else, such as `"abc"`, `"10 rows"` or `-1`.
    """

    if limit is None or (isinstance(limit, str) and not limit.strip()):
        return 0
    if isinstance(limit, bool):
        raise ValidationError(f"LIMIT must be an integer; got {limit!r}.")
    if isinstance(limit, int):
        count = limit
    elif _PLAIN_INT.match(str(limit)):
        count = int(str(limit))
    else:
        raise ValidationError(f"LIMIT must be an integer; got {limit!r}.")
    if count < 0:
        raise ValidationError(f"LIMIT must not be negative; got {limit!r}.")
    return count


def _require_mapping(value: Any, label: str) -> None:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{label} must be a mapping of column to value.")


def _trim(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value
