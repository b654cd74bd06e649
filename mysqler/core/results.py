"""Result-set capture and normalization.

A `ResultSet` is what one executed statement leaves behind. `normalize`
turns it into the caller-facing shape:

* no rows: an empty list;
* exactly one row: that row mapping on its own, not wrapped in a list;
* several rows: a list of row mappings in driver order.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from .types import NormalizedResult, RowMapping


class AddressingMode(str, Enum):
    """Key shape of each normalized row."""

    ASSOC = "assoc"
    NUMERIC = "numeric"
    BOTH = "both"

    @classmethod
    def parse(cls, mode: Union["AddressingMode", str, None]) -> "AddressingMode":
        """Resolve `mode`, using `DEFAULT_ADDRESSING_MODE` for anything unknown."""

        if isinstance(mode, AddressingMode):
            return mode
        if isinstance(mode, str):
            try:
                return cls(mode.strip().lower())
            except ValueError:
                pass
        return DEFAULT_ADDRESSING_MODE


DEFAULT_ADDRESSING_MODE = AddressingMode.BOTH


@dataclass(frozen=True)
class ResultSet:
    """Rows and counters captured from one executed statement.

    Attributes:
        columns: Column names from the cursor description, in order.
        rows: Raw driver rows (tuples, lists, or mappings).
        affected_rows: Driver-reported affected row count (`-1` if unknown).
        lastrowid: Auto-increment id reported by the driver, if any.
    """

    columns: Tuple[str, ...] = ()
    rows: Sequence[Any] = field(default_factory=tuple)
    affected_rows: int = -1
    lastrowid: Optional[int] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @classmethod
    def from_cursor(cls, cursor: Any, dialect: Any = None) -> "ResultSet":
        """Drain a DB-API cursor that has just executed a statement."""

        description = getattr(cursor, "description", None)
        columns = tuple(d[0] for d in description) if description else ()
        rows = tuple(cursor.fetchall()) if description else ()
        rowcount = getattr(cursor, "rowcount", -1)
        if dialect is not None:
            lastrowid = dialect.get_lastrowid(cursor)
        else:
            lastrowid = getattr(cursor, "lastrowid", None)
        return cls(
            columns=columns,
            rows=rows,
            affected_rows=rowcount if rowcount is not None else -1,
            lastrowid=lastrowid,
        )


EMPTY_RESULT = ResultSet()


def shape_row(row: Any, columns: Sequence[str], mode: AddressingMode) -> RowMapping:
    """Key one driver row by column name, position, or both."""

    if isinstance(row, Mapping):
        if columns and len(row) == len(columns):
            names = list(columns)
            values = list(row.values())
        else:
            names = list(columns) if columns else list(row.keys())
            values = [row[name] for name in names]
    elif isinstance(row, (tuple, list)):
        if not columns and mode is not AddressingMode.NUMERIC:
            raise TypeError("Cursor has no description; cannot map tuple rows to names.")
        names = list(columns)
        values = list(row)
    else:
        try:
            as_dict = dict(row)
        except (TypeError, ValueError):
            raise TypeError(f"Unsupported row type: {type(row)}") from None
        names = list(columns) if columns else list(as_dict.keys())
        values = [as_dict[name] for name in names]

    if mode is AddressingMode.ASSOC:
        return dict(zip(names, values))
    if mode is AddressingMode.NUMERIC:
        return dict(enumerate(values))

    shaped: RowMapping = {}
    for index, value in enumerate(values):
        shaped[index] = value
        if index < len(names):
            shaped[names[index]] = value
    return shaped


def normalize(
    result: Optional[ResultSet],
    mode: Union[AddressingMode, str, None] = DEFAULT_ADDRESSING_MODE,
) -> NormalizedResult:
    """Shape a result set by its row count.

    A missing result and a result with zero rows both give `[]`.
    """

    if result is None or result.row_count == 0:
        return []

    addressing = AddressingMode.parse(mode)
    rows: List[RowMapping] = [
        shape_row(row, result.columns, addressing) for row in result.rows
    ]
    if len(rows) == 1:
        return rows[0]
    return rows
