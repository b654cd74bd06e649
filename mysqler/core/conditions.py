"""Ordering, operand, and match-mode primitives for statement building."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

from .errors import ValidationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?$")
_ORDER_ITEM = re.compile(
    r"^\s*(?P<col>[A-Za-z_][A-Za-z0-9_$]*(?:\.[A-Za-z_][A-Za-z0-9_$]*)?)"
    r"(?:\s+(?P<direction>asc|desc))?\s*$",
    re.IGNORECASE,
)


class Operand(str, Enum):
    """Logical operator joining `WHERE` conditions of a select."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, value: Union["Operand", str]) -> "Operand":
        """Resolve a caller-supplied operand, rejecting anything else."""

        if isinstance(value, Operand):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValidationError(f"Operand must be one of AND, OR; got {value!r}.")


@dataclass(frozen=True)
class OrderBy:
    """Represents one ordering expression.

    `desc=None` leaves the direction to the database default and emits no
    keyword at all.
    """

    col: str
    desc: bool | None = None

    def __post_init__(self) -> None:
        if not is_identifier(self.col):
            raise ValidationError(f"Invalid ORDER BY column: {self.col!r}.")

    def sql(self) -> str:
        if self.desc is None:
            return self.col
        return f"{self.col} {'DESC' if self.desc else 'ASC'}"


OrderInput = Union[None, str, OrderBy, Sequence[OrderBy]]


def is_identifier(name: object) -> bool:
    """Return whether `name` is a plain (optionally table-qualified) column name."""

    return isinstance(name, str) and bool(_IDENTIFIER.match(name))


def parse_order(order: OrderInput) -> Tuple[OrderBy, ...]:
    """Normalize an ordering input into `OrderBy` items.

    Strings must be comma-separated `column [ASC|DESC]` items, e.g.
    `"id DESC, name"`. Expressions, functions, and anything else are rejected.
    """

    if not order:
        return ()
    if isinstance(order, OrderBy):
        return (order,)
    if isinstance(order, str):
        items = []
        for chunk in order.split(","):
            match = _ORDER_ITEM.match(chunk)
            if match is None:
                raise ValidationError(f"Invalid ORDER BY expression: {order!r}.")
            direction = match.group("direction")
            desc = None if direction is None else direction.upper() == "DESC"
            items.append(OrderBy(match.group("col"), desc))
        return tuple(items)

    items = tuple(order)
    for item in items:
        if not isinstance(item, OrderBy):
            raise ValidationError("ORDER BY sequence must contain OrderBy items.")
    return items
