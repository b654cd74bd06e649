"""Shared core type aliases used across statements, results, and ports."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Union

NamedParams = Dict[str, Any]
PositionalParams = List[Any]
QueryParams = Union[NamedParams, PositionalParams, None]

ColumnValueMap = Mapping[str, Any]
ExclusionSet = Iterable[str]
EscapeFunc = Callable[[str], str]

RowKey = Union[int, str]
RowMapping = Dict[RowKey, Any]
Rows = List[RowMapping]
NormalizedResult = Union[RowMapping, Rows]
