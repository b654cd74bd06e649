"""Core port contracts used by statement building and the database adapter."""

from __future__ import annotations

from typing import Any, Optional, Protocol


class DialectPort(Protocol):
    """Dialect behavior required by statement compilation."""

    paramstyle: str
    supports_insert_set: bool

    def q(self, ident: str) -> str: ...

    def placeholder(self, key: str) -> str: ...

    def escape(self, value: str) -> str: ...

    def get_lastrowid(self, cursor: Any) -> Optional[int]: ...


class ConnectionPort(Protocol):
    """Subset of a DB-API 2.0 connection consumed by `Database`."""

    def cursor(self) -> Any: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...
