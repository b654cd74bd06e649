"""DB-API adapter owning the single connection."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

import pymysql

from ...core.conditions import Operand, OrderInput
from ...core.config import ConnectionSettings
from ...core.contracts import ConnectionPort, DialectPort
from ...core.errors import DatabaseConnectionError, QueryExecutionError
from ...core.results import (
    DEFAULT_ADDRESSING_MODE,
    EMPTY_RESULT,
    AddressingMode,
    ResultSet,
    normalize,
)
from ...core.statements import (
    ColumnsInput,
    CompiledStatement,
    LimitInput,
    StatementBuilder,
)
from ...core.types import ColumnValueMap, ExclusionSet, NormalizedResult, QueryParams
from .dialects import MySQLDialect

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper: executes statements and keeps the last result.

    One statement is in flight at a time. Each `execute` replaces the
    previous result, so read it with `fetch()` before running the next
    statement. There is no locking; share an instance across threads only
    behind an external lock.
    """

    def __init__(
        self,
        conn: ConnectionPort,
        dialect: Optional[DialectPort] = None,
        *,
        autocommit: bool = True,
    ):
        """Wrap an open DB-API connection.

        Args:
            conn: DB-API connection object.
            dialect: Concrete SQL dialect instance (MySQL when omitted).
            autocommit: Commit after every statement that returns no rows.
                Leave off when the driver connection already autocommits.
        """

        self.conn: ConnectionPort | None = conn
        self.dialect: DialectPort = dialect or MySQLDialect()
        self.autocommit = autocommit
        self.result: ResultSet = EMPTY_RESULT
        self.last_error: Optional[str] = None
        self._closed = False
        self._statements = StatementBuilder(self.dialect)

    @classmethod
    def connect(
        cls,
        settings: ConnectionSettings,
        *,
        connect: Callable[..., Any] = pymysql.connect,
        dialect: Optional[DialectPort] = None,
    ) -> Database:
        """Open the connection described by `settings` and force its charset.

        Raises:
            DatabaseConnectionError: Driver refused the connection or the
                charset could not be set.
        """

        try:
            conn = connect(**settings.to_connect_kwargs())
        except Exception as exc:
            logger.error("Failed to connect to %s:%s: %s", settings.hostname, settings.port, exc)
            raise DatabaseConnectionError(f"Database Connection Error: {exc}") from exc

        db = cls(conn, dialect or MySQLDialect(), autocommit=False)
        try:
            db.set_charset(settings.charset)
        except DatabaseConnectionError:
            db.close()
            raise
        logger.info("Connected to %s:%s/%s", settings.hostname, settings.port, settings.database)
        return db

    @property
    def statements(self) -> StatementBuilder:
        """Parameterized statement builder for this connection's dialect."""

        return self._statements

    def literal_statements(self) -> StatementBuilder:
        """Statement builder that inlines values through `escape()`."""

        return StatementBuilder(self.dialect, escape=self.escape)

    def _require_open_connection(self) -> ConnectionPort:
        if self._closed or self.conn is None:
            raise DatabaseConnectionError("connection is closed")
        return self.conn

    def set_charset(self, charset: str) -> None:
        """Switch the connection character set.

        Raises:
            DatabaseConnectionError: Driver cannot or did not switch.
        """

        conn = self._require_open_connection()
        setter = getattr(conn, "set_character_set", None) or getattr(conn, "set_charset", None)
        if not callable(setter):
            raise DatabaseConnectionError(
                f"Error setting charset: {type(conn).__name__} cannot change charset"
            )
        try:
            ok = setter(charset)
        except Exception as exc:
            self.last_error = str(exc)
            raise DatabaseConnectionError(f"Error setting charset: {exc}") from exc
        if ok is False:
            raise DatabaseConnectionError(f"Error setting charset: {charset} rejected")

    def escape(self, value: str) -> str:
        """Escape a value with the connection's escaper, else the dialect's."""

        conn = self._require_open_connection()
        escaper = getattr(conn, "escape_string", None)
        if callable(escaper):
            return escaper(value)
        return self.dialect.escape(value)

    def execute(
        self,
        sql: Union[str, CompiledStatement],
        params: QueryParams = None,
    ) -> Database:
        """Execute one statement and keep its result for `fetch()`.

        Raises:
            QueryExecutionError: Driver rejected the statement. The driver
                message is kept on `last_error`.
        """

        if isinstance(sql, CompiledStatement):
            if params is None:
                params = sql.params
            sql = sql.sql

        conn = self._require_open_connection()
        self.result = EMPTY_RESULT
        logger.debug("Executing: %s", sql)
        cur = conn.cursor()
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
            result = ResultSet.from_cursor(cur, self.dialect)
            if self.autocommit and not result.columns:
                conn.commit()
        except Exception as exc:
            self.last_error = str(exc)
            logger.warning("Query failed: %s (%s)", self.last_error, sql)
            raise QueryExecutionError(self.last_error, sql=sql) from exc
        finally:
            close = getattr(cur, "close", None)
            if callable(close):
                close()

        self.last_error = None
        self.result = result
        return self

    def fetch(
        self, mode: Union[AddressingMode, str, None] = DEFAULT_ADDRESSING_MODE
    ) -> NormalizedResult:
        """Return the last result: `[]`, one row mapping, or a list of them."""

        return normalize(self.result, mode)

    def have_results(self) -> bool:
        """Whether the last statement returned at least one row."""

        return self.result.row_count >= 1

    @property
    def row_count(self) -> int:
        return self.result.row_count

    @property
    def affected_rows(self) -> int:
        return self.result.affected_rows

    @property
    def last_insert_id(self) -> Optional[int]:
        return self.result.lastrowid

    def insert(
        self,
        table: str,
        contents: ColumnValueMap,
        excluded: ExclusionSet = (),
    ) -> bool:
        """Insert one row built from `contents`; `True` once executed."""

        self.execute(self.statements.insert(table, contents, excluded))
        return True

    def update(
        self,
        table: str,
        contents: ColumnValueMap,
        searches: ColumnValueMap,
        excluded: ExclusionSet = (),
    ) -> Database:
        """Update rows matching every `searches` pair."""

        return self.execute(self.statements.update(table, contents, searches, excluded))

    def delete(
        self,
        table: str,
        contents: ColumnValueMap,
        limit: LimitInput = "",
        like: bool = False,
    ) -> bool:
        """Delete matching rows; `True` iff at least one row was removed."""

        self.execute(self.statements.delete(table, contents, limit, like))
        return self.affected_rows > 0

    def select(
        self,
        table: str,
        contents: Optional[ColumnValueMap] = None,
        cols: ColumnsInput = "*",
        order: OrderInput = "",
        limit: LimitInput = "",
        like: bool = False,
        operand: Union[Operand, str] = Operand.AND,
    ) -> Database:
        """Build and run a select; read rows with `fetch()`."""

        statement = self.statements.select(table, contents, cols, order, limit, like, operand)
        return self.execute(statement)

    def close(self) -> None:
        """Close the underlying connection. Safe to call more than once."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        self.result = EMPTY_RESULT
        if conn is None:
            return
        close = getattr(conn, "close", None)
        if callable(close):
            close()
        logger.info("Database connection closed.")

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
