"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations

from typing import Any, Optional

from pymysql.converters import escape_string as mysql_escape_string


class Dialect:
    """Base dialect that defines quoting, placeholder and escaping behavior."""

    name: str = "generic"
    paramstyle: str = "named"
    quote_char: str = '"'
    supports_insert_set: bool = False

    def q(self, ident: str) -> str:
        """Quote SQL identifier, doubling embedded quote characters."""

        doubled = ident.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{doubled}{self.quote_char}"

    def placeholder(self, key: str) -> str:
        """Return parameter placeholder for current param style."""

        if self.paramstyle == "named":
            return f":{key}"
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        if self.paramstyle == "pyformat":
            return f"%({key})s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def escape(self, value: str) -> str:
        """Escape a value for use inside a single-quoted SQL literal."""

        return value.replace("'", "''")

    def get_lastrowid(self, cursor: Any) -> Optional[int]:
        """Extract `lastrowid` from DB-API cursor when available."""

        return getattr(cursor, "lastrowid", None)


class SQLiteDialect(Dialect):
    """SQLite dialect (`:name` parameters, column-list inserts)."""

    name = "sqlite"
    paramstyle = "named"
    quote_char = '"'
    supports_insert_set = False


class MySQLDialect(Dialect):
    """MySQL dialect (`%s` positional parameters, `INSERT ... SET`)."""

    name = "mysql"
    paramstyle = "format"
    quote_char = "`"
    supports_insert_set = True

    def escape(self, value: str) -> str:
        return mysql_escape_string(value)
