from __future__ import annotations

import sqlite3
import unittest

from mysqler.core.config import ConnectionSettings
from mysqler.core.errors import (
    DatabaseConnectionError,
    QueryExecutionError,
    ValidationError,
)
from mysqler.core.statements import CompiledStatement
from mysqler.ports.db_api.database import Database
from mysqler.ports.db_api.dialects import MySQLDialect, SQLiteDialect


class _FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self.closed = False

    def execute(self, sql, params=None):  # noqa: ANN001,ANN201
        self._conn.executed.append((sql, params))
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        self.rowcount = self._conn.next_rowcount
        return self.rowcount

    def fetchall(self):
        return []

    def close(self) -> None:
        self.closed = True
        self._conn.closed_cursors += 1


class _FakeMySQLConn:
    def __init__(self, *, charset_error: Exception | None = None):
        self.executed: list = []
        self.fail_with: Exception | None = None
        self.next_rowcount = 0
        self.charsets: list[str] = []
        self.charset_error = charset_error
        self.commit_calls = 0
        self.close_calls = 0
        self.closed_cursors = 0

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self)

    def set_character_set(self, charset: str) -> None:
        if self.charset_error is not None:
            raise self.charset_error
        self.charsets.append(charset)

    def escape_string(self, value: str) -> str:
        return value.replace("'", "\\'")

    def commit(self) -> None:
        self.commit_calls += 1

    def close(self) -> None:
        self.close_calls += 1


class _LegacyCharsetConn(_FakeMySQLConn):
    set_character_set = None  # type: ignore[assignment]

    def set_charset(self, charset: str) -> bool:
        self.charsets.append(charset)
        return False


class _NoCharsetConn:
    def close(self) -> None:
        pass


SETTINGS = ConnectionSettings(
    hostname="db.local", username="app", password="secret", database="shop"
)


class ConnectTests(unittest.TestCase):
    def test_connect_passes_settings_and_forces_charset(self) -> None:
        calls = []
        conn = _FakeMySQLConn()

        def connect(**kwargs):
            calls.append(kwargs)
            return conn

        db = Database.connect(SETTINGS, connect=connect)

        self.assertEqual(calls[0]["host"], "db.local")
        self.assertEqual(calls[0]["user"], "app")
        self.assertEqual(calls[0]["password"], "secret")
        self.assertEqual(calls[0]["database"], "shop")
        self.assertEqual(calls[0]["connect_timeout"], 10)
        self.assertEqual(conn.charsets, ["utf8mb4"])
        self.assertIsInstance(db.dialect, MySQLDialect)
        self.assertFalse(db.autocommit)
        db.close()

    def test_connect_failure_is_fatal(self) -> None:
        def connect(**kwargs):
            raise OSError("Can't connect to MySQL server")

        with self.assertRaises(DatabaseConnectionError) as ctx:
            Database.connect(SETTINGS, connect=connect)
        self.assertIn("Can't connect", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, OSError)

    def test_charset_failure_closes_and_raises(self) -> None:
        conn = _FakeMySQLConn(charset_error=RuntimeError("Unknown character set"))

        with self.assertRaises(DatabaseConnectionError):
            Database.connect(SETTINGS, connect=lambda **kwargs: conn)
        self.assertEqual(conn.close_calls, 1)

    def test_charset_rejected_by_legacy_setter(self) -> None:
        db = Database(_LegacyCharsetConn())
        with self.assertRaises(DatabaseConnectionError):
            db.set_charset("latin1")

    def test_charset_unsupported_connection(self) -> None:
        db = Database(_NoCharsetConn())
        with self.assertRaises(DatabaseConnectionError):
            db.set_charset("utf8mb4")


class FakeConnectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = _FakeMySQLConn()
        self.db = Database(self.conn, MySQLDialect())

    def test_execute_returns_self_and_commits_writes(self) -> None:
        self.conn.next_rowcount = 1
        returned = self.db.execute("UPDATE `t` SET `a` = %s", ["x"])

        self.assertIs(returned, self.db)
        self.assertEqual(self.conn.executed, [("UPDATE `t` SET `a` = %s", ["x"])])
        self.assertEqual(self.conn.commit_calls, 1)
        self.assertEqual(self.conn.closed_cursors, 1)
        self.assertEqual(self.db.affected_rows, 1)
        self.assertFalse(self.db.have_results())

    def test_execute_without_params_passes_sql_only(self) -> None:
        self.db.execute("SELECT 1")
        self.assertEqual(self.conn.executed, [("SELECT 1", None)])

    def test_execute_compiled_statement_uses_its_params(self) -> None:
        self.db.execute(CompiledStatement("DELETE FROM `t` WHERE `id` = %s", ["1"]))
        self.assertEqual(self.conn.executed, [("DELETE FROM `t` WHERE `id` = %s", ["1"])])

    def test_execution_error_keeps_driver_message(self) -> None:
        self.conn.fail_with = RuntimeError("You have an error in your SQL syntax")

        with self.assertRaises(QueryExecutionError) as ctx:
            self.db.execute("SELEC 1")

        self.assertEqual(ctx.exception.message, "You have an error in your SQL syntax")
        self.assertEqual(ctx.exception.sql, "SELEC 1")
        self.assertEqual(self.db.last_error, "You have an error in your SQL syntax")
        self.assertEqual(self.conn.closed_cursors, 1)
        self.assertEqual(self.db.fetch(), [])

    def test_execution_error_is_not_retried(self) -> None:
        self.conn.fail_with = RuntimeError("Lost connection")
        with self.assertRaises(QueryExecutionError):
            self.db.delete("t", {"id": "1"})
        self.assertEqual(len(self.conn.executed), 1)

    def test_delete_reports_affected_rows(self) -> None:
        self.conn.next_rowcount = 2
        self.assertTrue(self.db.delete("users", {"id": "5"}, "", False))
        self.assertEqual(self.conn.executed[-1], ("DELETE FROM `users` WHERE `id` = %s", ["5"]))

        self.conn.next_rowcount = 0
        self.assertFalse(self.db.delete("users", {"id": "6"}))

    def test_delete_validation_never_touches_connection(self) -> None:
        with self.assertRaises(ValidationError):
            self.db.delete("users", {})
        self.assertEqual(self.conn.executed, [])

    def test_escape_uses_connection_escaper(self) -> None:
        self.assertEqual(self.db.escape("O'Brien"), "O\\'Brien")
        statement = self.db.literal_statements().insert("users", {"name": "O'Brien"})
        self.assertEqual(statement.sql, "INSERT INTO `users` SET `name` = 'O\\'Brien'")

    def test_close_is_idempotent_and_blocks_use(self) -> None:
        self.db.close()
        self.db.close()

        self.assertEqual(self.conn.close_calls, 1)
        with self.assertRaises(DatabaseConnectionError):
            self.db.execute("SELECT 1")

    def test_context_manager_closes(self) -> None:
        with Database(self.conn) as db:
            self.assertIsInstance(db.dialect, MySQLDialect)
        self.assertEqual(self.conn.close_calls, 1)


class SQLiteDatabaseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self.db = Database(self.conn, SQLiteDialect())
        self.db.execute('CREATE TABLE "users" ("id" INTEGER PRIMARY KEY, "name" TEXT, "age" TEXT)')

    def tearDown(self) -> None:
        self.db.close()

    def _seed(self) -> None:
        for name, age in (("ann", "30"), ("bob", "41"), ("O'Brien", "25")):
            self.db.insert("users", {"name": name, "age": age, "MAX_FILE_SIZE": "100"})

    def test_insert_and_select_roundtrip(self) -> None:
        self.assertTrue(self.db.insert("users", {"name": "O'Brien", "age": "30"}))
        self.assertEqual(self.db.last_insert_id, 1)

        row = self.db.select("users", {"name": "O'Brien"}).fetch("assoc")
        self.assertEqual(row, {"id": 1, "name": "O'Brien", "age": "30"})

    def test_fetch_shapes_by_row_count(self) -> None:
        self._seed()

        self.assertEqual(self.db.select("users", {"name": "nobody"}).fetch(), [])
        self.assertFalse(self.db.have_results())

        single = self.db.select("users", {"name": "ann"}, cols="id, name").fetch("numeric")
        self.assertEqual(single, {0: 1, 1: "ann"})
        self.assertTrue(self.db.have_results())

        rows = self.db.select("users", order="id DESC").fetch("assoc")
        self.assertEqual([row["name"] for row in rows], ["O'Brien", "bob", "ann"])
        self.assertEqual(self.db.row_count, 3)

    def test_select_like_or_and_limit(self) -> None:
        self._seed()

        rows = self.db.select(
            "users", {"name": "o", "age": "3"}, order="id", like=True, operand="OR"
        ).fetch("assoc")
        self.assertEqual([row["name"] for row in rows], ["ann", "bob", "O'Brien"])

        limited = self.db.select("users", order="id", limit="2").fetch("assoc")
        self.assertEqual(len(limited), 2)

    def test_update_binds_content_values(self) -> None:
        self._seed()

        self.db.update("users", {"name": "x' OR '1'='1"}, {"name": "ann"})
        self.assertEqual(self.db.affected_rows, 1)

        names = [row["name"] for row in self.db.select("users", order="id").fetch("assoc")]
        self.assertEqual(names, ["x' OR '1'='1", "bob", "O'Brien"])

    def test_delete_with_limit_and_like(self) -> None:
        self._seed()

        self.assertTrue(self.db.delete("users", {"name": "b"}, like=True))
        self.assertEqual(self.db.select("users").row_count, 1)
        self.assertFalse(self.db.delete("users", {"name": "bob"}))

    def test_literal_statements_execute_safely(self) -> None:
        literal = self.db.literal_statements()
        self.db.execute(literal.insert("users", {"name": "O'Brien", "age": "1"}))

        row = self.db.execute(literal.select("users", {"name": "O'Brien"})).fetch("assoc")
        self.assertEqual(row["name"], "O'Brien")

    def test_new_query_replaces_previous_result(self) -> None:
        self._seed()
        self.db.select("users")
        self.assertEqual(self.db.row_count, 3)

        self.db.delete("users", {"name": "ann"})
        self.assertEqual(self.db.fetch(), [])

    def test_select_rejects_non_integer_limit_before_executing(self) -> None:
        self._seed()
        for limit in ("abc", "10 rows"):
            with self.subTest(limit=limit):
                with self.assertRaises(ValidationError):
                    self.db.select("users", limit=limit)
        self.assertEqual(self.db.row_count, 0)

    def test_driver_error_surfaces_as_query_error(self) -> None:
        with self.assertRaises(QueryExecutionError) as ctx:
            self.db.select("missing_table")
        self.assertIn("no such table", ctx.exception.message)
        self.assertIn("no such table", self.db.last_error or "")


if __name__ == "__main__":
    unittest.main()
