"""PostgreSQL-based timer store with SQL injection protection."""

import re
from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from psycopg2 import InterfaceError, OperationalError, sql

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.common.exceptions import StoreConnectionError
from duracron.utils.time import ensure_utc


class PostgreSQLTimerStore(TimerStoreAdapter):
    """
    PostgreSQL-based timer store.

    Design Decisions:
    - Uses psycopg2.sql.Identifier for table names (prevents SQL injection)
    - Many scheduler instances share the tables, isolated by a namespace column
    - Multi-key writes run in one transaction

    Schema:
        {table}(namespace TEXT, key TEXT, value TEXT, PRIMARY KEY (namespace, key))
        {table}_alarm(namespace TEXT PRIMARY KEY, fire_at TIMESTAMPTZ NOT NULL)

    Example:
        >>> import psycopg2
        >>> conn = psycopg2.connect("dbname=app user=app")
        >>> store = PostgreSQLTimerStore(conn, namespace="user-42")
    """

    _TABLE_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]{0,56}$")
    _MAX_TABLE_NAME_LENGTH = 57  # leaves room for the "_alarm" suffix

    def __init__(
        self,
        connection: Any,
        namespace: str = "default",
        table_name: str = "duracron_state",
        auto_create: bool = True,
    ) -> None:
        """
        Initialize PostgreSQL timer store.

        Args:
            connection: psycopg2 connection object
            namespace: Scheduler instance name rows are scoped to
            table_name: Base table name (alphanumeric + underscores only)
            auto_create: Create tables if they do not exist (default: True)

        Raises:
            ValueError: If table_name or namespace is invalid
        """
        self._validate_table_name(table_name)
        if not namespace:
            raise ValueError("Namespace cannot be empty")

        self.conn = connection
        self.namespace = namespace
        self.table_name = table_name
        self.alarm_table_name = f"{table_name}_alarm"

        if auto_create:
            self.ensure_schema()

    def _validate_table_name(self, table_name: str) -> None:
        """
        Validate table name to prevent SQL injection.

        Raises:
            ValueError: If table name is invalid
        """
        if not table_name:
            raise ValueError(
                "Table name cannot be empty\n"
                "Example: PostgreSQLTimerStore(conn, table_name='duracron_state')"
            )

        if len(table_name) > self._MAX_TABLE_NAME_LENGTH:
            raise ValueError(
                f"Table name too long: {len(table_name)} characters\n"
                f"Maximum: {self._MAX_TABLE_NAME_LENGTH} characters\n"
                f"Table name: '{table_name}'"
            )

        if not self._TABLE_NAME_PATTERN.match(table_name):
            raise ValueError(
                f"Invalid table name: '{table_name}'\n"
                f"Must start with letter or underscore\n"
                f"Allowed characters: letters, digits, underscores"
            )

    @contextmanager
    def _transaction(self) -> Generator[Any, None, None]:
        """Run statements in one transaction (commit on success, rollback on error)."""
        try:
            with self.conn:
                with self.conn.cursor() as cursor:
                    yield cursor
        except (OperationalError, InterfaceError) as e:
            raise StoreConnectionError(f"PostgreSQL unavailable: {e}") from e

    def ensure_schema(self) -> None:
        """Create the key-value and alarm tables if missing."""
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("""
                    CREATE TABLE IF NOT EXISTS {} (
                        namespace TEXT NOT NULL,
                        key TEXT NOT NULL,
                        value TEXT NOT NULL,
                        PRIMARY KEY (namespace, key)
                    )
                """).format(sql.Identifier(self.table_name))
            )
            cursor.execute(
                sql.SQL("""
                    CREATE TABLE IF NOT EXISTS {} (
                        namespace TEXT PRIMARY KEY,
                        fire_at TIMESTAMPTZ NOT NULL
                    )
                """).format(sql.Identifier(self.alarm_table_name))
            )

    def get(self, key: str) -> str | None:
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("SELECT value FROM {} WHERE namespace = %s AND key = %s").format(
                    sql.Identifier(self.table_name)
                ),
                (self.namespace, key),
            )
            row = cursor.fetchone()
        return row[0] if row else None

    def put(self, key: str, value: str) -> None:
        self.put_many({key: value})

    def delete(self, key: str) -> bool:
        return self.delete_many([key]) > 0

    def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        keys = list(keys)
        if not keys:
            return {}
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("SELECT key, value FROM {} WHERE namespace = %s AND key = ANY(%s)").format(
                    sql.Identifier(self.table_name)
                ),
                (self.namespace, keys),
            )
            rows = cursor.fetchall()
        return {key: value for key, value in rows}

    def put_many(self, entries: Mapping[str, str]) -> None:
        if not entries:
            return
        query = sql.SQL("""
            INSERT INTO {} (namespace, key, value)
            VALUES (%s, %s, %s)
            ON CONFLICT (namespace, key) DO UPDATE SET value = EXCLUDED.value
        """).format(sql.Identifier(self.table_name))
        with self._transaction() as cursor:
            for key, value in entries.items():
                cursor.execute(query, (self.namespace, key, value))

    def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("DELETE FROM {} WHERE namespace = %s AND key = ANY(%s)").format(
                    sql.Identifier(self.table_name)
                ),
                (self.namespace, keys),
            )
            return cursor.rowcount

    def get_alarm(self) -> datetime | None:
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("SELECT fire_at FROM {} WHERE namespace = %s").format(
                    sql.Identifier(self.alarm_table_name)
                ),
                (self.namespace,),
            )
            row = cursor.fetchone()
        return ensure_utc(row[0]) if row else None

    def set_alarm(self, when: datetime) -> None:
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("""
                    INSERT INTO {} (namespace, fire_at)
                    VALUES (%s, %s)
                    ON CONFLICT (namespace) DO UPDATE SET fire_at = EXCLUDED.fire_at
                """).format(sql.Identifier(self.alarm_table_name)),
                (self.namespace, ensure_utc(when)),
            )

    def delete_alarm(self) -> bool:
        with self._transaction() as cursor:
            cursor.execute(
                sql.SQL("DELETE FROM {} WHERE namespace = %s").format(
                    sql.Identifier(self.alarm_table_name)
                ),
                (self.namespace,),
            )
            return cursor.rowcount > 0
