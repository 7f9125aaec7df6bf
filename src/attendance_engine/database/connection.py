from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

import mysql.connector

from .errors import translate_mysql_error


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Outside a transaction every repository call gets a short-lived connection.
    Inside ``transaction()`` the connection is bound to the current context and
    reused by ``db_cursor`` so several repository calls commit (or roll back)
    together.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._active: ContextVar = ContextVar(f"active_connection_{id(self)}", default=None)

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
            )
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

    def active_connection(self):
        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[object]:
        """Run the block in one database transaction.

        Nested calls join the outer transaction.
        """
        existing = self._active.get()
        if existing is not None:
            yield existing
            return

        conn = self.connect()
        token = self._active.set(conn)
        try:
            conn.start_transaction()
            yield conn
            conn.commit()
        except mysql.connector.Error as e:
            conn.rollback()
            raise translate_mysql_error(e) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            self._active.reset(token)
            conn.close()
