from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol

from ..core.exceptions import NotFoundError
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchone


class UserLock(Protocol):
    """Serializes state transitions for one user across processes."""

    def hold(self, user_id: int):
        raise NotImplementedError


class MySQLUserLock(UserLock):
    """Row lock on the employee row for the length of one transaction.

    Locking the employee row (rather than the attendance row) also covers the
    "no record yet" case, so two concurrent punch-ins cannot both insert.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        with self._conn_factory.transaction():
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT user_id FROM employees WHERE user_id=%s FOR UPDATE",
                    (int(user_id),),
                )
                row = fetchone(cur)
            if not row:
                raise NotFoundError("Employee not found")
            yield
