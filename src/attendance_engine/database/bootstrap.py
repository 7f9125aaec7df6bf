"""Create the database (if missing) and apply the bundled schema.sql."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Union

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_DB_STATEMENT = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def to_db_config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "attendance_engine")),
    )


def clean_schema_sql(sql: str) -> str:
    """Drop comment lines and any CREATE DATABASE / USE so the target name comes from config."""
    return _LINE_COMMENT.sub("", _DB_STATEMENT.sub("", sql))


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split on ';' outside quoted literals; backslash escapes the next char."""
    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "\\":
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(config: DBConfig) -> None:
    conn = mysql.connector.connect(host=config.host, port=config.port, user=config.user, password=config.password)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Union[str, Path] = SCHEMA_PATH) -> int:
    """Apply schema.sql; returns the number of statements executed.

    Every statement in the schema is idempotent, so this is safe on startup.
    """
    config = to_db_config(db_config)
    ensure_database_exists(config)
    statements = list(iter_sql_statements(clean_schema_sql(Path(schema_path).read_text(encoding="utf-8"))))

    conn = mysql.connector.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        database=config.database,
    )
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    logger.info("Schema applied to %s (%d statements)", config.database, len(statements))
    return len(statements)
