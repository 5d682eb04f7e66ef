from __future__ import annotations

import json
import logging
import re
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    return mysql.connector.connect(use_pure=True, **target.connect_kwargs(with_database=with_database))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Yield statements from a schema file.

    ``;`` inside quoted literals does not terminate a statement, and ``--``
    comments outside quotes are dropped.
    """
    buf: list[str] = []
    quote: str | None = None
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]
        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < n:
                buf.append(sql[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            buf.append(ch)
        elif ch == "-" and sql.startswith("--", i):
            newline = sql.find("\n", i)
            i = n if newline == -1 else newline
            continue
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


@contextmanager
def _session(db_config: dict, *, with_database: bool = True, dictionary: bool = False):
    conn = _connect(DBConfig.from_dict(db_config), with_database=with_database)
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield cur
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with _session(db_config, with_database=False) as cur:
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    count = 0
    with _session(db_config) as cur:
        for statement in _iter_sql_statements(sql):
            cur.execute(statement)
            count += 1
    logger.info("schema applied from %s (%d statements)", schema_path, count)


def ensure_admin_employee(db_config: dict, *, email: str, name: str, password: str) -> str:
    """Create or reset a full-access employee; returns its id."""

    email = email.strip().lower()
    with _session(db_config, dictionary=True) as cur:
        cur.execute("SELECT id FROM employees WHERE email=%s", (email,))
        row = cur.fetchone()
        if row:
            employee_id = row["id"]
            cur.execute(
                "UPDATE employees SET name=%s, password_hash=%s, access_level='full', is_active=1 WHERE id=%s",
                (name, generate_password_hash(password), employee_id),
            )
            logger.info("reset full-access employee %s", email)
        else:
            employee_id = str(uuid.uuid4())
            cur.execute(
                """
                INSERT INTO employees (id, email, name, password_hash, role, access_level, access_teams)
                VALUES (%s, %s, %s, %s, 'admin', 'full', %s)
                """,
                (employee_id, email, name, generate_password_hash(password), json.dumps([])),
            )
            logger.info("created full-access employee %s", email)
    return employee_id


def list_tables(db_config: dict) -> list[str]:
    with _session(db_config) as cur:
        cur.execute("SHOW TABLES")
        return [table for (table,) in cur.fetchall()]
