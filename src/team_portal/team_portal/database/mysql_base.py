from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, UpstreamError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.error("database unreachable: %s", e)
        raise UpstreamError("Database unavailable") from e
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise ConflictError("Duplicate entry") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Iterable[Any]) -> str:
    """``%s,%s,...`` for an IN (...) clause."""
    return ",".join(["%s"] * len(list(values)))


def load_json_list(value: Any) -> list[str]:
    """Normalize a MySQL JSON column holding a list of ids.

    mysql-connector can return JSON as:
    - str / bytes (most versions)
    - already decoded list
    - None
    """

    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    if not isinstance(value, list):
        raise TypeError(f"Unsupported JSON list value: {value!r}")
    return [str(v) for v in value]
