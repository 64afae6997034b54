from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
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


def in_clause(values: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Build the "%s,%s,..." placeholder list for an IN (...) filter.

    Callers must not pass an empty sequence (MySQL rejects "IN ()").
    """

    if not values:
        raise ValueError("in_clause() needs at least one value")
    return ",".join(["%s"] * len(values)), tuple(values)


def decode_id_list(value: Any) -> tuple[str, ...]:
    """Normalize a JSON array column into a tuple of string ids.

    mysql-connector can return JSON columns as:
    - str / bytes (JSON text)
    - list (already decoded)
    - None
    """

    if value is None:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ()
        value = json.loads(value)
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"Unsupported JSON id list value: {type(value)!r}")
    return tuple(str(v) for v in value)


def encode_id_list(values: Iterable[str]) -> str:
    return json.dumps([str(v) for v in values])
