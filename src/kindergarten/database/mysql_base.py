"""Cursor helpers shared by every MySQL repository.

Each repository call opens its own connection through `db_cursor`; there is
no pooling and nothing is cached between calls.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield `(connection, cursor)`; commit on success, roll back and re-raise otherwise."""

    conn = conn_factory.connect()
    cur = None
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield conn, cur
        conn.commit()
    except Exception as e:
        logger.warning("Query failed, rolling back: %s", e)
        conn.rollback()
        raise
    finally:
        if cur is not None:
            cur.close()
        conn.close()


def fetchone(cur) -> Optional[Row]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Row]:
    return list(cur.fetchall() or ())


def optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def optional_bytes(value: Any) -> Optional[bytes]:
    # BLOB columns come back as bytearray
    return bytes(value) if value is not None else None


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns arrive as `time`, `timedelta` or 'HH:MM[:SS]' depending on the connector build."""

    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds // 60) % 60, seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Giờ không hợp lệ: {value!r}")
        second = int(float(parts[2])) if len(parts) > 2 and parts[2] else 0
        return time(int(parts[0]), int(parts[1]), second)

    raise TypeError(f"Kiểu TIME không hỗ trợ: {type(value)!r}")
