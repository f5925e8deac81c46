from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError, StoreError
from .connection import DatabaseConnection


def _translate(error: mysql.connector.Error) -> StoreError:
    if isinstance(error, mysql.connector.IntegrityError) and getattr(error, "errno", None) == errorcode.ER_DUP_ENTRY:
        return DuplicateKeyError(str(error))
    return StoreError(str(error))


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) on a fresh connection.

    Commits when the block succeeds, rolls back otherwise. Driver errors are
    re-raised as StoreError (DuplicateKeyError for unique-key violations).
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise _translate(e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise _translate(e) from e
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
