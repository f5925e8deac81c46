from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    ensure_database_exists(config)

    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", config.describe())


def upsert_user(config: DBConfig, *, name: str, email: str, password: str, role: Role) -> None:
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(password)
        cur.execute("SELECT user_id FROM users WHERE email=%s", (email.lower(),))
        if cur.fetchone():
            cur.execute(
                "UPDATE users SET name=%s, password_hash=%s, role=%s WHERE email=%s",
                (name, password_hash, role.value, email.lower()),
            )
        else:
            cur.execute(
                "INSERT INTO users (name, email, password_hash, role) VALUES (%s, %s, %s, %s)",
                (name, email.lower(), password_hash, role.value),
            )
        conn.commit()
    finally:
        conn.close()


def ensure_admin_user(config: DBConfig, *, email: str, password: str, name: str = "Administrator") -> None:
    upsert_user(config, name=name, email=email, password=password, role=Role.ADMIN)
    logger.info("Admin account ready: %s", email)


def ensure_demo_users(config: DBConfig) -> None:
    upsert_user(config, name="Admin Demo", email="admin@example.com", password="admin123", role=Role.ADMIN)
    upsert_user(config, name="Jane Employee", email="jane@example.com", password="employee123", role=Role.EMPLOYEE)
    logger.info("Demo accounts ready")


def list_tables(config: DBConfig) -> list[str]:
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
