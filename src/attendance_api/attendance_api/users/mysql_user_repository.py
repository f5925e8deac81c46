from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User, UserProfile
from .repository import UserRepository

_USER_COLUMNS = "user_id, name, email, password_hash, role, created_at"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role)
                VALUES(%s,%s,%s,%s)
                """,
                (name, email, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def update_user(
        self,
        *,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=COALESCE(%s, name),
                    email=COALESCE(%s, email),
                    password_hash=COALESCE(%s, password_hash),
                    role=COALESCE(%s, role)
                WHERE user_id=%s
                """,
                (name, email, password_hash, role.value if role else None, int(user_id)),
            )
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_profiles(self) -> Sequence[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id, name, email, role, created_at FROM users ORDER BY user_id")
            return [
                UserProfile(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    email=r["email"],
                    role=Role(r["role"]),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
