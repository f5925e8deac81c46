from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object (no database access code).
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None

    def profile(self) -> "UserProfile":
        return UserProfile(user_id=self.user_id, name=self.name, email=self.email, role=self.role)


@dataclass(frozen=True)
class UserProfile:
    """Public view of a user (never carries the password hash)."""

    user_id: int
    name: str
    email: str
    role: Optional[Role] = None
    created_at: Optional[datetime] = None

    def as_dict(self, *, include_role: bool = True) -> dict:
        out = {"id": self.user_id, "name": self.name, "email": self.email}
        if include_role and self.role is not None:
            out["role"] = self.role.value
        if self.created_at is not None:
            out["created_at"] = isoformat_or_none(self.created_at)
        return out


@dataclass(frozen=True)
class Identity:
    """Who is calling, as extracted from a verified bearer token."""

    user_id: int
    email: str
    role: Role

    def as_dict(self) -> dict:
        return {"id": self.user_id, "email": self.email, "role": self.role.value}
