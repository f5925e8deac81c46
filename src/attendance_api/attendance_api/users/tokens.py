from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import DEFAULT_JWT_ALGORITHM, DEFAULT_JWT_EXPIRATION_MINUTES
from ..core.enums import Role
from ..core.exceptions import UnauthenticatedError
from .model import Identity, User


class TokenService:
    """Issue and verify signed bearer tokens (JWT)."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = DEFAULT_JWT_ALGORITHM,
        expiration_minutes: int = DEFAULT_JWT_EXPIRATION_MINUTES,
    ):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=int(expiration_minutes))

    def issue(self, user: User, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.user_id),
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: Optional[str]) -> Identity:
        if not token:
            raise UnauthenticatedError("Unauthorized: No token provided")

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("Unauthorized: Token expired") from None
        except jwt.InvalidTokenError:
            raise UnauthenticatedError("Unauthorized: Invalid token") from None

        try:
            return Identity(user_id=int(payload["sub"]), email=str(payload.get("email", "")), role=Role(payload["role"]))
        except (KeyError, TypeError, ValueError):
            raise UnauthenticatedError("Unauthorized: Invalid token") from None
