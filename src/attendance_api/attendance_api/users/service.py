from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import blank_to_none, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    ConflictError,
    DuplicateKeyError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from ..core.policy import require_admin, require_self_or_admin
from .model import Identity, UserProfile
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: UserProfile

    def as_dict(self) -> dict:
        return {"token": self.token, "user": self.user.as_dict()}


class AuthService:
    """Use cases: register, login, verify token."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(self, *, name: str, email: str, password: str, role: Optional[str] = None) -> UserProfile:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        requested = blank_to_none(role)
        if requested is not None:
            try:
                requested_role = Role(requested.lower())
            except ValueError:
                raise ValidationError("Invalid role") from None
            if requested_role == Role.ADMIN:
                raise ValidationError("Admin accounts cannot be created through registration")

        if self._users.get_by_email(email):
            raise ConflictError("User already exists")

        try:
            user_id = self._users.create_user(
                name=name,
                email=email,
                password_hash=generate_password_hash(password),
                role=Role.EMPLOYEE,
            )
        except DuplicateKeyError:
            raise ConflictError("User already exists") from None

        logger.info("Registered user %s (%s)", user_id, email)
        return UserProfile(user_id=user_id, name=name, email=email, role=Role.EMPLOYEE)

    def authenticate(self, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise UnauthenticatedError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except (TypeError, ValueError):
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise UnauthenticatedError("Invalid credentials")

        return LoginResult(token=self._tokens.issue(user), user=user.profile())

    def verify(self, token: Optional[str]) -> Identity:
        return self._tokens.decode(token)


class UserService:
    """Use cases: manage user accounts."""

    def __init__(self, users: UserRepository):
        self._users = users

    def update_user(
        self,
        *,
        current: Identity,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[str] = None,
    ) -> UserProfile:
        require_self_or_admin(current_user_id=current.user_id, current_role=current.role, target_user_id=user_id)

        existing = self._users.get_by_id(int(user_id))
        if not existing:
            raise NotFoundError("User not found")

        name = blank_to_none(name)
        email = blank_to_none(email)
        password = password or None
        new_role: Optional[Role] = None

        if email is not None:
            email = require_email(email)
            other = self._users.get_by_email(email)
            if other and other.user_id != existing.user_id:
                raise ConflictError("Email is already in use")
        if password is not None:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if blank_to_none(role) is not None:
            try:
                new_role = Role(str(role).strip().lower())
            except ValueError:
                raise ValidationError("Invalid role") from None
            if new_role != existing.role and current.role != Role.ADMIN:
                raise ForbiddenError("Forbidden: only admins can change roles")

        try:
            updated = self._users.update_user(
                user_id=existing.user_id,
                name=name,
                email=email,
                password_hash=generate_password_hash(password) if password else None,
                role=new_role,
            )
        except DuplicateKeyError:
            raise ConflictError("Email is already in use") from None

        if not updated:
            raise NotFoundError("User not found")

        logger.info("User %s updated by %s", existing.user_id, current.user_id)
        return updated.profile()

    def list_users(self, *, current_role: Role) -> Sequence[UserProfile]:
        require_admin(current_role)
        return self._users.list_profiles()
