from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User, UserProfile


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        """Insert a user; raises DuplicateKeyError when the email is taken."""

        raise NotImplementedError

    def update_user(
        self,
        *,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Optional[User]:
        """Partial update: None keeps the stored value."""

        raise NotImplementedError

    def list_profiles(self) -> Sequence[UserProfile]:
        raise NotImplementedError
