from __future__ import annotations

from typing import Union

from .enums import Role
from .exceptions import ForbiddenError


def require_role(current_role: Union[Role, str, None], required: Role) -> None:
    """Raise ForbiddenError unless `current_role` is `required`."""

    try:
        role = Role(current_role) if current_role is not None else None
    except ValueError:
        role = None

    if role != required:
        raise ForbiddenError(f"Forbidden: {required.value} access required")


def require_admin(current_role: Union[Role, str, None]) -> None:
    require_role(current_role, Role.ADMIN)


def require_self_or_admin(*, current_user_id: int, current_role: Union[Role, str, None], target_user_id: int) -> None:
    if int(current_user_id) == int(target_user_id):
        return
    try:
        require_admin(current_role)
    except ForbiddenError:
        raise ForbiddenError("Forbidden: you can only update your own account") from None
