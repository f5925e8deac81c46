from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.policy import require_admin
from .model import Identity
from .service import AuthService


def extract_token() -> Optional[str]:
    """Bearer token from the Authorization header, JSON body or query string."""

    header = request.headers.get("Authorization", "")
    if header:
        parts = header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip() or None

    body = request.get_json(silent=True)
    if isinstance(body, dict) and body.get("token"):
        return str(body["token"])

    return request.args.get("token") or None


def make_token_required(auth: AuthService):
    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.identity = auth.verify(extract_token())
            return view(*args, **kwargs)

        return wrapper

    return token_required


def current_identity() -> Identity:
    return g.identity


def admin_required(view):
    """Must be stacked under token_required."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        require_admin(current_identity().role)
        return view(*args, **kwargs)

    return wrapper
