from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str, *, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class UnauthenticatedError(DomainError):
    """Raised when credentials or the bearer token are missing or invalid."""


class ForbiddenError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the target of an operation does not exist."""


class ConflictError(DomainError):
    """Raised when an operation collides with existing state.

    `data` carries the conflicting object so callers can react to it.
    """


class StoreError(Exception):
    """Raised when the underlying database fails."""


class DuplicateKeyError(StoreError):
    """Raised when a write violates a uniqueness constraint."""
