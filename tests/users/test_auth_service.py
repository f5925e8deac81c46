from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.security import check_password_hash

from src.attendance_api.attendance_api.core.enums import Role
from src.attendance_api.attendance_api.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from src.attendance_api.attendance_api.users.model import Identity
from src.attendance_api.attendance_api.users.service import AuthService, UserService
from src.attendance_api.attendance_api.users.tokens import TokenService


@pytest.fixture
def auth(users_repo, token_service) -> AuthService:
    return AuthService(users_repo, token_service)


@pytest.fixture
def user_service(users_repo) -> UserService:
    return UserService(users_repo)


def _identity(user) -> Identity:
    return Identity(user_id=user.user_id, email=user.email, role=user.role)


def test_register_creates_employee(auth, users_repo):
    profile = auth.register(name=" Carol ", email="Carol@Example.com", password="secret1")

    assert profile.name == "Carol"
    assert profile.email == "carol@example.com"
    assert profile.role == Role.EMPLOYEE
    stored = users_repo.get_by_email("carol@example.com")
    assert stored.password_hash != "secret1"
    assert check_password_hash(stored.password_hash, "secret1")


def test_register_duplicate_email(auth, alice):
    with pytest.raises(ConflictError):
        auth.register(name="Other", email="alice@example.com", password="secret1")


def test_register_rejects_admin_role(auth):
    with pytest.raises(ValidationError):
        auth.register(name="Eve", email="eve@example.com", password="secret1", role="admin")


@pytest.mark.parametrize(
    "name,email,password",
    [
        ("", "x@example.com", "secret1"),
        ("X", "not-an-email", "secret1"),
        ("X", "x@example.com", "short"),
    ],
)
def test_register_validation(auth, name, email, password):
    with pytest.raises(ValidationError):
        auth.register(name=name, email=email, password=password)


def test_login_returns_token_and_profile(auth, admin):
    result = auth.authenticate("Admin@Example.com", "admin123")

    assert result.user.user_id == admin.user_id
    assert result.as_dict()["user"]["role"] == "admin"
    identity = auth.verify(result.token)
    assert identity == Identity(user_id=admin.user_id, email="admin@example.com", role=Role.ADMIN)


def test_login_wrong_password(auth, alice):
    with pytest.raises(UnauthenticatedError):
        auth.authenticate("alice@example.com", "wrong-password")


def test_login_unknown_email(auth):
    with pytest.raises(UnauthenticatedError):
        auth.authenticate("nobody@example.com", "whatever")


def test_verify_rejects_missing_and_tampered_tokens(auth, alice):
    with pytest.raises(UnauthenticatedError):
        auth.verify(None)

    token = auth.authenticate("alice@example.com", "secret123").token
    with pytest.raises(UnauthenticatedError):
        auth.verify(token + "x")


def test_token_signed_with_other_secret_is_rejected(alice, token_service):
    foreign = TokenService("another-secret").issue(alice)
    with pytest.raises(UnauthenticatedError):
        token_service.decode(foreign)


def test_expired_token(alice, token_service):
    token = token_service.issue(alice, now=datetime.now(timezone.utc) - timedelta(minutes=10))
    with pytest.raises(UnauthenticatedError) as exc:
        token_service.decode(token)
    assert "expired" in exc.value.message.lower()


def test_token_service_requires_secret():
    with pytest.raises(ValueError):
        TokenService("")


def test_user_updates_own_name_and_password(user_service, users_repo, alice):
    profile = user_service.update_user(current=_identity(alice), user_id=alice.user_id, name="Alice B", password="newpass1")

    assert profile.name == "Alice B"
    assert check_password_hash(users_repo.get_by_id(alice.user_id).password_hash, "newpass1")


def test_user_cannot_update_someone_else(user_service, alice, admin):
    with pytest.raises(ForbiddenError):
        user_service.update_user(current=_identity(alice), user_id=admin.user_id, name="Hacked")


def test_user_cannot_promote_self(user_service, alice):
    with pytest.raises(ForbiddenError):
        user_service.update_user(current=_identity(alice), user_id=alice.user_id, role="admin")


def test_admin_can_change_role(user_service, alice, admin):
    profile = user_service.update_user(current=_identity(admin), user_id=alice.user_id, role="admin")
    assert profile.role == Role.ADMIN


def test_update_email_taken(user_service, alice, admin):
    with pytest.raises(ConflictError):
        user_service.update_user(current=_identity(alice), user_id=alice.user_id, email="admin@example.com")


def test_update_unknown_user(user_service, admin):
    with pytest.raises(NotFoundError):
        user_service.update_user(current=_identity(admin), user_id=999, name="Ghost")


def test_list_users_is_admin_only(user_service, alice, admin):
    with pytest.raises(ForbiddenError):
        user_service.list_users(current_role=Role.EMPLOYEE)

    emails = [p.email for p in user_service.list_users(current_role=Role.ADMIN)]
    assert emails == ["alice@example.com", "admin@example.com"]
