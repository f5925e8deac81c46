from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..container import Container
from .guard import admin_required, current_identity, extract_token, make_token_required


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        body = json_body()
        profile = container.auth_service.register(
            name=body.get("name", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
            role=body.get("role"),
        )
        return ok("User registered successfully", profile.as_dict(), 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        result = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))
        return ok("Login successful", result.as_dict())

    @app.route("/api/auth/verify", methods=["POST"], endpoint="auth_verify")
    def auth_verify():
        identity = container.auth_service.verify(extract_token())
        return ok("Token is valid", identity.as_dict())

    @app.route("/api/auth/users/<int:user_id>", methods=["PUT"], endpoint="auth_update_user")
    @token_required
    def auth_update_user(user_id: int):
        body = json_body()
        profile = container.user_service.update_user(
            current=current_identity(),
            user_id=user_id,
            name=body.get("name"),
            email=body.get("email"),
            password=body.get("password"),
            role=body.get("role"),
        )
        return ok("User updated successfully", profile.as_dict())

    @app.route("/api/auth/users", methods=["GET"], endpoint="auth_list_users")
    @token_required
    @admin_required
    def auth_list_users():
        users = container.user_service.list_users(current_role=current_identity().role)
        return ok("Users retrieved successfully", [u.as_dict() for u in users])
