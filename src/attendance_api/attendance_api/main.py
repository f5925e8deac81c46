from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import ok, register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_JWT_ALGORITHM, DEFAULT_JWT_EXPIRATION_MINUTES
from .database.bootstrap import apply_schema, ensure_admin_user, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .users.controller import register as register_users
from .users.tokens import TokenService

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        target = DBConfig.from_dict(db_config)
        logger.info("settings=%s db=%s", settings_module, target.describe())

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(target, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(target)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(target)
        admin_email = getattr(settings, "ADMIN_EMAIL", None)
        admin_password = getattr(settings, "ADMIN_PASSWORD", None)
        if admin_email and admin_password:
            ensure_admin_user(target, email=admin_email, password=admin_password)

        tokens = TokenService(
            getattr(settings, "JWT_SECRET", None) or app.secret_key,
            algorithm=getattr(settings, "JWT_ALGORITHM", DEFAULT_JWT_ALGORITHM),
            expiration_minutes=getattr(settings, "JWT_EXPIRATION_MINUTES", DEFAULT_JWT_EXPIRATION_MINUTES),
        )
        container = build_container(db_config=db_config, token_service=tokens)

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok("Service is running", {"status": "ok"})

    return app
