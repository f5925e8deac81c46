from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_api.attendance_api.database.bootstrap import ensure_admin_user, ensure_demo_users
from src.attendance_api.attendance_api.database.connection import DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    target = DBConfig.from_dict(dict(settings.DB_CONFIG))

    ensure_demo_users(target)
    if getattr(settings, "ADMIN_EMAIL", None) and getattr(settings, "ADMIN_PASSWORD", None):
        ensure_admin_user(target, email=settings.ADMIN_EMAIL, password=settings.ADMIN_PASSWORD)

    logger.info("OK: Seeded database -> %s", target.describe())


if __name__ == "__main__":
    main()
