from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_api.attendance_api.database.bootstrap import apply_schema, list_tables
from src.attendance_api.attendance_api.database.connection import DBConfig

logger = logging.getLogger("init_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    target = DBConfig.from_dict(dict(settings.DB_CONFIG))

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(target, schema_path=schema_path)
    tables = list_tables(target)
    logger.info("OK: Applied schema.sql -> %s (tables=%d)", target.describe(), len(tables))


if __name__ == "__main__":
    main()
