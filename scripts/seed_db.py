"""Seed demo accounts (admin/admin123, field.demo/staff123) and sample data."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.workforce_tracker.workforce_tracker.database.bootstrap import apply_seed_sql, ensure_demo_users


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    # Accounts first; seed.sql looks employees up by username.
    ensure_demo_users(db_config)
    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    print(f"OK: seeded {db_config.get('user')}@{db_config.get('host')}/{db_config.get('database')}")


if __name__ == "__main__":
    main()
