from __future__ import annotations

import importlib

from kindergarten.database.bootstrap import apply_seed_sql, ensure_demo_users
from kindergarten.database.connection import DBConfig
from kindergarten.settings import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config)
    ensure_demo_users(db_config)

    print(f"OK: Seeded database -> {DBConfig.from_dict(db_config).describe()}")


if __name__ == "__main__":
    main()
