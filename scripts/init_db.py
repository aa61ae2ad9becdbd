from __future__ import annotations

import importlib

from kindergarten.database.bootstrap import initialize_database, list_tables
from kindergarten.database.connection import DBConfig
from kindergarten.settings import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    created = initialize_database(db_config)
    tables = list_tables(db_config)
    print(
        f"OK: {'Applied' if created else 'Already applied'} schema.sql -> "
        f"{DBConfig.from_dict(db_config).describe()} (tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
