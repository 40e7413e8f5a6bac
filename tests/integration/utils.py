from __future__ import annotations

from alembic import command
from alembic.config import Config


def migrate_database(database_url: str) -> None:
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")
