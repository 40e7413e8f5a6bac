from __future__ import annotations

from collections.abc import Iterator

import pytest

from telemetry_api.core.settings import get_settings
from telemetry_api.db.models import Base
from telemetry_api.db.session import get_engine, reset_engines


@pytest.fixture
def database(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Point the service at a fresh SQLite file built from the ORM metadata."""
    reset_engines()
    database_url = f"sqlite:///{tmp_path / 'telemetry.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    get_settings.cache_clear()
    Base.metadata.create_all(get_engine())
    yield database_url
    reset_engines()
    get_settings.cache_clear()
