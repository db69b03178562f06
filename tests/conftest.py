import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# app.deps opens the configured database at import time
os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp()) / "lendings.json"))
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")

from app.config import Settings  # noqa: E402
from app.db.repository import LedgerRepository  # noqa: E402
from app.services.lending import LendingService  # noqa: E402

NOW = datetime(2024, 1, 10, 9, 30)


class TickingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def repo(tmp_path) -> LedgerRepository:
    return LedgerRepository(str(tmp_path / "db.json"), clock=TickingClock(NOW))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, db_path="unused.json")


@pytest.fixture
def service(repo, settings) -> LendingService:
    return LendingService(repo, settings)
