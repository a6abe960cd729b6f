"""Shared fixtures: in-memory record store, settable clock, scratch legacy store."""

from datetime import date

import pytest

from cooloff_tracker.migration import LegacyStore
from cooloff_tracker.tracking import ApplicationDatabase, ApplicationManager


class FakeClock:
    """Callable returning a date the test controls."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def database():
    db = ApplicationDatabase(":memory:")
    yield db
    db.close()


@pytest.fixture
def clock():
    return FakeClock(date(2024, 1, 15))


@pytest.fixture
def manager(database, clock):
    return ApplicationManager(database, page_size=10, clock=clock, cool_off_months=6)


@pytest.fixture
def legacy_store(tmp_path):
    return LegacyStore(tmp_path / "local_storage.json")

