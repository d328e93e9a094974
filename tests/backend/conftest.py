"""Shared fixtures: a fresh store per test in a temporary directory."""

import pytest

from wxcache.services.notifications import ChangeNotifier
from wxcache.services.store import WeatherStore
from wxcache.services.validation import build_north_pole_location


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "weather.db"


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def store(db_path, notifier):
    with WeatherStore(db_path, notifier=notifier) as s:
        yield s


@pytest.fixture
def north_pole_id(store):
    return store.insert_location(build_north_pole_location())
