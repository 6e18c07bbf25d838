import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fake_api import BASE_URL, FakeClock, FakeTimeServer
from timeclock.core.config import AppSettings
from timeclock.storage.backends import MemoryStorage


@pytest.fixture()
def server():
    return FakeTimeServer()


@pytest.fixture()
def transport(server):
    return httpx.ASGITransport(app=server.app)


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def app_settings(tmp_path):
    return AppSettings(
        _env_file=None,
        APP_ENV="test",
        API_URL=BASE_URL,
        STORAGE_BACKEND="memory",
        DATA_DIR=tmp_path,
        TZ="UTC",
        OFFLINE_LOGIN_ENABLED=False,
    )
