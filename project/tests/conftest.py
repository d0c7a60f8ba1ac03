# tests/conftest.py

import os
import tempfile

# окружение до импорта приложения: Settings читается один раз
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="classorder-log-")
os.environ["LOG_PRINT"] = "0"
os.environ["ADMIN_PASSWORD"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from classorder.config import settings
from classorder.main import app

ADMIN_PASSWORD = "test-secret"


class RecordingNotifier:
    """Подменяет NotificationDispatcher в app.state и запоминает вызовы."""

    has_twilio = False

    def __init__(self):
        self.calls = []

    async def notify(self, order, email_settings=None):
        self.calls.append((order, email_settings))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "CAPACITY_POLICY", "active")
    monkeypatch.setattr(settings, "ADMIN_EMAIL", None)

    with TestClient(app) as c:
        c.app.state.notifier = RecordingNotifier()
        yield c


@pytest.fixture
def admin_client(client):
    resp = client.post("/admin/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def notifier(client):
    return client.app.state.notifier


def make_order(client, **overrides):
    body = {
        "name": "김민지",
        "phone": "010-1234-5678",
        "schedule": "2024-12-20T19:00",
        "agreed": True,
    }
    body.update(overrides)
    return client.post("/orders", json=body)


def save_config(client, **overrides):
    body = {
        "schedules": [
            {"time": "A", "capacity": 2},
            {"time": "B", "capacity": 5},
        ],
        "details": "주의사항",
        "bankName": "국민은행",
        "accountNumber": "1234-56-789012",
        "depositor": "변화 x PIRI",
        "price": "80000",
        "wreathPrice": "70000",
    }
    body.update(overrides)
    resp = client.put("/config", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()
