# tests/test_notification.py

import json
from datetime import datetime, timezone

import httpx
import pytest

from classorder.config import Settings
from classorder.schemas.order import Order
from classorder.services.notification import EmailSettings, NotificationDispatcher


class RecordingLog:
    def __init__(self):
        self.lines = []

    async def log_info(self, target="", message="", data=None, is_console=None):
        self.lines.append(("info", message))

    async def log_error(self, target="", message="", data=None, is_console=True):
        self.lines.append(("error", message))

    async def log_debug(self, target="", message="", data=None):
        self.lines.append(("debug", message))

    def errors(self):
        return [m for level, m in self.lines if level == "error"]


def make_settings(**overrides):
    values = {
        "TWILIO_ACCOUNT_SID": "AC123",
        "TWILIO_AUTH_TOKEN": "token",
        "TWILIO_FROM_NUMBER": "+15550000",
        "ADMIN_PHONE_NUMBER": "010-9999-0000",
        "NOTIFY_WEBHOOK_URL": "https://hooks.example.com/order",
        "RESEND_API_KEY": "re_test",
    }
    values.update(overrides)
    return Settings(**values)


def make_order(**overrides):
    values = {
        "id": "order-1",
        "name": "김민지",
        "phone": "010-1234-5678",
        "schedule": "2024-12-20T19:00",
        "agreed": True,
        "people_count": 2,
        "total_amount": 160000,
        "product_type": "wreath",
        "status": "pending",
        "created_at": datetime(2024, 12, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Order(**values)


EMAIL_ON = EmailSettings(enabled=True, admin_email="owner@example.com")


def dispatcher_with(handler, **settings_overrides):
    requests = []

    def recording(request):
        requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    log = RecordingLog()
    return NotificationDispatcher(http, log, make_settings(**settings_overrides)), requests, log


def ok(request):
    return httpx.Response(200, json={"ok": True})


@pytest.mark.anyio
async def test_all_channels_are_attempted():
    dispatcher, requests, log = dispatcher_with(ok)

    await dispatcher.notify(make_order(), EMAIL_ON)

    hosts = sorted(r.url.host for r in requests)
    assert hosts == ["api.resend.com", "api.twilio.com", "api.twilio.com", "hooks.example.com"]
    assert log.errors() == []


@pytest.mark.anyio
async def test_sms_goes_to_customer_and_admin():
    dispatcher, requests, _ = dispatcher_with(ok, NOTIFY_WEBHOOK_URL=None)

    await dispatcher.notify(make_order())

    sms = [r for r in requests if r.url.host == "api.twilio.com"]
    assert [r.url.path for r in sms] == ["/2010-04-01/Accounts/AC123/Messages.json"] * 2
    bodies = [httpx.QueryParams(r.content.decode()) for r in sms]
    assert sorted(b["To"] for b in bodies) == ["010-1234-5678", "010-9999-0000"]
    assert all(r.headers["authorization"].startswith("Basic ") for r in sms)
    customer = next(b for b in bodies if b["To"] == "010-1234-5678")
    assert "12월 20일 (금) 19:00" in customer["Body"]
    assert "010-9999-0000" in customer["Body"]


@pytest.mark.anyio
async def test_webhook_payload():
    dispatcher, requests, _ = dispatcher_with(ok, TWILIO_ACCOUNT_SID=None)

    await dispatcher.notify(make_order())

    assert len(requests) == 1
    payload = json.loads(requests[0].content)
    assert payload["type"] == "order_created"
    assert payload["order"]["id"] == "order-1"
    assert payload["order"]["peopleCount"] == 2
    assert "김민지" in payload["userMessage"]
    assert "010-1234-5678" in payload["adminMessage"]


@pytest.mark.anyio
async def test_failed_channel_does_not_block_others():
    def handler(request):
        if request.url.host == "hooks.example.com":
            return httpx.Response(500, text="boom")
        if request.url.host == "api.twilio.com":
            raise httpx.ConnectError("sms down", request=request)
        return httpx.Response(200, json={"id": "email-1"})

    dispatcher, requests, log = dispatcher_with(handler)

    await dispatcher.notify(make_order(), EMAIL_ON)

    assert len(requests) == 4
    assert len(log.errors()) == 3
    assert any("email" in m for level, m in log.lines if level == "info")


@pytest.mark.anyio
async def test_unconfigured_channels_skip_silently():
    dispatcher, requests, log = dispatcher_with(
        ok,
        TWILIO_ACCOUNT_SID=None,
        NOTIFY_WEBHOOK_URL=None,
        RESEND_API_KEY=None,
    )

    await dispatcher.notify(make_order(), EMAIL_ON)

    assert requests == []
    assert log.errors() == []


@pytest.mark.anyio
async def test_admin_sms_needs_admin_phone():
    dispatcher, requests, _ = dispatcher_with(ok, ADMIN_PHONE_NUMBER=None, NOTIFY_WEBHOOK_URL=None)

    await dispatcher.notify(make_order())

    assert len(requests) == 1
    assert "010-4086-6231" in httpx.QueryParams(requests[0].content.decode())["Body"]


@pytest.mark.anyio
@pytest.mark.parametrize("email_settings", [
    None,
    EmailSettings(enabled=False, admin_email="owner@example.com"),
    EmailSettings(enabled=True, admin_email=None),
])
async def test_email_needs_enabled_settings_and_address(email_settings):
    dispatcher, requests, _ = dispatcher_with(ok, TWILIO_ACCOUNT_SID=None, NOTIFY_WEBHOOK_URL=None)

    await dispatcher.notify(make_order(), email_settings)

    assert requests == []


@pytest.mark.anyio
async def test_email_request_and_escaping():
    dispatcher, requests, _ = dispatcher_with(ok, TWILIO_ACCOUNT_SID=None, NOTIFY_WEBHOOK_URL=None)

    await dispatcher.notify(make_order(name="<b>김민지</b>"), EMAIL_ON)

    assert len(requests) == 1
    request = requests[0]
    assert request.headers["authorization"] == "Bearer re_test"
    body = json.loads(request.content)
    assert body["to"] == ["owner@example.com"]
    assert "12월 20일 (금) 19:00" in body["subject"]
    assert "&lt;b&gt;김민지&lt;/b&gt;" in body["html"]
    assert "리스" in body["html"]
    assert "160,000원" in body["html"]


@pytest.mark.anyio
async def test_email_render_failure_does_not_block_other_channels(monkeypatch):
    dispatcher, requests, log = dispatcher_with(ok)

    def broken_render(order):
        raise RuntimeError("template missing")

    monkeypatch.setattr(dispatcher, "render_email", broken_render)

    await dispatcher.notify(make_order(), EMAIL_ON)

    hosts = sorted(r.url.host for r in requests)
    assert hosts == ["api.twilio.com", "api.twilio.com", "hooks.example.com"]
    assert len(log.errors()) == 1
    assert "email" in log.errors()[0]
