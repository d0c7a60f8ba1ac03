# tests/test_admin.py

import pytest

from conftest import ADMIN_PASSWORD, make_order
from classorder.utils.security import COOKIE_NAME, admin_token

ADMIN_ENDPOINTS = [
    ("get", "/admin/orders", None),
    ("patch", "/admin/orders/some-id", {"status": "confirmed"}),
    ("delete", "/admin/orders/some-id", None),
    ("put", "/config", {"schedules": ["A"]}),
    ("get", "/admin/config", None),
]


def call(client, method, path, body, headers=None):
    if body is None:
        return client.request(method.upper(), path, headers=headers)
    return client.request(method.upper(), path, json=body, headers=headers)


@pytest.mark.parametrize("method,path,body", ADMIN_ENDPOINTS)
def test_admin_endpoints_reject_missing_cookie(client, method, path, body):
    assert call(client, method, path, body).status_code == 401


@pytest.mark.parametrize("method,path,body", ADMIN_ENDPOINTS)
def test_admin_endpoints_reject_forged_cookie(client, method, path, body):
    forged = {"Cookie": f"{COOKIE_NAME}={'0' * 64}"}

    assert call(client, method, path, body, headers=forged).status_code == 401


def test_login_with_wrong_password(client):
    resp = client.post("/admin/login", json={"password": "nope"})

    assert resp.status_code == 401
    assert COOKIE_NAME not in resp.cookies


def test_login_without_password(client):
    assert client.post("/admin/login", json={}).status_code == 401


def test_login_disabled_when_secret_unset(client, monkeypatch):
    from classorder.config import settings

    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")

    assert client.post("/admin/login", json={"password": ""}).status_code == 401
    assert client.post("/admin/login", json={"password": ADMIN_PASSWORD}).status_code == 401


def test_login_sets_http_only_cookie(client):
    resp = client.post("/admin/login", json={"password": ADMIN_PASSWORD})

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.cookies[COOKIE_NAME] == admin_token(ADMIN_PASSWORD)
    header = resp.headers["set-cookie"].lower()
    assert "httponly" in header
    assert "samesite=lax" in header
    assert "max-age=43200" in header


@pytest.mark.parametrize("method,path,body", ADMIN_ENDPOINTS)
def test_same_cookie_authorizes_every_admin_endpoint(admin_client, method, path, body):
    assert call(admin_client, method, path, body).status_code != 401


def test_logout_clears_cookie(admin_client):
    resp = admin_client.post("/admin/logout")

    assert resp.status_code == 200
    assert admin_client.get("/admin/orders").status_code == 401


def test_list_orders_newest_first(admin_client):
    ids = [make_order(admin_client, name=f"고객{i}").json()["order"]["id"] for i in range(3)]

    orders = admin_client.get("/admin/orders").json()["orders"]

    assert [o["id"] for o in orders] == list(reversed(ids))


def test_list_orders_filters(admin_client):
    first = make_order(admin_client, schedule="A").json()["order"]
    make_order(admin_client, schedule="B")
    admin_client.patch(f"/admin/orders/{first['id']}", json={"status": "confirmed"})

    by_status = admin_client.get("/admin/orders", params={"status": "confirmed"}).json()["orders"]
    by_schedule = admin_client.get("/admin/orders", params={"schedule": "B"}).json()["orders"]

    assert [o["id"] for o in by_status] == [first["id"]]
    assert [o["schedule"] for o in by_schedule] == ["B"]


def test_list_orders_summary(admin_client):
    make_order(admin_client, schedule="A", peopleCount=2)
    make_order(admin_client, schedule="A")
    cancelled = make_order(admin_client, schedule="B").json()["order"]
    admin_client.patch(f"/admin/orders/{cancelled['id']}", json={"status": "cancelled"})

    summary = admin_client.get("/admin/orders").json()["summary"]

    assert summary["total"] == 2
    assert summary["people"] == 3
    assert summary["statusCounts"] == {"pending": 2, "cancelled": 1}
    assert summary["scheduleCounts"] == {"A": 2}


@pytest.mark.parametrize("status", ["confirmed", "cancelled", "pending"])
def test_update_status_any_transition(admin_client, status):
    order = make_order(admin_client).json()["order"]
    admin_client.patch(f"/admin/orders/{order['id']}", json={"status": "cancelled"})

    resp = admin_client.patch(f"/admin/orders/{order['id']}", json={"status": status})

    assert resp.status_code == 200
    assert resp.json()["order"]["status"] == status


@pytest.mark.parametrize("body", [{"status": "shipped"}, {"status": ""}, {}])
def test_update_status_rejects_unknown_value(admin_client, body):
    order = make_order(admin_client).json()["order"]

    resp = admin_client.patch(f"/admin/orders/{order['id']}", json=body)

    assert resp.status_code == 400
    stored = admin_client.get("/admin/orders").json()["orders"][0]
    assert stored["status"] == "pending"


def test_update_status_unknown_order(admin_client):
    resp = admin_client.patch("/admin/orders/does-not-exist", json={"status": "confirmed"})

    assert resp.status_code == 404


def test_delete_order(admin_client):
    order = make_order(admin_client).json()["order"]

    resp = admin_client.delete(f"/admin/orders/{order['id']}")

    assert resp.status_code == 200
    assert admin_client.get("/admin/orders").json()["orders"] == []


def test_delete_unknown_order_leaves_table_unchanged(admin_client):
    make_order(admin_client)
    before = admin_client.get("/admin/orders").json()["orders"]

    resp = admin_client.delete("/admin/orders/does-not-exist")

    assert resp.status_code == 404
    assert admin_client.get("/admin/orders").json()["orders"] == before


def test_delete_blank_id(admin_client):
    assert admin_client.delete("/admin/orders/%20").status_code == 400


BODY_ENDPOINTS = [
    ("patch", "/admin/orders/some-id"),
    ("put", "/config"),
]


@pytest.mark.parametrize("method,path", BODY_ENDPOINTS)
def test_malformed_body_without_cookie_is_unauthorized(client, method, path):
    resp = client.request(method.upper(), path, content="{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 401


@pytest.mark.parametrize("method,path", BODY_ENDPOINTS)
def test_malformed_body_with_cookie_is_bad_request(admin_client, method, path):
    resp = admin_client.request(method.upper(), path, content="{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid request body"}


def test_malformed_public_body_stays_bad_request(client):
    resp = client.post("/orders", content="{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
