"""
Notification, delivery client, pricing and health endpoint tests
"""

import json

import httpx
import pytest

from shipday.errors import DeliveryError
from shipday.models import Notification
from shipday.services.auth import SUBJECT_USER
from shipday.services.mailer import Mailer
from shipday.services.notifier import notify, push_if_available
from shipday.services.push import PushClient
from shipday.services.verification import send_code


def _create(client, **overrides):
    payload = {"recipientType": "driver", "recipientId": 1, "title": "Hello", "message": "World", **overrides}
    response = client.post("/api/notifications", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ==================== Notifications ====================

def test_create_notification(client):
    created = _create(client, category="general")

    assert created["recipientType"] == "driver"
    assert created["isRead"] is False
    assert created["category"] == "general"


def test_create_notification_requires_title(client):
    response = client.post("/api/notifications", json={"title": "", "message": "x"})
    assert response.status_code == 400


def test_list_filters(client):
    first = _create(client, recipientId=1)
    _create(client, recipientId=2)
    _create(client, recipientType="user", recipientId=1)
    client.patch(f"/api/notifications/{first['id']}/read")

    def count(**params):
        return len(client.get("/api/notifications", params=params).json()["notifications"])

    assert count() == 3
    assert count(recipientType="driver") == 2
    assert count(recipientType="driver", recipientId=1) == 1
    assert count(recipientType="driver", unreadOnly="true") == 1


def test_mark_as_read(client):
    created = _create(client)

    response = client.patch(f"/api/notifications/{created['id']}/read")

    assert response.status_code == 200
    assert response.json()["isRead"] is True
    assert client.patch("/api/notifications/9999/read").status_code == 404


def test_clear_all_for_one_recipient(client):
    _create(client, recipientId=1)
    _create(client, recipientId=1)
    _create(client, recipientId=2)

    response = client.delete("/api/notifications/clear-all", params={"recipientType": "driver", "recipientId": 1})

    assert response.json()["deleted"] == 2
    remaining = client.get("/api/notifications").json()["notifications"]
    assert [n["recipientId"] for n in remaining] == [2]


def test_clear_all(client):
    _create(client)
    _create(client, recipientType="user")

    assert client.delete("/api/notifications/clear-all").json()["deleted"] == 2
    assert client.get("/api/notifications").json()["notifications"] == []


def test_notify_swallows_write_errors(db, monkeypatch):
    def broken_commit():
        raise RuntimeError("disk full")

    monkeypatch.setattr(db, "commit", broken_commit)

    assert notify(db, None, None, "Title", "Body", "general") is None
    with pytest.raises(RuntimeError):
        notify(db, None, None, "Title", "Body", "general", propagate=True)


def test_notify_persists(db):
    notification = notify(db, None, None, "Title", "Body", "general")

    assert notification.id is not None
    assert db.query(Notification).count() == 1


# ==================== Push / email delivery ====================

@pytest.mark.asyncio
async def test_push_reports_false_when_delivery_disabled():
    client = PushClient(endpoint="")
    try:
        assert client.enabled is False
        assert await client.send("device-1", "Hi", "There") is None
        assert await push_if_available(client, "device-1", "Hi", "There") is False
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_push_reports_true_only_after_sending(push_client):
    assert await push_if_available(push_client, "device-1", "Hi", "There", {"k": 1}) is True
    assert await push_if_available(push_client, None, "Hi", "There") is False

    push_client.fail = True
    assert await push_if_available(push_client, "device-1", "Hi", "There") is False
    assert len(push_client.sent) == 1


@pytest.mark.asyncio
async def test_mailer_reports_false_when_delivery_disabled():
    mailer = Mailer(api_key="")
    try:
        assert mailer.enabled is False
        assert await mailer.send("someone@example.com", "Subject", "Body") is False
    finally:
        await mailer.aclose()


@pytest.mark.asyncio
async def test_mailer_posts_plain_text_email():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "msg-1"})

    mailer = Mailer(api_url="https://mail.test", api_key="key-1", sender="ShipDay <no-reply@shipday.test>")
    await mailer.aclose()
    mailer._client = httpx.AsyncClient(
        base_url="https://mail.test",
        headers={"Authorization": "Bearer key-1"},
        transport=httpx.MockTransport(handler),
    )
    try:
        assert await mailer.send("someone@example.com", "Subject", "Body") is True
    finally:
        await mailer.aclose()

    assert str(requests[0].url) == "https://mail.test/emails"
    assert requests[0].headers["Authorization"] == "Bearer key-1"
    assert json.loads(requests[0].content) == {
        "from": "ShipDay <no-reply@shipday.test>",
        "to": ["someone@example.com"],
        "subject": "Subject",
        "text": "Body",
    }


@pytest.mark.asyncio
async def test_disabled_mailer_fails_code_delivery(db):
    mailer = Mailer(api_key="")
    try:
        with pytest.raises(DeliveryError):
            await send_code(db, mailer, SUBJECT_USER, "someone@example.com", "Code", "Your code is:")
    finally:
        await mailer.aclose()


# ==================== Pricing ====================

def test_pricing_defaults(client):
    pricing = client.get("/api/pricing").json()

    assert pricing["economy"] == {"baseAmount": 20, "divisor": 5000, "rate": 1.2, "eta": "1-4 days"}
    assert pricing["express"]["baseAmount"] == 40
    assert pricing["satchel"] == {"a4": 90, "a3": 110}


def test_pricing_update_merges_per_tier(client):
    response = client.put("/api/pricing", json={"express": {"baseAmount": 55}, "satchel": {"a3": 120}})

    assert response.status_code == 200
    pricing = response.json()["pricing"]
    assert pricing["express"] == {"baseAmount": 55, "divisor": 4000, "rate": 1.2, "eta": "1-2 days"}
    assert pricing["satchel"] == {"a4": 90, "a3": 120}
    assert pricing["economy"]["baseAmount"] == 20

    assert client.get("/api/pricing").json()["express"]["baseAmount"] == 55


def test_pricing_rejects_negative_values(client):
    response = client.put("/api/pricing", json={"economy": {"rate": -1}})
    assert response.status_code == 400


# ==================== Health ====================

def test_liveness(client):
    assert client.get("/healthz").json() == {"status": "ok"}
