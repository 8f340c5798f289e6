import asyncio

import pytest
from sqlalchemy import select

from disc_insights.core.config import linkedin_settings
from disc_insights.db.models import Profile, WebhookLog

WEBHOOK_URL = "/api/v1/webhooks/linkedin"
PAYLOAD = {"data": {"email": "Ana@Example.com", "full_name": "Ana Lima", "headline": "Engenheira de Dados"}}


@pytest.fixture
def load_rows(session_factory):
    def _load(model):
        async def _query():
            async with session_factory() as session:
                return list((await session.execute(select(model))).scalars().all())
        return asyncio.run(_query())
    return _load


def test_webhook_stores_profile_without_auth(client, load_rows):
    response = client.post(WEBHOOK_URL, json=PAYLOAD)

    assert response.status_code == 200
    assert response.json()["success"] is True

    [profile] = load_rows(Profile)
    assert profile.email == "ana@example.com"
    assert profile.headline == "Engenheira de Dados"
    assert response.json()["profile_id"] == str(profile.id)
    assert [log.status for log in load_rows(WebhookLog)] == ["success"]


def test_webhook_without_data(client, load_rows):
    response = client.post(WEBHOOK_URL, json={"event": "ping"})

    assert response.status_code == 400
    assert response.json()["detail"]["detail"]["code"] == "HOOK_400"
    assert load_rows(WebhookLog) == []


def test_webhook_without_email_logs_error(client, load_rows):
    response = client.post(WEBHOOK_URL, json={"data": {"full_name": "Sem Email"}})

    assert response.status_code == 500
    assert response.json()["detail"]["detail"]["code"] == "HOOK_500"
    [log] = load_rows(WebhookLog)
    assert log.status == "error"
    assert "email" in log.error_message
    assert load_rows(Profile) == []


def test_webhook_secret_is_checked_when_configured(client, monkeypatch):
    monkeypatch.setattr(linkedin_settings, "webhook_secret", "s3cret")

    rejected = client.post(WEBHOOK_URL, json=PAYLOAD, headers={"X-Webhook-Secret": "wrong"})
    assert rejected.status_code == 401
    assert rejected.json()["detail"]["detail"]["code"] == "HOOK_401"

    assert client.post(WEBHOOK_URL, json=PAYLOAD).status_code == 401
    assert client.post(WEBHOOK_URL, json=PAYLOAD, headers={"X-Webhook-Secret": "s3cret"}).status_code == 200
