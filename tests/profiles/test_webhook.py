import pytest
from sqlalchemy import select

from disc_insights.db.models import Company, Education, Experience, Profile, WebhookLog
from disc_insights.profiles.webhook import WebhookPayloadError, handle_linkedin_webhook, unwrap_webhook_data

PAYLOAD = {
    "data": {
        "email": "Maria@Example.com",
        "full_name": "Maria Silva",
        "first_name": "Maria",
        "last_name": "Silva",
        "linkedin_url": "https://www.linkedin.com/in/maria",
        "profile_id": 12345,
        "company": "Acme",
        "company_domain": "acme.com",
        "company_year_founded": "1999",
        "educations": [{"degree": "Bacharelado", "school": "USP", "start_year": "2010", "end_year": 2014}],
        "experiences": [
            {"company": "Acme", "title": "Engenheira", "is_current": True, "start_year": 2020},
            {"company": "Beta", "title": "Analista", "start_year": "n/a"},
        ],
    }
}


async def _all(session_factory, model):
    async with session_factory() as session:
        return list((await session.execute(select(model))).scalars().all())


def test_unwrap_webhook_data():
    assert unwrap_webhook_data({"data": {"email": "a@b.c"}}) == {"email": "a@b.c"}
    assert unwrap_webhook_data({"data": {"data": {"email": "a@b.c"}}}) == {"email": "a@b.c"}
    assert unwrap_webhook_data({"data": {}}) is None
    assert unwrap_webhook_data({}) is None


async def test_webhook_stores_profile_and_related_rows(session_factory):
    async with session_factory() as session:
        response = await handle_linkedin_webhook(session, PAYLOAD)
        await session.commit()

    profiles = await _all(session_factory, Profile)
    assert response == {"success": True, "profile_id": str(profiles[0].id)}
    assert profiles[0].email == "maria@example.com"
    assert profiles[0].profile_id == "12345"

    companies = await _all(session_factory, Company)
    assert [(c.domain, c.year_founded) for c in companies] == [("acme.com", 1999)]

    educations = await _all(session_factory, Education)
    assert [(e.school, e.start_year, e.end_year) for e in educations] == [("USP", 2010, 2014)]

    experiences = sorted(await _all(session_factory, Experience), key=lambda e: e.company_name)
    assert [(e.company_name, e.job_title, e.is_current, e.start_year) for e in experiences] == [
        ("Acme", "Engenheira", True, 2020),
        ("Beta", "Analista", False, None),
    ]

    logs = await _all(session_factory, WebhookLog)
    assert [(log.status, log.profile_id) for log in logs] == [("success", profiles[0].id)]


async def test_repeated_webhook_updates_in_place(session_factory):
    for headline in ("Primeira", "Segunda"):
        payload = {"data": {**PAYLOAD["data"], "headline": headline}}
        async with session_factory() as session:
            await handle_linkedin_webhook(session, payload)
            await session.commit()

    profiles = await _all(session_factory, Profile)
    assert len(profiles) == 1
    assert profiles[0].headline == "Segunda"
    assert len(await _all(session_factory, Experience)) == 2
    assert len(await _all(session_factory, WebhookLog)) == 2


async def test_non_object_list_items_are_skipped(session_factory):
    payload = {"data": {
        "email": "joao@example.com",
        "educations": ["USP", None, {"degree": "MBA", "school": "FGV"}],
        "experiences": "Acme, Beta",
    }}
    async with session_factory() as session:
        response = await handle_linkedin_webhook(session, payload)
        await session.commit()

    assert response["success"] is True
    assert [(e.school, e.degree) for e in await _all(session_factory, Education)] == [("FGV", "MBA")]
    assert await _all(session_factory, Experience) == []
    assert [log.status for log in await _all(session_factory, WebhookLog)] == ["success"]


async def test_webhook_links_to_registered_user_profile(session_factory, seeder):
    user = await seeder.user(email="maria@example.com", full_name="Maria")

    async with session_factory() as session:
        await handle_linkedin_webhook(session, PAYLOAD)
        await session.commit()

    profiles = await _all(session_factory, Profile)
    assert len(profiles) == 1
    assert profiles[0].user_id == user.id
    assert profiles[0].full_name == "Maria Silva"


async def test_company_is_skipped_without_domain(session_factory):
    data = {key: value for key, value in PAYLOAD["data"].items() if key != "company_domain"}
    async with session_factory() as session:
        await handle_linkedin_webhook(session, {"data": data})
        await session.commit()

    assert await _all(session_factory, Company) == []
    assert len(await _all(session_factory, Profile)) == 1


async def test_missing_email_logs_error_and_raises(session_factory):
    async with session_factory() as session:
        with pytest.raises(WebhookPayloadError):
            await handle_linkedin_webhook(session, {"data": {"full_name": "Sem Email", "company_domain": "x.com"}})

    assert await _all(session_factory, Profile) == []
    assert await _all(session_factory, Company) == []
    logs = await _all(session_factory, WebhookLog)
    assert len(logs) == 1
    assert logs[0].status == "error"
    assert logs[0].error_message == "Webhook payload has no email"
