# disc_insights/profiles/webhook.py
# Inbound LinkedIn enrichment webhook: company, profile, education and experience upserts.

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.db.crud import upsert
from disc_insights.db.models import Company, Education, Experience, Profile, WebhookLog

logger = logging.getLogger(__name__)

WEBHOOK_TYPE_LINKEDIN = "linkedin"


class WebhookPayloadError(ValueError):
    """Raised when the webhook body lacks the data needed to store a profile."""


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _entries(data: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    """Object items of a list field; anything else is logged and skipped."""
    items = data.get(key) or []
    if not isinstance(items, list):
        logger.warning(f"Webhook field '{key}' is not a list; ignoring it")
        return []
    entries = [item for item in items if isinstance(item, dict)]
    if len(entries) != len(items):
        logger.warning(f"Skipping {len(items) - len(entries)} non-object item(s) in webhook field '{key}'")
    return entries


def unwrap_webhook_data(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Returns the profile object under `data` (or `data.data`), or None when absent."""
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    return data if isinstance(data, dict) and data else None


async def _store_profile(session: AsyncSession, data: Dict[str, Any]) -> Profile:
    if data.get("company_domain"):
        await upsert(session, Company, {
            "name": data.get("company"),
            "domain": data["company_domain"],
            "industry": data.get("company_industry"),
            "employee_range": _to_str(data.get("company_employee_range")),
            "linkedin_url": data.get("company_linkedin_url"),
            "logo_url": data.get("company_logo_url"),
            "website": data.get("company_website"),
            "year_founded": _to_int(data.get("company_year_founded")),
            "description": data.get("company_description"),
            "hq_city": data.get("hq_city"),
            "hq_country": data.get("hq_country"),
            "hq_region": data.get("hq_region"),
        }, conflict_columns=["domain"])
    else:
        logger.info("Webhook payload has no company domain; skipping company upsert")

    email = (data.get("email") or "").strip().lower()
    if not email:
        raise WebhookPayloadError("Webhook payload has no email")

    profile = await upsert(session, Profile, {
        "email": email,
        "first_name": data.get("first_name"),
        "last_name": data.get("last_name"),
        "full_name": data.get("full_name"),
        "linkedin_url": data.get("linkedin_url"),
        "profile_image_url": data.get("profile_image_url"),
        "headline": data.get("headline"),
        "location": data.get("location"),
        "languages": _to_str(data.get("languages")),
        "profile_id": _to_str(data.get("profile_id")),
        "public_id": data.get("public_id"),
        "urn": data.get("urn"),
        "about": data.get("about"),
    }, conflict_columns=["email"])

    for edu in _entries(data, "educations"):
        await upsert(session, Education, {
            "profile_id": profile.id,
            "degree": edu.get("degree") or "",
            "field_of_study": edu.get("field_of_study"),
            "school": edu.get("school") or "",
            "school_linkedin_url": edu.get("school_linkedin_url"),
            "school_logo_url": edu.get("school_logo_url"),
            "date_range": edu.get("date_range"),
            "start_month": _to_str(edu.get("start_month")),
            "start_year": _to_int(edu.get("start_year")),
            "end_month": _to_str(edu.get("end_month")),
            "end_year": _to_int(edu.get("end_year")),
            "activities": edu.get("activities"),
        }, conflict_columns=["profile_id", "school", "degree"])

    for exp in _entries(data, "experiences"):
        await upsert(session, Experience, {
            "profile_id": profile.id,
            "company_name": exp.get("company") or "",
            "company_logo_url": exp.get("company_logo_url"),
            "job_title": exp.get("title") or "",
            "start_month": _to_str(exp.get("start_month")),
            "start_year": _to_int(exp.get("start_year")),
            "end_month": _to_str(exp.get("end_month")),
            "end_year": _to_int(exp.get("end_year")),
            "is_current": bool(exp.get("is_current")),
            "description": exp.get("description"),
            "location": exp.get("location"),
            "skills": _to_str(exp.get("skills")),
            "job_type": exp.get("job_type"),
            "duration": exp.get("duration"),
        }, conflict_columns=["profile_id", "company_name", "job_title"])

    return profile


async def handle_linkedin_webhook(session: AsyncSession, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Stores a LinkedIn profile pushed by the enrichment provider.

    Every call leaves a `webhook_logs` row. On failure the partial writes are
    rolled back, the error row is committed on its own and the error re-raised.
    """
    try:
        data = unwrap_webhook_data(payload)
        if data is None:
            raise WebhookPayloadError("Webhook payload has no data")
        profile = await _store_profile(session, data)
        session.add(WebhookLog(
            webhook_type=WEBHOOK_TYPE_LINKEDIN,
            profile_id=profile.id,
            request_data=payload,
            status="success",
        ))
        await session.flush()
    except (WebhookPayloadError, SQLAlchemyError) as e:
        logger.error(f"LinkedIn webhook processing failed: {e}")
        await session.rollback()
        session.add(WebhookLog(
            webhook_type=WEBHOOK_TYPE_LINKEDIN,
            request_data=payload,
            status="error",
            error_message=str(e),
        ))
        await session.commit()
        raise

    logger.info(f"LinkedIn webhook stored profile {profile.id}")
    return {"success": True, "profile_id": str(profile.id)}
