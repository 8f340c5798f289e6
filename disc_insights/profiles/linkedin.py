# disc_insights/profiles/linkedin.py
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.core.config import linkedin_settings
from disc_insights.db.models import Profile

logger = logging.getLogger(__name__)

LINKEDIN_URL_PATTERN = re.compile(r"^https://(www\.)?linkedin\.com/.+")


def is_valid_linkedin_url(url: Optional[str]) -> bool:
    return bool(url) and bool(LINKEDIN_URL_PATTERN.match(url.strip()))


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _map_profile(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalizes the webhook's profile payload into the fields stored on a profile."""
    experiences = data.get("experiences") if isinstance(data.get("experiences"), list) else []
    educations = data.get("educations") if isinstance(data.get("educations"), list) else []
    skills = data.get("skills") if isinstance(data.get("skills"), list) else []
    return {
        "full_name": _text(data.get("full_name")),
        "profile_image_url": data.get("profile_image_url") or None,
        "headline": data.get("headline") or None,
        "location": data.get("location") or None,
        "about": data.get("about") or None,
        "experiences": [
            {
                "title": _text(exp.get("title")),
                "company": _text(exp.get("company")),
                "company_logo_url": exp.get("company_logo_url") or None,
                "date_range": _text(exp.get("date_range")),
                "description": exp.get("description") or None,
            }
            for exp in experiences if isinstance(exp, dict)
        ],
        "education": [
            {
                "degree": _text(edu.get("degree")),
                "school": _text(edu.get("school")),
                "field_of_study": _text(edu.get("field_of_study")),
                "date_range": _text(edu.get("date_range")),
            }
            for edu in educations if isinstance(edu, dict)
        ],
        "skills": [skill for skill in skills if isinstance(skill, str) and skill.strip()],
    }


async def fetch_linkedin_profile(linkedin_url: str, client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    """
    Asks the profile webhook for the public data behind `linkedin_url`.

    Best effort: returns None for an invalid URL, an unconfigured webhook,
    any HTTP or network failure, or a payload without a full name.
    """
    if not is_valid_linkedin_url(linkedin_url):
        logger.warning(f"Invalid LinkedIn URL format: {linkedin_url!r}")
        return None
    if not linkedin_settings.webhook_url:
        logger.warning("LINKEDIN_WEBHOOK_URL is not configured; skipping profile fetch")
        return None

    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json; charset=utf-8",
        "Cache-Control": "no-cache",
    }
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=linkedin_settings.timeout_seconds)
    try:
        logger.info(f"Fetching LinkedIn profile for {linkedin_url}")
        response = await client.post(
            linkedin_settings.webhook_url,
            json={"linkedin_url": linkedin_url.strip()},
            headers=headers,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as e:
        logger.warning(f"LinkedIn API request timed out: {e}")
        return None
    except httpx.HTTPStatusError as e:
        logger.warning(f"Failed to fetch LinkedIn profile: {e.response.status_code} - {e.response.text[:200]}")
        return None
    except (httpx.RequestError, ValueError) as e:
        logger.warning(f"LinkedIn API error: {e}")
        return None
    finally:
        if owns_client:
            await client.aclose()

    # The webhook wraps the profile in up to two `data` envelopes
    profile_data = data
    for _ in range(2):
        if isinstance(profile_data, dict) and isinstance(profile_data.get("data"), dict):
            profile_data = profile_data["data"]
    if not isinstance(profile_data, dict):
        logger.warning(f"LinkedIn API error: invalid response data format ({type(profile_data).__name__})")
        return None

    profile = _map_profile(profile_data)
    if not profile["full_name"]:
        logger.warning("Failed to fetch profile: missing full name")
        return None
    return profile


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


async def update_user_profile(session: AsyncSession, user_id: uuid.UUID, profile: Dict[str, Any]) -> bool:
    """
    Merges a fetched LinkedIn profile into the user's stored profile.

    Blank values (None, empty strings, empty lists) never overwrite stored data.
    """
    if not profile or not profile.get("full_name"):
        logger.warning(f"Invalid profile data for user {user_id}")
        return False

    result = await session.execute(select(Profile).where(Profile.user_id == user_id))
    existing = result.scalars().first()
    if existing is None:
        logger.warning(f"No profile row found for user {user_id}")
        return False

    updates = {
        "full_name": profile.get("full_name", "").strip(),
        "headline": profile.get("headline"),
        "location": profile.get("location"),
        "about": profile.get("about"),
        "profile_image_url": profile.get("profile_image_url"),
        "experiences": profile.get("experiences"),
        "education_summary": profile.get("education"),
        "skills": profile.get("skills"),
    }
    changed = [field for field, value in updates.items() if not _is_blank(value)]
    for field in changed:
        setattr(existing, field, updates[field])
    existing.updated_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info(f"Updated profile of user {user_id} from LinkedIn ({len(changed)} fields)")
    return True


async def enrich_profile_from_linkedin(session_factory, user_id: uuid.UUID, linkedin_url: str) -> None:
    """Background task run after registration: fetch, then merge. Database errors are logged."""
    profile = await fetch_linkedin_profile(linkedin_url)
    if profile is None:
        return
    try:
        async with session_factory() as session:
            if await update_user_profile(session, user_id, profile):
                await session.commit()
    except SQLAlchemyError as e:
        logger.warning(f"Could not store LinkedIn profile for user {user_id}: {e}", exc_info=True)
