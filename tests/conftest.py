import asyncio
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-value-12345")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import uuid
from datetime import datetime, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from disc_insights.auth import jwt as jwt_utils
from disc_insights.auth.crypto import hash_password
from disc_insights.core.config import jwt_settings
from disc_insights.db.models import (
    STATUS_COMPLETED,
    Assessment,
    AssessmentResponse,
    AssessmentResult,
    Base,
    Profile,
    User,
)

TEST_PASSWORD = "password123"


# --- JWT keys ---

@pytest.fixture(scope="session")
def test_keys(tmp_path_factory):
    """Generates temporary RSA keys for testing."""
    key_dir = tmp_path_factory.mktemp("test_keys")
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_key = private_key.public_key()

    pem_private = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )
    pem_public = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )

    private_key_path = key_dir / "test_private.pem"
    public_key_path = key_dir / "test_public.pem"
    private_key_path.write_bytes(pem_private)
    public_key_path.write_bytes(pem_public)
    return {"private": private_key_path, "public": public_key_path}


@pytest.fixture(autouse=True)
def jwt_keys(monkeypatch, test_keys):
    """Points the JWT settings at the generated keys and drops the cached key pair."""
    monkeypatch.setattr(jwt_settings, "private_key_path", str(test_keys["private"]))
    monkeypatch.setattr(jwt_settings, "public_key_path", str(test_keys["public"]))
    jwt_utils._load_keys.cache_clear()
    yield
    jwt_utils._load_keys.cache_clear()


# --- Database ---

@pytest.fixture
def session_factory(tmp_path):
    """
    File-backed SQLite with NullPool, so the same database can be used from
    pytest-asyncio tests and from TestClient's own event loop.
    """
    db_path = tmp_path / "test.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def override_db(session_factory):
    """Builds a replacement for the `db_session` dependency bound to the test database."""
    async def _db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    return _db_session


# --- Seed data ---

class Seeder:
    """Async helpers that insert rows through the test session factory."""

    def __init__(self, factory):
        self.factory = factory

    async def user(self, email="user@example.com", role="user", full_name="Maria Silva", password=TEST_PASSWORD) -> User:
        async with self.factory() as session:
            user = User(email=email, password_hash=hash_password(password), role=role)
            session.add(user)
            await session.flush()
            session.add(Profile(user_id=user.id, email=email, full_name=full_name))
            await session.commit()
            return user

    async def assessment(self, assessment_type: str, is_active: bool = True) -> Assessment:
        async with self.factory() as session:
            assessment = Assessment(
                type=assessment_type,
                title=f"{assessment_type.upper()} assessment",
                estimated_time_minutes=15,
                question_count=40 if assessment_type == "behavior" else 28,
                is_active=is_active,
            )
            session.add(assessment)
            await session.commit()
            return assessment

    async def result(self, user_id: uuid.UUID, assessment_id: uuid.UUID, results: dict, ai_analysis=None) -> AssessmentResult:
        created_at = datetime(2024, 5, 17, 14, 30, tzinfo=timezone.utc)
        async with self.factory() as session:
            response = AssessmentResponse(
                user_id=user_id,
                assessment_id=assessment_id,
                status=STATUS_COMPLETED,
                responses={"answers": {}},
                started_at=created_at,
                completed_at=created_at,
            )
            session.add(response)
            await session.flush()
            result = AssessmentResult(
                response_id=response.id,
                user_id=user_id,
                assessment_id=assessment_id,
                results=results,
                ai_analysis=ai_analysis,
                created_at=created_at,
            )
            session.add(result)
            await session.commit()
            return result


class SyncSeeder:
    """Same as Seeder, for TestClient tests that run outside an event loop."""

    def __init__(self, seeder: Seeder):
        self._seeder = seeder

    def __getattr__(self, name):
        method = getattr(self._seeder, name)
        return lambda *args, **kwargs: asyncio.run(method(*args, **kwargs))


@pytest.fixture
def seeder(session_factory):
    return Seeder(session_factory)


@pytest.fixture
def seed(seeder):
    return SyncSeeder(seeder)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = jwt_utils.create_access_token(user_id=user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers


# --- Analysis / completion fakes ---

class ScriptedCompletion:
    """Completion client stand-in that returns (or raises) queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.available = True
        self.assistant_configured = False

    async def complete(self, prompt, *args, **kwargs):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def complete_with_usage(self, prompt, system_message=None, temperature=0.7, max_tokens=2048, model=None):
        text = await self.complete(prompt)
        return {"completion": text, "usage": {"total_tokens": 42}, "model": model or "gpt-4-turbo"}

    def check_availability(self):
        return {
            "available": self.available,
            "assistantAvailable": False,
            "message": "OpenAI integration is properly configured" if self.available else "OpenAI API key is not configured",
            "timestamp": "2024-05-17T14:30:00+00:00",
        }


@pytest.fixture
def completion_stub():
    return ScriptedCompletion()


@pytest.fixture
def analysis_queue(session_factory, completion_stub):
    from disc_insights.analysis.queue import AnalysisQueue
    from disc_insights.analysis.store import ResultAnalysisStore

    return AnalysisQueue(
        ResultAnalysisStore(session_factory),
        completion_stub,
        max_attempts=2,
        backoff_min=0,
        backoff_max=0,
        yield_delay=0,
    )


# --- API client ---

@pytest.fixture
def client(monkeypatch, override_db, session_factory, analysis_queue, completion_stub):
    """TestClient over the real app with the database, queue and completion client swapped out."""
    from fastapi.testclient import TestClient

    from disc_insights.analysis.completion import get_completion_client
    from disc_insights.analysis.queue import get_analysis_queue
    from disc_insights.db.session import db_session, get_session_factory_dependency
    from disc_insights.routers import auth as auth_router
    from main import app

    async def _no_redis():
        return None

    # Rate limits fail open without Redis
    monkeypatch.setattr(auth_router, "get_redis", _no_redis)

    app.dependency_overrides[db_session] = override_db
    app.dependency_overrides[get_session_factory_dependency] = lambda: session_factory
    app.dependency_overrides[get_analysis_queue] = lambda: analysis_queue
    app.dependency_overrides[get_completion_client] = lambda: completion_stub
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
