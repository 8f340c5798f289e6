import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from disc_insights.auth import jwt as jwt_utils
from disc_insights.auth.jwt import create_access_token, create_refresh_token
from disc_insights.auth.schemas import AuthenticatedUser
from disc_insights.core.config import jwt_settings
from disc_insights.middleware.auth import AuthenticationMiddleware, get_current_user, require_role


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(AuthenticationMiddleware, excluded_paths={"/public"}, excluded_prefixes=("/hooks/",))

    @app.get("/public")
    async def public():
        return {"ok": True}

    @app.post("/hooks/{name}")
    async def hook(name: str):
        return {"hook": name}

    @app.get("/me")
    async def me(user: AuthenticatedUser = Depends(get_current_user)):
        return {"id": str(user.id), "role": user.role, "is_admin": user.is_admin}

    @app.get("/admin")
    async def admin(user: AuthenticatedUser = Depends(require_role("admin"))):
        return {"id": str(user.id)}

    return TestClient(app)


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_excluded_paths_need_no_token(client):
    assert client.get("/public").json() == {"ok": True}
    assert client.post("/hooks/linkedin").json() == {"hook": "linkedin"}


def test_missing_token(client):
    response = client.get("/me")
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "AUTH_001"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_valid_token_sets_user(client):
    user_id = uuid.uuid4()
    response = client.get("/me", headers=_bearer(create_access_token(user_id=user_id, role="user")))

    assert response.status_code == 200
    assert response.json() == {"id": str(user_id), "role": "user", "is_admin": False}


def test_refresh_token_is_not_accepted(client):
    token = create_refresh_token(user_id=uuid.uuid4(), role="user", token_id=uuid.uuid4())
    response = client.get("/me", headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "TOKEN_TYPE_MISMATCH"


def test_expired_token(client):
    private_key, _, key_id = jwt_utils._load_keys()
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": str(uuid.uuid4()), "role": "user", "typ": "access",
            "exp": past, "iat": past, "nbf": past,
            "iss": jwt_settings.issuer, "aud": jwt_settings.audience,
        },
        private_key, algorithm="RS256", headers={"kid": key_id},
    )
    response = client.get("/me", headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "AUTH_002"
    assert "invalid_token" in response.headers["WWW-Authenticate"]


def test_garbage_token(client):
    response = client.get("/me", headers=_bearer("garbage"))
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "TOKEN_DECODE_ERROR"


def test_require_role(client):
    user_token = create_access_token(user_id=uuid.uuid4(), role="user")
    response = client.get("/admin", headers=_bearer(user_token))
    assert response.status_code == 403
    assert response.json()["detail"]["detail"]["code"] == "AUTH_003"

    admin_token = create_access_token(user_id=uuid.uuid4(), role="admin")
    assert client.get("/admin", headers=_bearer(admin_token)).status_code == 200


def test_require_role_rejects_unknown_role():
    with pytest.raises(ValueError):
        require_role("superuser")


def test_options_requests_pass(client):
    response = client.options("/me")
    assert response.status_code != 401
