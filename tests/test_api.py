"""HTTP-level tests for the auth and users routers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import httpx
import pytest
import pytest_asyncio

from otp_auth.api.dependencies import (
    get_auth_service,
    get_session_issuer,
    get_user_repository,
)
from otp_auth.main import app
from otp_auth.services.otp_store import OTP_KEY_PREFIX
from otp_auth.services.session_issuer import SessionIssuer

from conftest import RATE_LIMIT_COUNT, TEST_SECRET

PHONE = "09123456789"


@pytest_asyncio.fixture
async def client(auth_service, users, sessions, db_session):
    """ASGI client with the app wired to the in-memory store and database."""
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_session_issuer] = lambda: sessions

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _login(client, kv, phone: str = PHONE) -> dict:
    resp = await client.post("/v1/auth/request-otp", json={"phone_number": phone})
    assert resp.status_code == 200
    code = await kv.get(OTP_KEY_PREFIX + phone)
    resp = await client.post("/v1/auth/verify-otp", json={"phone_number": phone, "otp": code})
    assert resp.status_code == 200
    return resp.json()


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ──────────────────────────────────────────────────────────
# /v1/auth
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_request_otp_does_not_echo_code(client, kv):
    resp = await client.post("/v1/auth/request-otp", json={"phone_number": PHONE})

    assert resp.status_code == 200
    body = resp.json()
    assert body["expires_in_seconds"] == 120
    assert await kv.get(OTP_KEY_PREFIX + PHONE) not in resp.text


@pytest.mark.asyncio
async def test_verify_otp_returns_token_and_user(client, kv):
    body = await _login(client, kv)

    assert body["token"]
    assert body["user"]["phone_number"] == PHONE
    assert "id" in body["user"]


@pytest.mark.asyncio
async def test_invalid_phone_is_400(client):
    resp = await client.post("/v1/auth/request-otp", json={"phone_number": "12345"})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation_error"


@pytest.mark.asyncio
async def test_rate_limit_is_429(client):
    for _ in range(RATE_LIMIT_COUNT):
        resp = await client.post("/v1/auth/request-otp", json={"phone_number": PHONE})
        assert resp.status_code == 200

    resp = await client.post("/v1/auth/request-otp", json={"phone_number": PHONE})
    assert resp.status_code == 429
    assert resp.json()["kind"] == "rate_limited"


@pytest.mark.asyncio
async def test_wrong_code_is_401(client):
    await client.post("/v1/auth/request-otp", json={"phone_number": PHONE})
    resp = await client.post(
        "/v1/auth/verify-otp", json={"phone_number": PHONE, "otp": "000000"}
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid or expired OTP", "kind": "invalid_or_expired"}


@pytest.mark.asyncio
async def test_malformed_code_is_400(client):
    resp = await client.post(
        "/v1/auth/verify-otp", json={"phone_number": PHONE, "otp": "12ab56"}
    )
    assert resp.status_code == 400


# ──────────────────────────────────────────────────────────
# /v1/users
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_users_require_bearer_token(client):
    resp = await client.get("/v1/users")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"

    resp = await client.get("/v1/users", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401
    assert resp.json()["kind"] == "token_invalid"


@pytest.mark.asyncio
async def test_expired_token_is_reported_distinctly(client):
    past = datetime.now(UTC) - timedelta(days=2)
    stale = SessionIssuer(TEST_SECRET, validity_seconds=60, clock=lambda: past)
    token = stale.mint("1b4e28ba-2fa1-11d2-883f-0016d3cca427", PHONE)

    resp = await client.get("/v1/users", headers=_bearer(token))
    assert resp.status_code == 401
    assert resp.json()["kind"] == "token_expired"


@pytest.mark.asyncio
async def test_get_user_by_id(client, kv):
    body = await _login(client, kv)
    user_id = body["user"]["id"]

    resp = await client.get(f"/v1/users/{user_id}", headers=_bearer(body["token"]))
    assert resp.status_code == 200
    assert resp.json()["phone_number"] == PHONE


@pytest.mark.asyncio
async def test_get_unknown_user_is_404(client, kv):
    body = await _login(client, kv)
    resp = await client.get(
        "/v1/users/00000000-0000-0000-0000-000000000000", headers=_bearer(body["token"])
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_users_with_search(client, kv, users):
    await users.create("09350000001")
    await users.create("09350000002")
    body = await _login(client, kv)

    resp = await client.get(
        "/v1/users", params={"search": "0935", "page_size": 1}, headers=_bearer(body["token"])
    )
    assert resp.status_code == 200
    listing = resp.json()
    assert listing["total_count"] == 2
    assert listing["page"] == 1
    assert listing["page_size"] == 1
    assert len(listing["users"]) == 1


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
