"""HTTP surface: status codes, error bodies and actor resolution."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from realty.infrastructure.database import get_session
from realty.main import app

API = "/api/v1"


@pytest_asyncio.fixture
async def client(session_factory):
    async def _session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(client, email="dana@realty.io", role="buyer"):
    resp = await client.post(f"{API}/auth/register", json={
        "email": email,
        "password": "password123",
        "first_name": "Dana",
        "last_name": "Lee",
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    login = await client.post(f"{API}/auth/login", json={"email": email, "password": "password123"})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    return resp.json(), {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_root_and_health(client):
    assert (await client.get("/")).status_code == 200
    assert (await client.get("/healthz")).json() == {"db": "ok"}


@pytest.mark.asyncio
async def test_register_login_me(client):
    user, headers = await register_and_login(client)
    assert user["role"] == "buyer"
    assert user["agent_verification_status"] == "none"

    me = await client.get(f"{API}/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]


@pytest.mark.asyncio
async def test_duplicate_registration_is_conflict(client):
    await register_and_login(client)
    resp = await client.post(f"{API}/auth/register", json={
        "email": "DANA@realty.io", "password": "password123", "first_name": "D", "last_name": "L",
    })
    assert resp.status_code == 409
    assert resp.json()["kind"] == "Conflict"


@pytest.mark.asyncio
async def test_bad_credentials_are_unauthorized(client):
    await register_and_login(client)
    resp = await client.post(f"{API}/auth/login", json={"email": "dana@realty.io", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json()["kind"] == "Unauthorized"


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(client):
    resp = await client.get(f"{API}/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Missing credentials", "kind": "Unauthorized", "details": {}}


@pytest.mark.asyncio
async def test_request_validation_is_invalid_argument(client):
    resp = await client.post(f"{API}/auth/register", json={
        "email": "short@realty.io", "password": "short", "first_name": "A", "last_name": "B",
    })
    assert resp.status_code == 422
    body = resp.json()
    assert body["kind"] == "InvalidArgument"
    assert any(e["field"].endswith("password") for e in body["details"]["errors"])


@pytest.mark.asyncio
async def test_buyer_cannot_create_office(client):
    _, headers = await register_and_login(client)
    resp = await client.post(f"{API}/offices", headers=headers, json={
        "name": "Nope", "franchise_id": "FR-9", "phone": "+16502530000", "email": "o@realty.io",
        "address": {"street": "1 A St", "city": "Austin", "state": "TX", "zip_code": "78701"},
        "manager_id": 1,
    })
    assert resp.status_code == 403
    assert resp.json()["kind"] == "Forbidden"


@pytest.mark.asyncio
async def test_role_selection_and_onboarding(client):
    user, headers = await register_and_login(client)
    url = f"{API}/users/{user['id']}"

    resp = await client.post(f"{url}/role", headers=headers, json={"role": "seller"})
    assert resp.json() == {"role": "seller", "is_profile_complete": False, "next_stage": "onboarding_seller"}

    resp = await client.post(f"{url}/onboarding", headers=headers, json={
        "role": "seller", "data": {"has_property": True, "property_type": "house"},
    })
    assert resp.status_code == 200, resp.text
    assert resp.json()["is_profile_complete"] is True

    status = await client.get(f"{url}/onboarding", headers=headers)
    assert status.json()["onboarding_completed"]["seller"] is True


@pytest.mark.asyncio
async def test_selecting_role_for_someone_else_is_forbidden(client):
    other, _ = await register_and_login(client, email="other@realty.io")
    _, headers = await register_and_login(client)
    resp = await client.post(f"{API}/users/{other['id']}/role", headers=headers, json={"role": "agent"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_agent_application_over_http(client):
    _, headers = await register_and_login(client, role="agent")
    payload = {"license_number": "CA-1", "license_state": "CA"}

    first = await client.post(f"{API}/agents/apply", headers=headers, json=payload)
    assert first.status_code == 201, first.text
    second = await client.post(f"{API}/agents/apply", headers=headers, json=payload)
    assert second.status_code == 409
    assert second.json()["kind"] == "Conflict"

    pending = await client.get(f"{API}/agents/pending", headers=headers)
    assert pending.status_code == 403
