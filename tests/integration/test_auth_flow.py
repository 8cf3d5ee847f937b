"""Integration tests for auth and user management (requires running PG + Redis).

Run: pytest -m integration tests/integration/test_auth_flow.py -v
Pre-condition: alembic upgrade head
"""

import uuid

import pytest
from httpx import AsyncClient

# All tests in this module share the session-scoped event loop so that the
# module-level SQLAlchemy async engine pool stays alive across tests.
pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration]


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {"username": f"collector_{uid}", "password": "TestPass1"}


def _from_new_ip() -> dict[str, str]:
    """Spread logins over client addresses so the per-IP login limit is not hit."""
    return {"X-Forwarded-For": f"10.1.{uuid.uuid4().int % 250}.{uuid.uuid4().int % 250 + 1}"}


async def _login(client: AsyncClient, user: dict[str, str]):
    return await client.post("/api/v1/auth/login", json=user, headers=_from_new_ip())


class TestUserManagement:
    async def test_admin_creates_collector(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/users", json=user, headers=admin_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["username"] == user["username"]
        assert body["data"]["role"] == "COLLECTOR"
        assert "request_id" in body

    async def test_duplicate_username(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user = unique_user()
        await client.post("/api/v1/users", json=user, headers=admin_headers)
        resp = await client.post("/api/v1/users", json=user, headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_collector_cannot_list_users(
        self, client: AsyncClient, collector_headers: dict[str, str]
    ) -> None:
        resp = await client.get("/api/v1/users", headers=collector_headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006


class TestLogin:
    async def test_login_success(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user = unique_user()
        await client.post("/api/v1/users", json=user, headers=admin_headers)
        resp = await _login(client, user)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["username"] == user["username"]

    async def test_login_wrong_password(self, client: AsyncClient) -> None:
        resp = await _login(client, {"username": "admin", "password": "wrong-password"})
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_login_unknown_user(self, client: AsyncClient) -> None:
        resp = await _login(client, unique_user())
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_login_rate_limited_per_ip(self, client: AsyncClient) -> None:
        headers = _from_new_ip()
        statuses = []
        for _ in range(12):
            resp = await client.post(
                "/api/v1/auth/login",
                json={"username": "nobody", "password": "x"},
                headers=headers,
            )
            statuses.append(resp.status_code)
        assert statuses[-1] == 429


class TestRefresh:
    async def test_refresh_success(self, client: AsyncClient) -> None:
        login_resp = await _login(client, {"username": "admin", "password": "admin123"})
        refresh_token = login_resp.json()["data"]["refresh_token"]

        resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert resp.status_code == 200
        assert len(resp.json()["data"]["access_token"]) > 20

    async def test_refresh_with_access_token_fails(self, client: AsyncClient) -> None:
        login_resp = await _login(client, {"username": "admin", "password": "admin123"})
        access_token = login_resp.json()["data"]["access_token"]

        resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
        assert resp.status_code == 401
        assert resp.json()["code"] == 1005

    async def test_refresh_with_garbage_token_fails(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": "not.a.real.token"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1005


class TestProtectedRoute:
    async def test_me_with_valid_token(
        self, client: AsyncClient, collector_headers: dict[str, str]
    ) -> None:
        resp = await client.get("/api/v1/auth/me", headers=collector_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["username"] == "user"

    async def test_me_without_token_fails(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 401


class TestUserLifecycle:
    async def _new_collector(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> tuple[str, dict[str, str]]:
        user = unique_user()
        resp = await client.post("/api/v1/users", json=user, headers=admin_headers)
        user_id = resp.json()["data"]["user_id"]
        token = (await _login(client, user)).json()["data"]["access_token"]
        return user_id, {"Authorization": f"Bearer {token}"}

    async def _bet_in_new_phase(
        self, client: AsyncClient, admin_headers: dict[str, str], headers: dict[str, str]
    ) -> dict:
        resp = await client.post(
            "/api/v1/phases", json={"name": f"it_{uuid.uuid4().hex[:10]}"}, headers=admin_headers
        )
        phase = resp.json()["data"]
        resp = await client.post(
            "/api/v1/bets/submit",
            json={"phase_id": phase["id"], "text": "123-100\n456-50"},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return phase

    async def test_admin_renames_and_promotes(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user_id, _ = await self._new_collector(client, admin_headers)
        new_name = unique_user()["username"]
        resp = await client.put(
            f"/api/v1/users/{user_id}",
            json={"username": new_name, "role": "ADMIN"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["username"] == new_name
        assert resp.json()["data"]["role"] == "ADMIN"

        resp = await client.put(
            f"/api/v1/users/{user_id}", json={"username": "admin"}, headers=admin_headers
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_history_is_own_or_admin(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        collector_headers: dict[str, str],
    ) -> None:
        user_id, headers = await self._new_collector(client, admin_headers)
        phase = await self._bet_in_new_phase(client, admin_headers, headers)

        resp = await client.get(f"/api/v1/users/{user_id}/history", headers=headers)
        assert resp.status_code == 200
        history = resp.json()["data"]
        assert {b["number"] for b in history} == {"123", "456"}
        assert {b["phase_name"] for b in history} == {phase["name"]}

        resp = await client.get(f"/api/v1/users/{user_id}/history", headers=admin_headers)
        assert len(resp.json()["data"]) == 2

        resp = await client.get(f"/api/v1/users/{user_id}/history", headers=collector_headers)
        assert resp.status_code == 403

    async def test_delete_removes_bets_and_rewrites_counters(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user_id, headers = await self._new_collector(client, admin_headers)
        phase = await self._bet_in_new_phase(client, admin_headers, headers)

        resp = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
        assert resp.status_code == 200

        resp = await client.get(f"/api/v1/phases/{phase['id']}", headers=admin_headers)
        assert resp.json()["data"]["total_bets"] == 0

    async def test_delete_refused_after_settlement(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user_id, headers = await self._new_collector(client, admin_headers)
        phase = await self._bet_in_new_phase(client, admin_headers, headers)
        resp = await client.post(
            f"/api/v1/phases/{phase['id']}/close",
            json={"winning_number": "123"},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text

        resp = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == 1008

        resp = await client.get(f"/api/v1/users/{user_id}/history", headers=admin_headers)
        assert len(resp.json()["data"]) == 2
