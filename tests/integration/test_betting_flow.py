"""End-to-end betting flow (requires running PG + Redis).

Run: pytest -m integration tests/integration/test_betting_flow.py -v
Pre-condition: alembic upgrade head (seeds admin/admin123 and user/user123)
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration]


async def _create_phase(client: AsyncClient, headers: dict[str, str], **body) -> dict:
    payload = {"name": f"it_{uuid.uuid4().hex[:10]}", **body}
    resp = await client.post("/api/v1/phases", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestPhaseLifecycle:
    async def test_only_one_phase_is_active(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        first = await _create_phase(client, admin_headers)
        second = await _create_phase(client, admin_headers)

        resp = await client.get("/api/v1/phases/active", headers=admin_headers)
        assert resp.json()["data"]["id"] == second["id"]

        resp = await client.get(f"/api/v1/phases/{first['id']}", headers=admin_headers)
        assert resp.json()["data"]["status"] == "INACTIVE"

    async def test_duplicate_name_rejected(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        phase = await _create_phase(client, admin_headers)
        resp = await client.post(
            "/api/v1/phases", json={"name": phase["name"]}, headers=admin_headers
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 2004

    async def test_collector_cannot_create(
        self, client: AsyncClient, collector_headers: dict[str, str]
    ) -> None:
        resp = await client.post(
            "/api/v1/phases", json={"name": "nope"}, headers=collector_headers
        )
        assert resp.status_code == 403


class TestBettingFlow:
    async def test_submit_risk_clear_close(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        collector_headers: dict[str, str],
    ) -> None:
        phase = await _create_phase(client, admin_headers)
        phase_id = phase["id"]

        # 123 @ 10000, other permutations @ 1000
        resp = await client.post(
            "/api/v1/bets/submit",
            json={"phase_id": phase_id, "text": "123R1000-10000\n456-200"},
            headers=collector_headers,
        )
        assert resp.status_code == 201, resp.text
        batch = resp.json()["data"]
        assert batch["created"] == 7
        assert batch["phase_total_volume"] == 15200

        resp = await client.get(f"/api/v1/risk/phase/{phase_id}/excess", headers=admin_headers)
        excess = resp.json()["data"]
        assert [(r["number"], r["excess"]) for r in excess["rows"]] == [("123", 5000)]

        resp = await client.post(
            f"/api/v1/risk/phase/{phase_id}/clear-excess", headers=admin_headers
        )
        cleared = resp.json()["data"]
        assert cleared["cleared"] is True
        assert cleared["total_reduction"] == 5000
        assert cleared["phase_total_volume"] == 10200

        resp = await client.post(
            f"/api/v1/risk/phase/{phase_id}/clear-excess", headers=admin_headers
        )
        assert resp.json()["data"]["cleared"] is False

        resp = await client.get(f"/api/v1/phases/{phase_id}/verify", headers=admin_headers)
        assert resp.json()["data"]["has_drift"] is False

        resp = await client.post(
            f"/api/v1/phases/{phase_id}/close",
            json={"winning_number": "456"},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        settlement = resp.json()["data"]["settlement"]
        assert settlement["total_in"] == 15200
        assert settlement["total_out"] == 16000
        assert settlement["profit"] == -800

        resp = await client.get(f"/api/v1/ledger/phase/{phase_id}", headers=admin_headers)
        assert resp.json()["data"]["winning_number"] == "456"

        resp = await client.post(
            "/api/v1/bets",
            json={"phase_id": phase_id, "number": "123", "amount": 10},
            headers=collector_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 2003

    async def test_limits_drive_excess(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        phase = await _create_phase(client, admin_headers, global_limit=1000)
        phase_id = phase["id"]
        resp = await client.post(
            "/api/v1/risk/limits/bulk",
            json={"phase_id": phase_id, "limits": [
                {"number": "7", "max_amount": 0},
                {"number": "456", "max_amount": 3000},
            ]},
            headers=admin_headers,
        )
        assert resp.status_code == 422

        resp = await client.post(
            "/api/v1/risk/limits/bulk",
            json={"phase_id": phase_id, "limits": [
                {"number": "07", "max_amount": 0},
                {"number": "456", "max_amount": 3000},
            ]},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text

        await client.post(
            "/api/v1/bets/bulk",
            json={"phase_id": phase_id, "bets": [
                {"number": "007", "amount": 50},
                {"number": "456", "amount": 2500},
                {"number": "999", "amount": 1500},
            ]},
            headers=admin_headers,
        )
        resp = await client.get(
            f"/api/v1/risk/phase/{phase_id}/excess?sort=number", headers=admin_headers
        )
        rows = resp.json()["data"]["rows"]
        assert [(r["number"], r["excess"]) for r in rows] == [("007", 50), ("999", 500)]

        resp = await client.delete(f"/api/v1/phases/{phase_id}", headers=admin_headers)
        assert resp.status_code == 200
