"""HTTP-level tests: routing, auth dependencies and the response envelope.

Services are replaced with mocks; the database session is a MagicMock.
"""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

import src.ova_bet.api.router as bet_api
import src.ova_ledger.api.router as ledger_api
import src.ova_gateway.api.users_router as users_api
import src.ova_phase.api.router as phase_api
from src.main import app
from src.ova_common.database import get_db_session
from src.ova_bet.application.schemas import UserBetOut
from src.ova_common.errors import AdminRequiredError, PhaseNotActiveError
from src.ova_gateway.auth.dependencies import get_current_user
from src.ova_gateway.user.db_models import UserModel
from src.ova_ledger.application.schemas import LedgerSummaryOut
from src.ova_phase.application.schemas import PhaseDetail

PHASE_ID = str(uuid.uuid4())


def _make_user(role: str) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = role.lower()
    user.password_hash = "$2b$12$fakehash"
    user.role = role
    user.is_active = True
    return user


def _phase_detail(**kwargs) -> PhaseDetail:
    defaults = dict(
        id=PHASE_ID, name="Draw 1", status="DRAFT", active=True, settled=False,
        start_date="2026-03-01T10:00:00+00:00", end_date=None,
        total_bets=0, total_volume=Decimal("1500.50"), global_limit=Decimal(0),
        created_at=None, updated_at=None,
    )
    defaults.update(kwargs)
    return PhaseDetail(**defaults)


async def _fake_session():
    yield MagicMock()


@pytest.fixture
def as_role():
    """Authenticate every request as a user with the given role."""

    def _set(role: str) -> UserModel:
        user = _make_user(role)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    app.dependency_overrides[get_db_session] = _fake_session
    yield _set
    app.dependency_overrides.clear()


@pytest.fixture
async def api() -> AsyncClient:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, api):
        resp = await api.get("/api/v1/phases")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_collector_cannot_use_admin_routes(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.post("/api/v1/phases", json={"name": "Draw 2"})
        assert resp.status_code == 403
        body = resp.json()
        assert body["code"] == 1006
        assert body["data"] is None


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_success_envelope_with_numeric_amounts(self, api, as_role, monkeypatch):
        as_role("COLLECTOR")
        service = MagicMock()
        service.get_phase = AsyncMock(return_value=_phase_detail())
        monkeypatch.setattr(phase_api, "_service", service)

        resp = await api.get(f"/api/v1/phases/{PHASE_ID}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["message"] == "success"
        assert body["data"]["total_volume"] == 1500.5
        assert body["request_id"] == resp.headers["X-Request-ID"]
        service.get_phase.assert_awaited_once()
        assert service.get_phase.call_args.args[1] == PHASE_ID

    @pytest.mark.asyncio
    async def test_app_error_envelope(self, api, as_role, monkeypatch):
        as_role("COLLECTOR")
        service = MagicMock()
        service.submit_text = AsyncMock(side_effect=PhaseNotActiveError(PHASE_ID))
        monkeypatch.setattr(bet_api, "_service", service)

        resp = await api.post(
            "/api/v1/bets/submit", json={"phase_id": PHASE_ID, "text": "123-100"}
        )

        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 2002
        assert PHASE_ID in body["message"]

    @pytest.mark.asyncio
    async def test_bad_path_id_is_validation_error(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.get("/api/v1/phases/not-a-uuid")
        assert resp.status_code == 422


class TestBetRoutes:
    @pytest.mark.asyncio
    async def test_parse_preview_needs_no_database(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.post("/api/v1/bets/parse", json={"text": "123R1000-10000\n456-200"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["entry_count"] == 7
        assert data["total_amount"] == 15200
        assert data["entries"][0] == {
            "number": "123", "amount": 10000, "original": "123R1000-10000", "is_permutation": False,
        }

    @pytest.mark.asyncio
    async def test_parse_rejects_unknown_source(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.post("/api/v1/bets/parse", json={"text": "123-100", "source": "fax"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_bulk_rejects_empty_list(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.post("/api/v1/bets/bulk", json={"phase_id": PHASE_ID, "bets": []})
        assert resp.status_code == 422


class TestPhaseRoutes:
    @pytest.mark.asyncio
    async def test_create_phase_is_201(self, api, as_role, monkeypatch):
        as_role("ADMIN")
        service = MagicMock()
        service.create_phase = AsyncMock(return_value=_phase_detail(name="Draw 2"))
        monkeypatch.setattr(phase_api, "_service", service)

        resp = await api.post("/api/v1/phases", json={"name": "Draw 2", "global_limit": 2500})

        assert resp.status_code == 201
        assert resp.json()["message"] == "Phase created"
        args = service.create_phase.call_args.args
        assert args[1:] == ("Draw 2", Decimal(2500))

    @pytest.mark.asyncio
    async def test_close_without_body(self, api, as_role, monkeypatch):
        as_role("ADMIN")
        service = MagicMock()
        closed = MagicMock()
        closed.model_dump.return_value = {"phase": None, "settlement": None}
        service.close_phase = AsyncMock(return_value=closed)
        monkeypatch.setattr(phase_api, "_service", service)

        resp = await api.post(f"/api/v1/phases/{PHASE_ID}/close")

        assert resp.status_code == 200
        assert service.close_phase.call_args.args[1:] == (PHASE_ID, None)

    @pytest.mark.asyncio
    async def test_close_rejects_bad_winning_number(self, api, as_role):
        as_role("ADMIN")
        resp = await api.post(
            f"/api/v1/phases/{PHASE_ID}/close", json={"winning_number": "12"}
        )
        assert resp.status_code == 422


class TestLedgerRoutes:
    @pytest.mark.asyncio
    async def test_summary(self, api, as_role, monkeypatch):
        as_role("ADMIN")
        service = MagicMock()
        service.summary = AsyncMock(return_value=LedgerSummaryOut(
            total_in=Decimal(3000), total_out=Decimal(80000),
            total_profit=Decimal(-77000), phases_count=1,
        ))
        monkeypatch.setattr(ledger_api, "_service", service)

        resp = await api.get("/api/v1/ledger/summary")

        assert resp.status_code == 200
        assert resp.json()["data"]["total_profit"] == -77000.0


class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_update_user_commits(self, api, as_role, monkeypatch):
        as_role("ADMIN")
        session = MagicMock()
        session.commit = AsyncMock()
        session.rollback = AsyncMock()

        async def _session():
            yield session

        app.dependency_overrides[get_db_session] = _session
        target = _make_user("COLLECTOR")
        service = MagicMock()
        service.update_user = AsyncMock(return_value=target)
        monkeypatch.setattr(users_api, "_service", service)

        resp = await api.put(f"/api/v1/users/{target.id}", json={"role": "COLLECTOR"})

        assert resp.status_code == 200
        assert resp.json()["data"]["user_id"] == str(target.id)
        assert service.update_user.call_args.args[0] == str(target.id)
        assert service.update_user.call_args.kwargs["username"] is None
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_user_is_admin_only(self, api, as_role):
        as_role("COLLECTOR")
        resp = await api.put(f"/api/v1/users/{uuid.uuid4()}", json={"role": "ADMIN"})
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_update_rejects_short_password(self, api, as_role):
        as_role("ADMIN")
        resp = await api.put(f"/api/v1/users/{uuid.uuid4()}", json={"password": "abc"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_collector_reads_own_history(self, api, as_role, monkeypatch):
        user = as_role("COLLECTOR")
        service = MagicMock()
        service.user_history = AsyncMock(return_value=[UserBetOut(
            id=str(uuid.uuid4()), phase_id=PHASE_ID, user_id=str(user.id),
            username=user.username, user_role="COLLECTOR", number="123",
            amount=Decimal("150.50"), timestamp=None, phase_name="Draw 1",
        )])
        monkeypatch.setattr(users_api, "_service", service)

        resp = await api.get(f"/api/v1/users/{user.id}/history")

        assert resp.status_code == 200
        item = resp.json()["data"][0]
        assert item["phase_name"] == "Draw 1"
        assert item["amount"] == 150.5
        assert service.user_history.call_args.args[:2] == (str(user.id), user)

    @pytest.mark.asyncio
    async def test_other_users_history_is_403(self, api, as_role, monkeypatch):
        as_role("COLLECTOR")
        service = MagicMock()
        service.user_history = AsyncMock(side_effect=AdminRequiredError())
        monkeypatch.setattr(users_api, "_service", service)

        resp = await api.get(f"/api/v1/users/{uuid.uuid4()}/history")

        assert resp.status_code == 403
        assert resp.json()["code"] == 1006
