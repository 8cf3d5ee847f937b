"""PhaseService: phase lifecycle and settlement.

Mutations run in the caller's session and commit here; any error rolls back.
At most one phase is active: create/activate deactivate every other phase in
the same transaction.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.domain.repository import BetRepositoryProtocol
from src.ova_bet.infrastructure.persistence import BetRepository
from src.ova_common.errors import (
    PhaseNameExistsError,
    PhaseNotFoundError,
    PhaseSettledError,
)
from src.ova_engine.counters import PhaseCounters, detect_counter_drift
from src.ova_engine.settlement import settle_phase
from src.ova_ledger.domain.repository import LedgerRepositoryProtocol
from src.ova_ledger.infrastructure.persistence import LedgerRepository
from src.ova_phase.application.schemas import (
    ClosePhaseResponse,
    CounterCheckResponse,
    PhaseDetail,
    SettlementOut,
)
from src.ova_phase.domain.models import Phase
from src.ova_phase.domain.repository import PhaseRepositoryProtocol
from src.ova_phase.infrastructure.persistence import PhaseRepository

logger = logging.getLogger(__name__)


class PhaseService:
    def __init__(
        self,
        repo: PhaseRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._repo: PhaseRepositoryProtocol = repo or PhaseRepository()
        self._bet_repo: BetRepositoryProtocol = bet_repo or BetRepository()
        self._ledger_repo: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_phases(self, db: AsyncSession) -> list[PhaseDetail]:
        phases = await self._repo.list_phases(db)
        return [PhaseDetail.from_domain(p) for p in phases]

    async def get_phase(self, db: AsyncSession, phase_id: str) -> PhaseDetail:
        return PhaseDetail.from_domain(await self._require(db, phase_id))

    async def get_active_phase(self, db: AsyncSession) -> PhaseDetail | None:
        phase = await self._repo.get_active_phase(db)
        return PhaseDetail.from_domain(phase) if phase else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_phase(
        self, db: AsyncSession, name: str, global_limit: Decimal = Decimal(0)
    ) -> PhaseDetail:
        """Create a phase and make it the only active one."""
        try:
            if await self._repo.name_exists(db, name):
                raise PhaseNameExistsError(name)
            deactivated = await self._repo.deactivate_all(db)
            phase = await self._repo.insert_phase(db, name, global_limit)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Phase created: id=%s name=%s (deactivated %d)", phase.id, name, deactivated
        )
        return PhaseDetail.from_domain(phase)

    async def activate_phase(self, db: AsyncSession, phase_id: str) -> PhaseDetail:
        try:
            phase = await self._require(db, phase_id, for_update=True)
            if phase.settled:
                raise PhaseSettledError(phase_id)
            await self._repo.deactivate_all(db)
            activated = await self._repo.activate(db, phase_id)
            if activated is None:
                raise PhaseNotFoundError(phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Phase activated: id=%s", phase_id)
        return PhaseDetail.from_domain(activated)

    async def close_phase(
        self, db: AsyncSession, phase_id: str, winning_number: str | None = None
    ) -> ClosePhaseResponse:
        """Settle the phase into the ledger and deactivate it, atomically."""
        try:
            phase = await self._require(db, phase_id, for_update=True)
            if phase.settled:
                raise PhaseSettledError(phase_id)
            bets = await self._bet_repo.list_bets(db, phase_id)
            summary = settle_phase(bets, winning_number)
            await self._ledger_repo.insert_entry(db, phase_id, summary)
            closed = await self._repo.close(db, phase_id)
            if closed is None:
                raise PhaseNotFoundError(phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Phase closed: id=%s winning=%s in=%s out=%s profit=%s",
            phase_id, winning_number, summary.total_in, summary.total_out, summary.profit,
        )
        return ClosePhaseResponse(
            phase=PhaseDetail.from_domain(closed),
            settlement=SettlementOut.from_summary(summary),
        )

    async def delete_phase(self, db: AsyncSession, phase_id: str) -> None:
        """Delete in any state; bets, limits and ledger rows cascade."""
        try:
            if not await self._repo.delete(db, phase_id):
                raise PhaseNotFoundError(phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Phase deleted: id=%s", phase_id)

    async def update_global_limit(
        self, db: AsyncSession, phase_id: str, global_limit: Decimal
    ) -> PhaseDetail:
        try:
            phase = await self._require(db, phase_id, for_update=True)
            if phase.settled:
                raise PhaseSettledError(phase_id)
            updated = await self._repo.update_global_limit(db, phase_id, global_limit)
            if updated is None:
                raise PhaseNotFoundError(phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PhaseDetail.from_domain(updated)

    async def verify_counters(self, db: AsyncSession, phase_id: str) -> CounterCheckResponse:
        """Compare cached counters with the bet rows and rewrite them on drift."""
        try:
            phase = await self._require(db, phase_id, for_update=True)
            bets = await self._bet_repo.list_bets(db, phase_id)
            cached = PhaseCounters(total_bets=phase.total_bets, total_volume=phase.total_volume)
            drift = detect_counter_drift(cached, bets)
            if drift.has_drift:
                logger.error(
                    "Counter drift on phase %s: cached=%s derived=%s",
                    phase_id, drift.cached, drift.derived,
                )
                await self._repo.refresh_counters(db, phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return CounterCheckResponse.from_drift(phase_id, drift, repaired=drift.has_drift)

    # ------------------------------------------------------------------

    async def _require(
        self, db: AsyncSession, phase_id: str, for_update: bool = False
    ) -> Phase:
        phase = await self._repo.get_phase(db, phase_id, for_update=for_update)
        if phase is None:
            raise PhaseNotFoundError(phase_id)
        return phase
