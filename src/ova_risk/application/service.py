"""RiskService: exposure board, limits and excess clearing for one phase.

The board is rebuilt from the phase's bet rows on every read. Clearing excess
turns the engine's correction plan into negative bets under the phase lock so
a concurrent submission cannot slip between the read and the write.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.domain.repository import BetRepositoryProtocol
from src.ova_bet.infrastructure.persistence import BetRepository
from src.ova_common.enums import ExcessSort
from src.ova_common.errors import PhaseNotFoundError
from src.ova_engine.aggregator import aggregate_exposure, top_exposure
from src.ova_engine.limits import LimitPolicy, excess_report, full_board, plan_clear_excess
from src.ova_engine.settlement import PAYOUT_MULTIPLIER
from src.ova_gateway.user.db_models import UserModel
from src.ova_phase.domain.models import Phase
from src.ova_phase.domain.repository import PhaseRepositoryProtocol
from src.ova_phase.infrastructure.persistence import PhaseRepository
from src.ova_risk.application.schemas import (
    BoardResponse,
    BoardRowOut,
    ClearExcessResponse,
    CorrectionOut,
    ExcessResponse,
    HotNumberOut,
    LimitItem,
    LimitOut,
    LimitsResponse,
    RiskOverviewResponse,
)
from src.ova_risk.domain.repository import LimitRepositoryProtocol
from src.ova_risk.infrastructure.persistence import LimitRepository
from src.ova_risk.rules.limit_value import check_limit_number, check_limit_value
from src.ova_risk.rules.phase_state import check_phase_unsettled

logger = logging.getLogger(__name__)

TOP_EXPOSURE_COUNT = 20
NOTHING_TO_CLEAR = "No excess volume found to clear"


class RiskService:
    def __init__(
        self,
        repo: LimitRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        phase_repo: PhaseRepositoryProtocol | None = None,
    ) -> None:
        self._repo: LimitRepositoryProtocol = repo or LimitRepository()
        self._bet_repo: BetRepositoryProtocol = bet_repo or BetRepository()
        self._phase_repo: PhaseRepositoryProtocol = phase_repo or PhaseRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def overview(self, db: AsyncSession, phase_id: str) -> RiskOverviewResponse:
        await self._require_phase(db, phase_id)
        bets = await self._bet_repo.list_bets(db, phase_id)
        board = aggregate_exposure(bets)
        stakes = [b.amount for b in bets if b.amount > 0]
        return RiskOverviewResponse(
            phase_id=phase_id,
            top_numbers=[
                HotNumberOut.from_domain(h) for h in top_exposure(board, TOP_EXPOSURE_COUNT)
            ],
            total_bets=len(stakes),
            total_volume=sum(stakes, Decimal(0)),
            net_volume=board.grand_total,
            payout_multiplier=PAYOUT_MULTIPLIER,
        )

    async def board(self, db: AsyncSession, phase_id: str) -> BoardResponse:
        phase = await self._require_phase(db, phase_id)
        bets = await self._bet_repo.list_bets(db, phase_id)
        board = aggregate_exposure(bets)
        policy = await self._policy(db, phase)
        return BoardResponse(
            phase_id=phase_id,
            rows=[BoardRowOut.from_domain(r) for r in full_board(board, policy)],
            board_total=board.board_total,
            manual_adjustment_total=board.manual_adjustment_total,
            excess_adjustment_total=board.excess_adjustment_total,
            grand_total=board.grand_total,
        )

    async def excess(
        self, db: AsyncSession, phase_id: str, sort: ExcessSort = ExcessSort.EXCESS
    ) -> ExcessResponse:
        phase = await self._require_phase(db, phase_id)
        bets = await self._bet_repo.list_bets(db, phase_id)
        report = excess_report(aggregate_exposure(bets), await self._policy(db, phase))
        rows = report.by_excess() if sort is ExcessSort.EXCESS else report.by_number()
        return ExcessResponse(
            phase_id=phase_id,
            sort=sort.value,
            rows=[BoardRowOut.from_domain(r) for r in rows],
            base_excess=report.base_excess,
            excess_adjustment=report.excess_adjustment,
            total_excess=report.total_excess,
        )

    async def list_limits(self, db: AsyncSession, phase_id: str) -> LimitsResponse:
        phase = await self._require_phase(db, phase_id)
        limits = await self._repo.list_limits(db, phase_id)
        return LimitsResponse(
            phase_id=phase_id,
            global_limit=phase.global_limit,
            limits=[LimitOut(number=n, max_amount=a) for n, a in limits.items()],
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def set_limits(
        self, db: AsyncSession, phase_id: str, items: list[LimitItem]
    ) -> LimitsResponse:
        """Upsert per-number limits; a repeated number keeps its last value."""
        validated: dict[str, Decimal] = {}
        for item in items:
            validated[check_limit_number(item.number)] = check_limit_value(item.max_amount)
        try:
            phase = await self._phase_repo.get_phase(db, phase_id, for_update=True)
            check_phase_unsettled(phase, phase_id)
            await self._repo.upsert_limits(db, phase_id, list(validated.items()))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Limits set: phase=%s count=%d", phase_id, len(validated))
        return await self.list_limits(db, phase_id)

    async def remove_limit(self, db: AsyncSession, phase_id: str, number: str) -> bool:
        number = check_limit_number(number)
        try:
            phase = await self._phase_repo.get_phase(db, phase_id, for_update=True)
            check_phase_unsettled(phase, phase_id)
            removed = await self._repo.delete_limit(db, phase_id, number)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return removed

    async def clear_excess(
        self, db: AsyncSession, admin: UserModel, phase_id: str
    ) -> ClearExcessResponse:
        """Bring every number over its limit back to exactly the limit."""
        try:
            phase = await self._phase_repo.get_phase(db, phase_id, for_update=True)
            phase = check_phase_unsettled(phase, phase_id)
            bets = await self._bet_repo.list_bets(db, phase_id)
            plan = plan_clear_excess(aggregate_exposure(bets), await self._policy(db, phase))
            if plan.is_empty:
                await db.rollback()
                return ClearExcessResponse(cleared=False, message=NOTHING_TO_CLEAR)
            await self._bet_repo.insert_bets(
                db, phase_id, str(admin.id), admin.role, plan.corrections
            )
            counters = await self._phase_repo.refresh_counters(db, phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Excess cleared: phase=%s numbers=%d reduction=%s",
            phase_id, len(plan.corrections), plan.total_reduction,
        )
        return ClearExcessResponse(
            cleared=True,
            message=f"Cleared excess on {len(plan.corrections)} numbers",
            corrections=[CorrectionOut(number=c.number, amount=c.amount) for c in plan.corrections],
            total_reduction=plan.total_reduction,
            phase_total_volume=counters.total_volume,
        )

    # ------------------------------------------------------------------

    async def _require_phase(self, db: AsyncSession, phase_id: str) -> Phase:
        phase = await self._phase_repo.get_phase(db, phase_id)
        if phase is None:
            raise PhaseNotFoundError(phase_id)
        return phase

    async def _policy(self, db: AsyncSession, phase: Phase) -> LimitPolicy:
        limits = await self._repo.list_limits(db, phase.id)
        return LimitPolicy(per_number=limits, global_limit=phase.global_limit)
