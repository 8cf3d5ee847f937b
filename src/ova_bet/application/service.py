"""BetService: parse, submit, reduce, void and edit bets.

Every mutation locks the phase row (SELECT ... FOR UPDATE), checks the phase
still accepts bets, writes the bet rows, then rewrites the phase counters from
SQL before committing. Concurrent submissions on one phase serialise; a
submission racing a close either lands first and is settled, or is rejected.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.application.schemas import (
    BetBatchResponse,
    BetIn,
    BetOut,
    NumberTotalOut,
    ParsedEntryOut,
    ParsedGroupOut,
    ParsePreviewResponse,
)
from src.ova_bet.domain.repository import BetRepositoryProtocol
from src.ova_bet.infrastructure.persistence import BetRepository
from src.ova_common.amounts import to_amount
from src.ova_common.enums import TextSource
from src.ova_common.errors import (
    BetNotFoundError,
    InvalidBetNumberError,
    NoValidEntriesError,
    PhaseNotActiveError,
    PhaseNotFoundError,
    PhaseSettledError,
    ReservedCodeForbiddenError,
    ZeroAmountError,
)
from src.ova_engine.models import ParsedBetEntry, Stake
from src.ova_engine.normalize import clean_ocr_text, voice_to_format
from src.ova_engine.parser import group_by_original, parse_bulk_input
from src.ova_engine.slots import MalformedNumberError, is_reserved, normalize_number
from src.ova_gateway.user.db_models import UserModel
from src.ova_phase.domain.models import Phase
from src.ova_phase.domain.repository import PhaseRepositoryProtocol
from src.ova_phase.infrastructure.persistence import PhaseRepository

logger = logging.getLogger(__name__)


def normalize_text(text: str, source: TextSource) -> str:
    if source is TextSource.OCR:
        return clean_ocr_text(text)
    if source is TextSource.VOICE:
        return voice_to_format(text)
    return text


def _parse(text: str, source: TextSource) -> tuple[str, list[ParsedBetEntry]]:
    normalized = normalize_text(text, source)
    return normalized, parse_bulk_input(normalized)


class BetService:
    def __init__(
        self,
        repo: BetRepositoryProtocol | None = None,
        phase_repo: PhaseRepositoryProtocol | None = None,
    ) -> None:
        self._repo: BetRepositoryProtocol = repo or BetRepository()
        self._phase_repo: PhaseRepositoryProtocol = phase_repo or PhaseRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_phase_bets(self, db: AsyncSession, phase_id: str) -> list[BetOut]:
        bets = await self._repo.list_bets(db, phase_id)
        return [BetOut.from_domain(b) for b in bets]

    async def list_my_bets(
        self, db: AsyncSession, phase_id: str, user_id: str
    ) -> list[BetOut]:
        bets = await self._repo.list_bets(db, phase_id, user_id=user_id)
        return [BetOut.from_domain(b) for b in bets]

    async def aggregated(self, db: AsyncSession, phase_id: str) -> list[NumberTotalOut]:
        totals = await self._repo.aggregate_by_number(db, phase_id)
        return [NumberTotalOut.from_domain(t) for t in totals]

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def preview(self, text: str, source: TextSource = TextSource.TYPED) -> ParsePreviewResponse:
        """Parse without persisting; the operator confirms before submitting."""
        normalized, entries = _parse(text, source)
        groups = [
            ParsedGroupOut(original=original, entry_count=count, total_amount=total)
            for original, count, total in group_by_original(entries)
        ]
        return ParsePreviewResponse(
            source=source.value,
            normalized_text=normalized,
            entries=[ParsedEntryOut.from_entry(e) for e in entries],
            groups=groups,
            entry_count=len(entries),
            total_amount=sum(e.amount for e in entries),
        )

    async def submit_text(
        self,
        db: AsyncSession,
        user: UserModel,
        phase_id: str,
        text: str,
        source: TextSource = TextSource.TYPED,
    ) -> BetBatchResponse:
        """Parse free text and store every non-zero entry as one batch."""
        _, entries = _parse(text, source)
        stakes = [e.to_stake() for e in entries if e.amount != 0]
        if not stakes:
            raise NoValidEntriesError()
        return await self._persist(db, user, phase_id, stakes)

    # ------------------------------------------------------------------
    # Structured submissions
    # ------------------------------------------------------------------

    async def create_bet(
        self, db: AsyncSession, user: UserModel, phase_id: str, item: BetIn
    ) -> BetOut:
        result = await self._persist(db, user, phase_id, self._to_stakes([item], user))
        return result.bets[0]

    async def create_bulk(
        self, db: AsyncSession, user: UserModel, phase_id: str, items: Sequence[BetIn]
    ) -> BetBatchResponse:
        return await self._persist(db, user, phase_id, self._to_stakes(items, user))

    async def reduce_bulk(
        self, db: AsyncSession, user: UserModel, phase_id: str, items: Sequence[BetIn]
    ) -> BetBatchResponse:
        """Record reductions: every amount is stored negative whatever its sign."""
        return await self._persist(
            db, user, phase_id, self._to_stakes(items, user, reduction=True)
        )

    # ------------------------------------------------------------------
    # Admin edits
    # ------------------------------------------------------------------

    async def void_bet(self, db: AsyncSession, bet_id: str) -> None:
        try:
            bet = await self._repo.get_bet(db, bet_id)
            if bet is None:
                raise BetNotFoundError(bet_id)
            await self._lock_unsettled(db, bet.phase_id)
            await self._repo.delete_bet(db, bet_id)
            await self._phase_repo.refresh_counters(db, bet.phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Bet voided: id=%s phase=%s number=%s", bet_id, bet.phase_id, bet.number)

    async def update_amount(self, db: AsyncSession, bet_id: str, amount: Decimal) -> BetOut:
        amount = to_amount(amount)
        try:
            bet = await self._repo.get_bet(db, bet_id)
            if bet is None:
                raise BetNotFoundError(bet_id)
            if amount == 0:
                raise ZeroAmountError(bet.number)
            await self._lock_unsettled(db, bet.phase_id)
            updated = await self._repo.update_amount(db, bet_id, amount)
            if updated is None:
                raise BetNotFoundError(bet_id)
            await self._phase_repo.refresh_counters(db, bet.phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Bet amount updated: id=%s %s -> %s", bet_id, bet.amount, amount)
        return BetOut.from_domain(updated)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _to_stakes(
        self, items: Sequence[BetIn], user: UserModel, reduction: bool = False
    ) -> list[Stake]:
        stakes: list[Stake] = []
        for item in items:
            try:
                number = normalize_number(item.number)
            except MalformedNumberError:
                raise InvalidBetNumberError(item.number) from None
            if is_reserved(number) and not user.is_admin:
                raise ReservedCodeForbiddenError(number)
            amount = to_amount(item.amount)
            if amount == 0:
                raise ZeroAmountError(number)
            if reduction:
                amount = -abs(amount)
            stakes.append(Stake(number=number, amount=amount))
        return stakes

    async def _lock_unsettled(self, db: AsyncSession, phase_id: str) -> Phase:
        phase = await self._phase_repo.get_phase(db, phase_id, for_update=True)
        if phase is None:
            raise PhaseNotFoundError(phase_id)
        if phase.settled:
            raise PhaseSettledError(phase_id)
        return phase

    async def _persist(
        self, db: AsyncSession, user: UserModel, phase_id: str, stakes: list[Stake]
    ) -> BetBatchResponse:
        try:
            phase = await self._lock_unsettled(db, phase_id)
            if not phase.accepts_bets:
                raise PhaseNotActiveError(phase_id)
            bets = await self._repo.insert_bets(db, phase_id, str(user.id), user.role, stakes)
            counters = await self._phase_repo.refresh_counters(db, phase_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        total = sum((to_amount(s.amount) for s in stakes), Decimal(0))
        logger.info(
            "Bets stored: phase=%s user=%s count=%d total=%s",
            phase_id, user.username, len(bets), total,
        )
        return BetBatchResponse(
            created=len(bets),
            total_amount=total,
            bets=[BetOut.from_domain(b) for b in bets],
            phase_total_bets=counters.total_bets,
            phase_total_volume=counters.total_volume,
        )
