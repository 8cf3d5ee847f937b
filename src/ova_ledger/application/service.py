"""LedgerService: read-only views over settled phases."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_common.errors import PhaseNotSettledError
from src.ova_ledger.application.schemas import LedgerEntryOut, LedgerSummaryOut
from src.ova_ledger.domain.repository import LedgerRepositoryProtocol
from src.ova_ledger.infrastructure.persistence import LedgerRepository


class LedgerService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def list_entries(self, db: AsyncSession) -> list[LedgerEntryOut]:
        entries = await self._repo.list_entries(db)
        return [LedgerEntryOut.from_domain(e) for e in entries]

    async def summary(self, db: AsyncSession) -> LedgerSummaryOut:
        return LedgerSummaryOut.from_domain(await self._repo.get_summary(db))

    async def get_for_phase(self, db: AsyncSession, phase_id: str) -> LedgerEntryOut:
        """The phase's settlement; a phase that was never settled has none."""
        entry = await self._repo.get_by_phase(db, phase_id)
        if entry is None:
            raise PhaseNotSettledError(phase_id)
        return LedgerEntryOut.from_domain(entry)
