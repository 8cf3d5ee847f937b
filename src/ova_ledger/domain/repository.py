"""Repository Protocol for the settlement ledger."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_engine.settlement import SettlementSummary
from src.ova_ledger.domain.models import LedgerSummary, SettlementLedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def insert_entry(
        self, db: AsyncSession, phase_id: str, summary: SettlementSummary
    ) -> SettlementLedgerEntry: ...

    async def list_entries(self, db: AsyncSession) -> list[SettlementLedgerEntry]: ...

    async def get_by_phase(
        self, db: AsyncSession, phase_id: str
    ) -> SettlementLedgerEntry | None: ...

    async def get_summary(self, db: AsyncSession) -> LedgerSummary: ...
