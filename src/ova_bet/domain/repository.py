"""Repository Protocol for bets."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.domain.models import Bet, NumberTotal
from src.ova_engine.models import Stake


class BetRepositoryProtocol(Protocol):
    async def list_bets(
        self, db: AsyncSession, phase_id: str, user_id: str | None = None
    ) -> list[Bet]: ...

    async def aggregate_by_number(self, db: AsyncSession, phase_id: str) -> list[NumberTotal]: ...

    async def insert_bets(
        self,
        db: AsyncSession,
        phase_id: str,
        user_id: str,
        user_role: str,
        stakes: list[Stake],
    ) -> list[Bet]: ...

    async def list_user_history(
        self, db: AsyncSession, user_id: str, limit: int = 100
    ) -> list[Bet]: ...

    async def list_user_phase_ids(self, db: AsyncSession, user_id: str) -> list[str]: ...

    async def get_bet(self, db: AsyncSession, bet_id: str) -> Bet | None: ...

    async def delete_bet(self, db: AsyncSession, bet_id: str) -> bool: ...

    async def update_amount(
        self, db: AsyncSession, bet_id: str, amount: Decimal
    ) -> Bet | None: ...
