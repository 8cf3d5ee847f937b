"""Repository Protocol for per-number limits."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class LimitRepositoryProtocol(Protocol):
    async def list_limits(self, db: AsyncSession, phase_id: str) -> dict[str, Decimal]: ...

    async def upsert_limits(
        self, db: AsyncSession, phase_id: str, limits: list[tuple[str, Decimal]]
    ) -> int: ...

    async def delete_limit(self, db: AsyncSession, phase_id: str, number: str) -> bool: ...
