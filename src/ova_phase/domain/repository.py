"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_engine.counters import PhaseCounters
from src.ova_phase.domain.models import Phase


class PhaseRepositoryProtocol(Protocol):
    async def list_phases(self, db: AsyncSession) -> list[Phase]: ...

    async def get_phase(
        self, db: AsyncSession, phase_id: str, for_update: bool = False
    ) -> Phase | None: ...

    async def get_active_phase(self, db: AsyncSession) -> Phase | None: ...

    async def name_exists(self, db: AsyncSession, name: str) -> bool: ...

    async def deactivate_all(self, db: AsyncSession) -> int: ...

    async def insert_phase(
        self, db: AsyncSession, name: str, global_limit: Decimal
    ) -> Phase: ...

    async def activate(self, db: AsyncSession, phase_id: str) -> Phase | None: ...

    async def close(self, db: AsyncSession, phase_id: str) -> Phase | None: ...

    async def delete(self, db: AsyncSession, phase_id: str) -> bool: ...

    async def update_global_limit(
        self, db: AsyncSession, phase_id: str, global_limit: Decimal
    ) -> Phase | None: ...

    async def refresh_counters(self, db: AsyncSession, phase_id: str) -> PhaseCounters: ...
