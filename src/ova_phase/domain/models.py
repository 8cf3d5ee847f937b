"""Domain models for ova_phase: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.ova_common.enums import PhaseStatus


@dataclass
class Phase:
    id: str
    name: str
    active: bool
    start_date: datetime
    end_date: datetime | None
    total_bets: int
    total_volume: Decimal
    global_limit: Decimal  # 0 = unset, engine falls back to its default
    settled: bool  # a settlement_ledger row exists
    created_at: datetime
    updated_at: datetime

    @property
    def status(self) -> PhaseStatus:
        if self.settled:
            return PhaseStatus.SETTLED
        if not self.active:
            return PhaseStatus.INACTIVE
        if self.total_bets == 0:
            return PhaseStatus.DRAFT
        return PhaseStatus.ACTIVE

    @property
    def accepts_bets(self) -> bool:
        return self.active and not self.settled
