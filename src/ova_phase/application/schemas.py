"""Pydantic schemas for ova_phase API requests and responses.

Amounts are Decimal internally; dump with mode="json" to emit JSON numbers.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.ova_common.amounts import AmountOut
from src.ova_common.datetime_utils import iso_or_none
from src.ova_engine.counters import CounterDrift
from src.ova_engine.settlement import SettlementSummary
from src.ova_phase.domain.models import Phase


class CreatePhaseRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    global_limit: Decimal = Field(Decimal(0), ge=0, decimal_places=2)


class ClosePhaseRequest(BaseModel):
    winning_number: str | None = Field(None, pattern=r"^[0-9]{3}$")


class UpdateGlobalLimitRequest(BaseModel):
    global_limit: Decimal = Field(..., ge=0, decimal_places=2)


class PhaseDetail(BaseModel):
    id: str
    name: str
    status: str
    active: bool
    settled: bool
    start_date: str | None
    end_date: str | None
    total_bets: int
    total_volume: AmountOut
    global_limit: AmountOut
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, phase: Phase) -> "PhaseDetail":
        return cls(
            id=phase.id,
            name=phase.name,
            status=phase.status.value,
            active=phase.active,
            settled=phase.settled,
            start_date=iso_or_none(phase.start_date),
            end_date=iso_or_none(phase.end_date),
            total_bets=phase.total_bets,
            total_volume=phase.total_volume,
            global_limit=phase.global_limit,
            created_at=iso_or_none(phase.created_at),
            updated_at=iso_or_none(phase.updated_at),
        )


class SettlementOut(BaseModel):
    total_in: AmountOut
    total_out: AmountOut
    profit: AmountOut
    winning_number: str | None
    winning_stake: AmountOut

    @classmethod
    def from_summary(cls, summary: SettlementSummary) -> "SettlementOut":
        return cls(
            total_in=summary.total_in,
            total_out=summary.total_out,
            profit=summary.profit,
            winning_number=summary.winning_number,
            winning_stake=summary.winning_stake,
        )


class ClosePhaseResponse(BaseModel):
    phase: PhaseDetail
    settlement: SettlementOut


class CountersOut(BaseModel):
    total_bets: int
    total_volume: AmountOut


class CounterCheckResponse(BaseModel):
    phase_id: str
    cached: CountersOut
    derived: CountersOut
    has_drift: bool
    repaired: bool

    @classmethod
    def from_drift(
        cls, phase_id: str, drift: CounterDrift, repaired: bool
    ) -> "CounterCheckResponse":
        return cls(
            phase_id=phase_id,
            cached=CountersOut(
                total_bets=drift.cached.total_bets,
                total_volume=drift.cached.total_volume,
            ),
            derived=CountersOut(
                total_bets=drift.derived.total_bets,
                total_volume=drift.derived.total_volume,
            ),
            has_drift=drift.has_drift,
            repaired=repaired,
        )
