"""Pydantic schemas for ova_ledger responses."""

from pydantic import BaseModel

from src.ova_common.amounts import AmountOut
from src.ova_common.datetime_utils import iso_or_none
from src.ova_ledger.domain.models import LedgerSummary, SettlementLedgerEntry


class LedgerEntryOut(BaseModel):
    id: str
    phase_id: str
    phase_name: str | None
    winning_number: str | None
    total_in: AmountOut
    total_out: AmountOut
    profit: AmountOut
    closed_at: str | None

    @classmethod
    def from_domain(cls, entry: SettlementLedgerEntry) -> "LedgerEntryOut":
        return cls(
            id=entry.id,
            phase_id=entry.phase_id,
            phase_name=entry.phase_name,
            winning_number=entry.winning_number,
            total_in=entry.total_in,
            total_out=entry.total_out,
            profit=entry.profit,
            closed_at=iso_or_none(entry.closed_at),
        )


class LedgerSummaryOut(BaseModel):
    total_in: AmountOut
    total_out: AmountOut
    total_profit: AmountOut
    phases_count: int

    @classmethod
    def from_domain(cls, summary: LedgerSummary) -> "LedgerSummaryOut":
        return cls(
            total_in=summary.total_in,
            total_out=summary.total_out,
            total_profit=summary.total_profit,
            phases_count=summary.phases_count,
        )
