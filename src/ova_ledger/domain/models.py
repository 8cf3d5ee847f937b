"""Domain models for ova_ledger."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class SettlementLedgerEntry:
    id: str
    phase_id: str
    phase_name: str | None
    winning_number: str | None
    total_in: Decimal
    total_out: Decimal
    profit: Decimal
    closed_at: datetime


@dataclass
class LedgerSummary:
    total_in: Decimal
    total_out: Decimal
    total_profit: Decimal
    phases_count: int
