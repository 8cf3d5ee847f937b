"""Domain models for ova_bet."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Bet:
    id: str
    phase_id: str
    user_id: str
    user_role: str
    number: str  # '000'..'999', 'ADJ' or 'EXC'
    amount: Decimal  # negative = reduction
    timestamp: datetime
    username: str | None = None
    phase_name: str | None = None  # set by the per-user history query


@dataclass
class NumberTotal:
    number: str
    total: Decimal
