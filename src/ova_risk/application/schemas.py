"""Pydantic schemas for ova_risk."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from src.ova_common.amounts import AmountOut
from src.ova_engine.aggregator import HotNumber
from src.ova_engine.limits import BoardRow

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class LimitItem(BaseModel):
    number: str = Field(..., min_length=1, max_length=3)
    max_amount: Decimal


class SetLimitRequest(LimitItem):
    phase_id: uuid.UUID


class BulkSetLimitsRequest(BaseModel):
    phase_id: uuid.UUID
    limits: list[LimitItem] = Field(..., min_length=1, max_length=1000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class LimitOut(BaseModel):
    number: str
    max_amount: AmountOut


class LimitsResponse(BaseModel):
    phase_id: str
    global_limit: AmountOut
    limits: list[LimitOut]


class HotNumberOut(BaseModel):
    number: str
    total: AmountOut
    potential_payout: AmountOut

    @classmethod
    def from_domain(cls, hot: HotNumber) -> "HotNumberOut":
        return cls(number=hot.number, total=hot.total, potential_payout=hot.potential_payout)


class RiskOverviewResponse(BaseModel):
    phase_id: str
    top_numbers: list[HotNumberOut]
    total_bets: int  # positive stakes only
    total_volume: AmountOut  # positive stakes only
    net_volume: AmountOut  # board plus ADJ, reductions netted
    payout_multiplier: int


class BoardRowOut(BaseModel):
    number: str
    total: AmountOut
    limit: AmountOut
    excess: AmountOut

    @classmethod
    def from_domain(cls, row: BoardRow) -> "BoardRowOut":
        return cls(number=row.number, total=row.total, limit=row.limit, excess=row.excess)


class BoardResponse(BaseModel):
    phase_id: str
    rows: list[BoardRowOut]
    board_total: AmountOut
    manual_adjustment_total: AmountOut
    excess_adjustment_total: AmountOut
    grand_total: AmountOut


class ExcessResponse(BaseModel):
    phase_id: str
    sort: str
    rows: list[BoardRowOut]
    base_excess: AmountOut
    excess_adjustment: AmountOut
    total_excess: AmountOut


class CorrectionOut(BaseModel):
    number: str
    amount: AmountOut


class ClearExcessResponse(BaseModel):
    cleared: bool
    message: str
    corrections: list[CorrectionOut] = []
    total_reduction: AmountOut = Decimal(0)
    phase_total_volume: AmountOut | None = None
