"""Pydantic schemas for ova_bet.

Number/amount business rules (padding, reserved codes, non-zero) are checked
by BetService so they surface as 3xxx AppErrors rather than generic 422s.
"""

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from src.ova_bet.domain.models import Bet, NumberTotal
from src.ova_common.amounts import AmountOut
from src.ova_common.datetime_utils import iso_or_none
from src.ova_common.enums import TextSource
from src.ova_engine.models import ParsedBetEntry

MAX_TEXT_LENGTH = 20_000
MAX_BULK_SIZE = 5_000

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class BetIn(BaseModel):
    number: str = Field(..., min_length=1, max_length=3)
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)


class CreateBetRequest(BetIn):
    phase_id: uuid.UUID


class BulkBetRequest(BaseModel):
    phase_id: uuid.UUID
    bets: list[BetIn] = Field(..., min_length=1, max_length=MAX_BULK_SIZE)


class ParseTextRequest(BaseModel):
    text: str = Field(..., max_length=MAX_TEXT_LENGTH)
    source: TextSource = TextSource.TYPED


class SubmitTextRequest(ParseTextRequest):
    phase_id: uuid.UUID


class UpdateBetAmountRequest(BaseModel):
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BetOut(BaseModel):
    id: str
    phase_id: str
    user_id: str
    username: str | None
    user_role: str
    number: str
    amount: AmountOut
    timestamp: str | None

    @classmethod
    def from_domain(cls, bet: Bet) -> "BetOut":
        return cls(
            id=bet.id,
            phase_id=bet.phase_id,
            user_id=bet.user_id,
            username=bet.username,
            user_role=bet.user_role,
            number=bet.number,
            amount=bet.amount,
            timestamp=iso_or_none(bet.timestamp),
        )


class UserBetOut(BetOut):
    """A bet in a user's cross-phase history."""

    phase_name: str | None

    @classmethod
    def from_domain(cls, bet: Bet) -> "UserBetOut":
        return cls(
            **BetOut.from_domain(bet).model_dump(),
            phase_name=bet.phase_name,
        )


class NumberTotalOut(BaseModel):
    number: str
    total: AmountOut

    @classmethod
    def from_domain(cls, item: NumberTotal) -> "NumberTotalOut":
        return cls(number=item.number, total=item.total)


class ParsedEntryOut(BaseModel):
    number: str
    amount: int
    original: str
    is_permutation: bool

    @classmethod
    def from_entry(cls, entry: ParsedBetEntry) -> "ParsedEntryOut":
        return cls(
            number=entry.number,
            amount=entry.amount,
            original=entry.original,
            is_permutation=entry.is_permutation,
        )


class ParsedGroupOut(BaseModel):
    """One notation as the operator wrote it, with its expanded size and stake."""

    original: str
    entry_count: int
    total_amount: int


class ParsePreviewResponse(BaseModel):
    source: str
    normalized_text: str
    entries: list[ParsedEntryOut]
    groups: list[ParsedGroupOut]
    entry_count: int
    total_amount: int


class BetBatchResponse(BaseModel):
    created: int
    total_amount: AmountOut
    bets: list[BetOut]
    phase_total_bets: int
    phase_total_volume: AmountOut
