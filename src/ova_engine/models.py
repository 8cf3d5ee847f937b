"""Engine value types: plain dataclasses, no storage knowledge."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

Amount = Decimal | int


class StakeLike(Protocol):
    """Anything with a number code and a signed amount (Bet rows, Stake, ...)."""

    @property
    def number(self) -> str: ...

    @property
    def amount(self) -> Amount: ...


@dataclass(frozen=True)
class Stake:
    """An elementary {number, amount} pair to be persisted as a new bet."""

    number: str
    amount: Amount


@dataclass(frozen=True)
class ParsedBetEntry:
    number: str
    amount: int
    original: str  # source notation substring; shared by one notation's entries
    is_permutation: bool

    def to_stake(self) -> Stake:
        return Stake(number=self.number, amount=self.amount)
