"""Exposure aggregation over the fixed 000–999 board.

Pure reduce: the board is rebuilt from the full bet list on every read and is
never incrementally maintained here.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from src.ova_engine.models import Amount, StakeLike
from src.ova_engine.settlement import PAYOUT_MULTIPLIER
from src.ova_engine.slots import (
    SLOT_COUNT,
    MalformedNumberError,
    NumberSlot,
    SlotKind,
    format_number,
)


def _zero_board() -> list[Amount]:
    return [Decimal(0)] * SLOT_COUNT


@dataclass
class ExposureBoard:
    """Running totals per number plus the two reserved scalar totals."""

    totals: list[Amount] = field(default_factory=_zero_board)
    manual_adjustment_total: Amount = Decimal(0)  # ADJ
    excess_adjustment_total: Amount = Decimal(0)  # EXC

    def __getitem__(self, number: str) -> Amount:
        slot = NumberSlot.parse(number)
        if not slot.is_direct:
            raise MalformedNumberError(f"{number} is not a board number")
        return self.totals[slot.index]  # type: ignore[index]

    def items(self) -> list[tuple[str, Amount]]:
        """(number, total) for all 1000 slots, number ascending."""
        return [(format_number(i), t) for i, t in enumerate(self.totals)]

    def as_dict(self) -> dict[str, Amount]:
        return dict(self.items())

    @property
    def board_total(self) -> Amount:
        """Sum of the 1000 slots (ADJ and EXC excluded)."""
        return sum(self.totals, Decimal(0))

    @property
    def grand_total(self) -> Amount:
        """Board plus ADJ: the volume figure shown on the risk board."""
        return self.board_total + self.manual_adjustment_total


def aggregate_exposure(bets: Iterable[StakeLike]) -> ExposureBoard:
    """Sum every bet amount (negative reductions included) into its slot.

    Raises MalformedNumberError on a number that is neither 000-999 nor a
    reserved code; stored rows are constrained by the bets CHECK.
    """
    board = ExposureBoard()
    for bet in bets:
        slot = NumberSlot.parse(bet.number)
        if slot.kind is SlotKind.DIRECT:
            board.totals[slot.index] += bet.amount  # type: ignore[index]
        elif slot.kind is SlotKind.MANUAL_ADJUSTMENT:
            board.manual_adjustment_total += bet.amount
        else:
            board.excess_adjustment_total += bet.amount
    return board


@dataclass
class HotNumber:
    number: str
    total: Amount
    potential_payout: Amount


def top_exposure(board: ExposureBoard, count: int = 20) -> list[HotNumber]:
    """Numbers with positive exposure, largest first, ties by number."""
    ranked = sorted(
        ((n, t) for n, t in board.items() if t > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return [
        HotNumber(number=n, total=t, potential_payout=t * PAYOUT_MULTIPLIER)
        for n, t in ranked[:count]
    ]
