"""Phase settlement: stakes in, payout out, profit.

Pure computation; the caller persists the ledger row and closes the phase in
one transaction.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from src.ova_engine.models import Amount, StakeLike
from src.ova_engine.slots import MalformedNumberError, NumberSlot

# A winning 3-digit number pays 80 units per unit staked.
PAYOUT_MULTIPLIER = 80


@dataclass
class SettlementSummary:
    total_in: Amount
    total_out: Amount
    profit: Amount
    winning_number: str | None
    winning_stake: Amount


def settle_phase(
    bets: Iterable[StakeLike],
    winning_number: str | None = None,
) -> SettlementSummary:
    """Settle over positive-amount bets only; reductions and voids are ignored.

    total_in counts every positive stake, ADJ/EXC included.
    """
    if winning_number is not None and not NumberSlot.parse(winning_number).is_direct:
        raise MalformedNumberError(f"winning number must be 000-999, got {winning_number!r}")

    total_in: Amount = Decimal(0)
    winning_stake: Amount = Decimal(0)
    for bet in bets:
        if bet.amount <= 0:
            continue
        total_in += bet.amount
        if winning_number is not None and bet.number == winning_number:
            winning_stake += bet.amount

    total_out = winning_stake * PAYOUT_MULTIPLIER
    return SettlementSummary(
        total_in=total_in,
        total_out=total_out,
        profit=total_in - total_out,
        winning_number=winning_number,
        winning_stake=winning_stake,
    )
