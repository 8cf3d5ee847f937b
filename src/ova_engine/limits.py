"""Limit & excess engine.

Effective limit for a number: its own limit if one is set, else the phase's
global limit if non-zero, else DEFAULT_GLOBAL_LIMIT.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from src.ova_engine.aggregator import ExposureBoard
from src.ova_engine.models import Amount, Stake
from src.ova_engine.slots import format_number

DEFAULT_GLOBAL_LIMIT = Decimal(5000)


@dataclass
class LimitPolicy:
    per_number: Mapping[str, Amount] = field(default_factory=dict)
    global_limit: Amount | None = None

    def effective_limit(self, number: str) -> Amount:
        if number in self.per_number:
            return self.per_number[number]
        if self.global_limit:
            return self.global_limit
        return DEFAULT_GLOBAL_LIMIT


@dataclass
class BoardRow:
    number: str
    total: Amount
    limit: Amount
    excess: Amount


@dataclass
class ExcessReport:
    rows: list[BoardRow]  # only excess > 0, number ascending
    base_excess: Amount
    excess_adjustment: Amount  # EXC scalar

    @property
    def total_excess(self) -> Amount:
        return self.base_excess + self.excess_adjustment

    def by_number(self) -> list[BoardRow]:
        return list(self.rows)

    def by_excess(self) -> list[BoardRow]:
        """Top risk first; ties keep number order."""
        return sorted(self.rows, key=lambda r: (-r.excess, r.number))


@dataclass
class ClearExcessPlan:
    corrections: list[Stake]
    total_reduction: Amount

    @property
    def is_empty(self) -> bool:
        return not self.corrections


def full_board(board: ExposureBoard, policy: LimitPolicy) -> list[BoardRow]:
    """All 1000 numbers with limit and excess, number ascending."""
    rows: list[BoardRow] = []
    for index, total in enumerate(board.totals):
        number = format_number(index)
        limit = policy.effective_limit(number)
        excess = max(total - limit, Decimal(0))
        rows.append(BoardRow(number=number, total=total, limit=limit, excess=excess))
    return rows


def excess_report(board: ExposureBoard, policy: LimitPolicy) -> ExcessReport:
    rows = [r for r in full_board(board, policy) if r.excess > 0]
    return ExcessReport(
        rows=rows,
        base_excess=sum((r.excess for r in rows), Decimal(0)),
        excess_adjustment=board.excess_adjustment_total,
    )


def plan_clear_excess(board: ExposureBoard, policy: LimitPolicy) -> ClearExcessPlan:
    """Negative corrections that bring every number back to exactly its limit."""
    report = excess_report(board, policy)
    corrections = [Stake(number=r.number, amount=-r.excess) for r in report.rows]
    return ClearExcessPlan(corrections=corrections, total_reduction=report.base_excess)
