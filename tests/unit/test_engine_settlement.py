"""Unit tests for phase settlement."""

from decimal import Decimal

import pytest

from src.ova_engine.models import Stake
from src.ova_engine.settlement import PAYOUT_MULTIPLIER, settle_phase
from src.ova_engine.slots import MalformedNumberError


def test_winning_number_pays_eighty_times() -> None:
    bets = [Stake("123", Decimal(1000)), Stake("456", Decimal(2000))]
    summary = settle_phase(bets, "123")
    assert summary.total_in == Decimal(3000)
    assert summary.total_out == Decimal(80000)
    assert summary.profit == Decimal(-77000)
    assert summary.winning_stake == Decimal(1000)


def test_no_winning_number_means_no_payout() -> None:
    summary = settle_phase([Stake("123", 1000), Stake("456", 2000)])
    assert summary.total_out == 0
    assert summary.profit == summary.total_in == 3000
    assert summary.winning_number is None


def test_reductions_are_ignored() -> None:
    bets = [Stake("123", 1000), Stake("123", -400), Stake("456", -50)]
    summary = settle_phase(bets, "123")
    assert summary.total_in == 1000
    assert summary.total_out == 1000 * PAYOUT_MULTIPLIER


def test_adjustments_count_as_stake_in() -> None:
    summary = settle_phase([Stake("ADJ", 500), Stake("EXC", 100), Stake("001", 10)], "001")
    assert summary.total_in == 610
    assert summary.total_out == 800


def test_reserved_code_cannot_win() -> None:
    with pytest.raises(MalformedNumberError):
        settle_phase([], "ADJ")


def test_empty_phase() -> None:
    summary = settle_phase([], "000")
    assert (summary.total_in, summary.total_out, summary.profit) == (0, 0, 0)
