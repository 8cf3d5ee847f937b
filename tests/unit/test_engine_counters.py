"""Unit tests for phase counter derivation and drift detection."""

from decimal import Decimal

from src.ova_engine.counters import (
    VOLUME_FLOOR,
    PhaseCounters,
    clamp_volume,
    derive_counters,
    detect_counter_drift,
)
from src.ova_engine.models import Stake


def test_derive_counts_every_row_including_reserved() -> None:
    counters = derive_counters([Stake("123", 100), Stake("ADJ", 50), Stake("123", -30)])
    assert counters == PhaseCounters(total_bets=3, total_volume=Decimal(120))


def test_volume_is_clamped_at_floor() -> None:
    counters = derive_counters([Stake("123", Decimal(-20_000_000))])
    assert counters.total_volume == VOLUME_FLOOR
    assert clamp_volume(Decimal(-5)) == Decimal(-5)


def test_drift_detected_when_cache_is_stale() -> None:
    drift = detect_counter_drift(PhaseCounters(2, Decimal(100)), [Stake("123", 100)])
    assert drift.has_drift
    assert drift.derived.total_bets == 1


def test_no_drift_when_cache_matches() -> None:
    drift = detect_counter_drift(PhaseCounters(1, Decimal(100)), [Stake("123", Decimal(100))])
    assert not drift.has_drift
