"""Phase counter derivation and drift detection.

Phase.total_bets / total_volume are a cache of the bet rows. The persistence
layer rewrites them from SQL aggregates inside every mutating transaction;
these helpers give the same numbers in Python so the cache can be audited.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from src.ova_engine.models import Amount, StakeLike

# Cached volume never goes below this, wherever it is written.
VOLUME_FLOOR = Decimal(-10_000_000)


def clamp_volume(volume: Amount) -> Amount:
    return max(volume, VOLUME_FLOOR)


@dataclass
class PhaseCounters:
    total_bets: int
    total_volume: Amount


@dataclass
class CounterDrift:
    cached: PhaseCounters
    derived: PhaseCounters

    @property
    def has_drift(self) -> bool:
        return (
            self.cached.total_bets != self.derived.total_bets
            or self.cached.total_volume != self.derived.total_volume
        )


def derive_counters(bets: Sequence[StakeLike]) -> PhaseCounters:
    """Row count and clamped amount sum, ADJ/EXC included."""
    volume = sum((b.amount for b in bets), Decimal(0))
    return PhaseCounters(total_bets=len(bets), total_volume=clamp_volume(volume))


def detect_counter_drift(cached: PhaseCounters, bets: Sequence[StakeLike]) -> CounterDrift:
    return CounterDrift(cached=cached, derived=derive_counters(bets))
