"""Domain models for body weight tracking."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class WeightObservation:
    """A single weigh-in; at most one per calendar day."""

    id: str
    day: date
    weight_kg: float
    trend_weight_kg: float | None = None


@dataclass(frozen=True)
class TrendWeightUpdate:
    """Recomputed trend weight for a stored observation."""

    id: str
    day: date
    trend_weight_kg: float
