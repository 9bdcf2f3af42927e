"""Exponentially smoothed trend weight."""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_insights.domain.weight import TrendWeightUpdate, WeightObservation

SMOOTHING_FACTOR = 0.1

_logger = logging.getLogger(__name__)


class WeightRepository(Protocol):
    """Persistence interface for weight history."""

    def list_weight_history(
        self, user_id: UUID, start: date | None = None
    ) -> list[WeightObservation]:
        """Return weigh-ins ordered by day, optionally from a start day."""

    def update_trend_weights(
        self, user_id: UUID, updates: list[TrendWeightUpdate]
    ) -> None:
        """Persist recomputed trend weights."""


def compute_trend_series(
    observations: list[WeightObservation],
) -> list[TrendWeightUpdate]:
    """Return the trend weight for every observation, ignoring stored values."""
    if not observations:
        return []
    ordered = sorted(observations, key=lambda obs: obs.day)
    return _smooth(ordered, seed=None)


def recompute_trend_from(
    observations: list[WeightObservation], edit_date: date
) -> list[TrendWeightUpdate]:
    """Recompute trend weights from the first weigh-in on or after ``edit_date``.

    Earlier observations are left untouched. The observation right before the
    window seeds the filter with its stored trend; when there is none the
    first window observation starts the series at its own raw weight.
    Only days with an observation are walked, gaps are skipped.
    """
    ordered = sorted(observations, key=lambda obs: obs.day)
    start = next(
        (index for index, obs in enumerate(ordered) if obs.day >= edit_date), None
    )
    if start is None:
        return []
    seed = ordered[start - 1].trend_weight_kg if start > 0 else None
    return _smooth(ordered[start:], seed=seed)


def fill_missing_trend_weights(
    observations: list[WeightObservation],
) -> list[WeightObservation]:
    """Return observations with trends recomputed from the first missing one."""
    ordered = sorted(observations, key=lambda obs: obs.day)
    first_missing = next(
        (obs for obs in ordered if obs.trend_weight_kg is None), None
    )
    if first_missing is None:
        return ordered
    recomputed = {
        update.id: update.trend_weight_kg
        for update in recompute_trend_from(ordered, first_missing.day)
    }
    return [
        replace(obs, trend_weight_kg=recomputed[obs.id])
        if obs.id in recomputed
        else obs
        for obs in ordered
    ]


def _smooth(
    window: list[WeightObservation], seed: float | None
) -> list[TrendWeightUpdate]:
    updates: list[TrendWeightUpdate] = []
    trend = seed
    for obs in window:
        if trend is None:
            trend = obs.weight_kg
        else:
            trend = SMOOTHING_FACTOR * obs.weight_kg + (1 - SMOOTHING_FACTOR) * trend
        updates.append(
            TrendWeightUpdate(id=obs.id, day=obs.day, trend_weight_kg=trend)
        )
    return updates


@dataclass
class TrendWeightService:
    """Recomputes and persists trend weights after a weigh-in changes."""

    repository: WeightRepository
    _write_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def recompute(self, user_id: UUID, edit_date: date) -> list[TrendWeightUpdate]:
        """Recompute trends from ``edit_date`` forward and store them."""
        with self._write_lock:
            history = self.repository.list_weight_history(user_id)
            updates = recompute_trend_from(history, edit_date)
            if updates:
                self.repository.update_trend_weights(user_id, updates)
        _logger.info(
            "Recomputed trend weights: user_id=%s from=%s rows=%s",
            user_id,
            edit_date.isoformat(),
            len(updates),
        )
        return updates
