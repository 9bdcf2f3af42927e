"""Tests for the trend weight smoother."""

from dataclasses import replace
from datetime import date, timedelta
from uuid import uuid4

import pytest

from nutrition_insights.domain.weight import WeightObservation
from nutrition_insights.services.trend_weight import (
    SMOOTHING_FACTOR,
    TrendWeightService,
    compute_trend_series,
    fill_missing_trend_weights,
    recompute_trend_from,
)
from tests.conftest import TODAY, InMemoryWeightRepository, make_weights


def test_compute_trend_series_empty() -> None:
    assert compute_trend_series([]) == []


def test_single_observation_trend_equals_raw() -> None:
    updates = compute_trend_series(make_weights([80.0]))

    assert len(updates) == 1
    assert updates[0].trend_weight_kg == 80.0


def test_trend_moves_a_tenth_toward_new_weight() -> None:
    updates = compute_trend_series(make_weights([80.0, 81.0, 79.0]))

    assert updates[1].trend_weight_kg == pytest.approx(80.1)
    assert updates[2].trend_weight_kg == pytest.approx(
        SMOOTHING_FACTOR * 79.0 + (1 - SMOOTHING_FACTOR) * 80.1
    )


def test_compute_trend_series_sorts_by_day() -> None:
    ordered = make_weights([80.0, 82.0])
    updates = compute_trend_series(list(reversed(ordered)))

    assert [update.id for update in updates] == ["w0", "w1"]
    assert updates[1].trend_weight_kg == pytest.approx(80.2)


def test_gaps_are_walked_over_not_filled() -> None:
    observations = make_weights([80.0, 81.0], step_days=10)

    updates = compute_trend_series(observations)

    assert len(updates) == 2
    assert updates[1].trend_weight_kg == pytest.approx(80.1)


def test_recompute_seeds_from_previous_stored_trend() -> None:
    observations = make_weights([80.0, 81.0, 82.0])
    observations[0] = replace(observations[0], trend_weight_kg=79.5)

    updates = recompute_trend_from(observations, observations[1].day)

    assert [update.id for update in updates] == ["w1", "w2"]
    assert updates[0].trend_weight_kg == pytest.approx(0.1 * 81.0 + 0.9 * 79.5)


def test_recompute_starts_at_raw_weight_when_previous_trend_missing() -> None:
    observations = [
        WeightObservation("a", date(2025, 1, 1), 80.0),
        WeightObservation("b", date(2025, 1, 2), 90.0),
    ]

    updates = recompute_trend_from(observations, date(2025, 1, 2))

    assert [update.id for update in updates] == ["b"]
    assert updates[0].trend_weight_kg == 90.0


def test_recompute_after_last_observation_is_empty() -> None:
    observations = make_weights([80.0, 81.0])

    assert recompute_trend_from(observations, TODAY + timedelta(days=1)) == []


def test_recompute_does_not_mutate_input() -> None:
    observations = make_weights([80.0, 81.0, 82.0])
    snapshot = list(observations)

    recompute_trend_from(observations, observations[0].day)

    assert observations == snapshot
    assert all(obs.trend_weight_kg is None for obs in observations)


def test_recompute_is_idempotent() -> None:
    observations = make_weights([80.0, 80.6, 79.8, 80.4])
    stored = [
        replace(obs, trend_weight_kg=update.trend_weight_kg)
        for obs, update in zip(observations, compute_trend_series(observations))
    ]
    first = recompute_trend_from(stored, stored[1].day)
    rewritten = stored[:1] + [
        replace(obs, trend_weight_kg=update.trend_weight_kg)
        for obs, update in zip(stored[1:], first)
    ]

    second = recompute_trend_from(rewritten, rewritten[1].day)

    assert [u.trend_weight_kg for u in second] == pytest.approx(
        [u.trend_weight_kg for u in first]
    )


def test_fill_missing_keeps_stored_prefix() -> None:
    observations = [
        WeightObservation("a", date(2025, 1, 1), 80.0, trend_weight_kg=80.0),
        WeightObservation("b", date(2025, 1, 2), 81.0, trend_weight_kg=80.1),
        WeightObservation("c", date(2025, 1, 3), 82.0),
    ]

    filled = fill_missing_trend_weights(observations)

    assert filled[0].trend_weight_kg == 80.0
    assert filled[1].trend_weight_kg == 80.1
    assert filled[2].trend_weight_kg == pytest.approx(0.1 * 82.0 + 0.9 * 80.1)


def test_service_recompute_persists_updates() -> None:
    user_id = uuid4()
    repo = InMemoryWeightRepository(observations=make_weights([80.0, 81.0, 82.0]))
    service = TrendWeightService(repo)

    updates = service.recompute(user_id, TODAY - timedelta(days=2))

    assert len(updates) == 3
    assert len(repo.writes) == 1
    assert repo.observations[-1].trend_weight_kg == pytest.approx(
        updates[-1].trend_weight_kg
    )


def test_service_recompute_without_history_skips_write() -> None:
    repo = InMemoryWeightRepository()
    service = TrendWeightService(repo)

    assert service.recompute(uuid4(), TODAY) == []
    assert repo.writes == []
