"""Tests for macro split and target resolution."""

import pytest

from nutrition_insights.domain.nutrition import (
    DEFAULT_MACRO_TARGETS,
    GoalSummary,
    MacroTargets,
)
from nutrition_insights.services.macros import (
    calculate_macro_breakdown,
    calculate_macros,
    resolve_macro_targets,
    validate_macros,
)


def test_flexible_active_split() -> None:
    targets = calculate_macros(80, 2000, "flexible", "active")

    assert targets == MacroTargets(calories=2000, protein=132, carbs=184, fat=82)


def test_carb_cap_moves_overflow_to_fat() -> None:
    breakdown = calculate_macro_breakdown(80, 3000, "fat_focused", "athletic")

    assert breakdown.carb_cap_applied is True
    assert breakdown.targets.protein == 158
    assert breakdown.targets.carbs == 150
    assert breakdown.targets.fat == 196


def test_carb_cap_not_applied_below_cap() -> None:
    breakdown = calculate_macro_breakdown(80, 2000, "very_low_carb", "standard")

    assert breakdown.carb_cap_applied is False
    assert breakdown.targets.carbs == 39
    assert breakdown.targets.fat == 158


def test_breakdown_percentages_sum_close_to_100() -> None:
    breakdown = calculate_macro_breakdown(80, 2000, "flexible", "active")

    total = breakdown.protein_percent + breakdown.carbs_percent + breakdown.fat_percent
    assert 99 <= total <= 101


def test_unknown_eating_style_raises() -> None:
    with pytest.raises(ValueError, match="eating style"):
        calculate_macros(80, 2000, "carnivore", "active")


def test_unknown_protein_priority_raises() -> None:
    with pytest.raises(ValueError, match="protein priority"):
        calculate_macros(80, 2000, "flexible", "extreme")


def test_validate_macros_flags_low_fat_and_mismatch() -> None:
    warnings = validate_macros(
        MacroTargets(calories=2000, protein=150, carbs=300, fat=10)
    )

    assert any("Fat is very low" in warning for warning in warnings)
    assert any("differ significantly" in warning for warning in warnings)


def test_resolve_prefers_active_goal() -> None:
    goal = GoalSummary(
        type="lose",
        target_calories=1800,
        target_protein=160,
        target_carbs=150,
        target_fat=60,
    )

    targets = resolve_macro_targets(goal, {"calories": 2500})

    assert targets == MacroTargets(calories=1800, protein=160, carbs=150, fat=60)


def test_resolve_falls_back_per_field() -> None:
    targets = resolve_macro_targets(None, {"calories": 2200, "protein": 0})

    assert targets.calories == 2200
    assert targets.protein == DEFAULT_MACRO_TARGETS.protein
    assert targets.carbs == DEFAULT_MACRO_TARGETS.carbs


def test_resolve_defaults_without_any_source() -> None:
    assert resolve_macro_targets(None, None) == MacroTargets(
        calories=2000, protein=150, carbs=200, fat=65
    )
