"""Tests for context formatting."""

from nutrition_insights.domain.nutrition import (
    FrequentFood,
    GoalSummary,
    ProfileSummary,
    RawNutritionData,
)
from nutrition_insights.services.context import build_unified_context
from nutrition_insights.services.formatter import (
    convert_weight,
    format_nutrition_context,
    format_weight_delta,
)
from tests.conftest import TODAY, make_logs, make_weights


def test_empty_context_has_core_sections_only() -> None:
    text = format_nutrition_context(build_unified_context(RawNutritionData(), TODAY))

    for header in (
        "USER PROFILE:",
        "TODAY'S PROGRESS:",
        "WEEKLY TRENDS (last 7 days):",
        "CONSISTENCY:",
        "MEAL DISTRIBUTION:",
    ):
        assert header in text
    assert "WEIGHT TREND:" not in text
    assert "LOCALLY COMPUTED OBSERVATIONS" not in text
    assert "USER'S FREQUENT FOODS:" not in text
    assert "Largest meal: n/a" in text
    assert "\n\nTODAY'S PROGRESS:" in text


def test_profile_defaults_and_labels() -> None:
    raw = RawNutritionData(
        goal=GoalSummary("lose", 1800, 160, 150, 60),
        profile=ProfileSummary(eating_style="fat_focused"),
        weight_unit="kg",
    )

    text = format_nutrition_context(build_unified_context(raw, TODAY))

    assert "Nutrition goal: Weight loss (calorie deficit)" in text
    assert "Activity level: moderately active" in text
    assert "Eating style: fat focused" in text
    assert "Units: kg" in text


def test_weight_section_converted_to_pounds() -> None:
    raw = RawNutritionData(weight_history=make_weights([80.0] * 10))

    text = format_nutrition_context(build_unified_context(raw, TODAY))

    assert "WEIGHT TREND:" in text
    assert "Current weight: 176.4 lbs" in text
    assert "Change (7 days): 0.0 lbs" in text
    assert "Direction: maintaining" in text


def test_optional_sections_respect_flags() -> None:
    raw = RawNutritionData(
        daily_logs=make_logs(7, fiber=10),
        frequent_foods=[FrequentFood("Greek yogurt", 12, 150)],
    )
    ctx = build_unified_context(raw, TODAY)

    full = format_nutrition_context(ctx)
    trimmed = format_nutrition_context(
        ctx, include_derived=False, include_frequent_foods=False
    )

    assert "- [fiber]" in full
    assert "- Greek yogurt: logged 12 times, ~150 kcal avg" in full
    assert "LOCALLY COMPUTED OBSERVATIONS" not in trimmed
    assert "USER'S FREQUENT FOODS:" not in trimmed


def test_convert_weight() -> None:
    assert convert_weight(80, "lbs") == 176.4
    assert convert_weight(80.04, "kg") == 80.0


def test_weight_delta_sign() -> None:
    assert format_weight_delta(0.5, "kg") == "+0.5 kg"
    assert format_weight_delta(-0.5, "lbs") == "-1.1 lbs"
    assert format_weight_delta(0.0, "kg") == "0.0 kg"
    assert format_weight_delta(-0.01, "kg") == "0.0 kg"
