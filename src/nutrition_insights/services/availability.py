"""Data availability tiers for calibrating generated text."""

from nutrition_insights.domain.context import DataAvailability, DataTier
from nutrition_insights.domain.nutrition import RawNutritionData

MIN_DAYS_MODERATE = 3
MIN_DAYS_HIGH = 7
MIN_WEEKS_HIGH = 2
MIN_DAYS_PER_WEEK = 3
MIN_WEIGHT_POINTS = 3


def compute_data_availability(raw: RawNutritionData) -> DataAvailability:
    """Classify how much history exists and build matching guidance text."""
    days_logged = len(raw.daily_logs)
    weeks_with_data = sum(
        1 for week in raw.weekly_averages if week.days_logged >= MIN_DAYS_PER_WEEK
    )
    has_weight_data = len(raw.weight_history) >= MIN_WEIGHT_POINTS
    has_meal_timing_data = bool(raw.meal_patterns)

    tier: DataTier
    if days_logged == 0:
        tier = "none"
    elif days_logged < MIN_DAYS_MODERATE:
        tier = "minimal"
    elif days_logged < MIN_DAYS_HIGH or weeks_with_data < MIN_WEEKS_HIGH:
        tier = "moderate"
    else:
        tier = "high"

    return DataAvailability(
        tier=tier,
        days_logged=days_logged,
        weeks_with_data=weeks_with_data,
        has_weight_data=has_weight_data,
        has_meal_timing_data=has_meal_timing_data,
        prompt_guidance=_guidance(tier, days_logged, has_weight_data),
    )


def _guidance(tier: DataTier, days_logged: int, has_weight_data: bool) -> str:
    if tier == "none":
        return (
            "DATA AVAILABILITY: NONE\n"
            "The user has not logged any nutrition data yet. Do not reference "
            "numbers or patterns. Encourage them to log a few days of meals."
        )
    if tier == "minimal":
        return (
            "DATA AVAILABILITY: MINIMAL\n"
            f"Only {days_logged} days logged. Comment on today's intake only and "
            "avoid trend claims. Mention that insights improve with more logging."
        )
    if tier == "moderate":
        return (
            "DATA AVAILABILITY: MODERATE\n"
            f"{days_logged} days logged. Early patterns may be emerging; phrase "
            "observations tentatively (\"so far\", \"early signs\")."
        )
    weight_note = (
        "With weight data available, the weight trend may be related to intake."
        if has_weight_data
        else "No reliable weight data; do not comment on weight changes."
    )
    return (
        "DATA AVAILABILITY: HIGH\n"
        f"{days_logged} days logged across multiple weeks. Trends and "
        f"week-over-week comparisons are reliable. {weight_note}"
    )
