"""Render the unified context as labeled plain-text sections."""

from nutrition_insights.domain.context import ContextProfile, UnifiedNutritionContext
from nutrition_insights.domain.insights import DerivedInsight
from nutrition_insights.domain.metrics import (
    Consistency,
    MacroProgress,
    MealDistribution,
    TodayProgress,
    WeeklyTrends,
    WeightTrend,
)
from nutrition_insights.domain.nutrition import MEAL_TYPES, FrequentFood

LBS_PER_KG = 2.20462

_GOAL_LABELS = {
    "lose": "Weight loss (calorie deficit)",
    "gain": "Muscle gain (calorie surplus)",
    "maintain": "Maintenance",
}

_MEAL_LABELS = {
    "breakfast": "Breakfast",
    "lunch": "Lunch",
    "dinner": "Dinner",
    "snack": "Snacks",
}


def format_nutrition_context(
    ctx: UnifiedNutritionContext,
    *,
    include_derived: bool = True,
    include_frequent_foods: bool = True,
) -> str:
    """Join every available section with blank lines.

    Optional sections are omitted when their data is missing, regardless of
    the include flags.
    """
    metrics = ctx.metrics
    sections = [
        format_profile_section(ctx.profile),
        format_today_section(metrics.today_progress),
        format_weekly_section(metrics.weekly_trends),
        format_consistency_section(metrics.consistency),
        format_meal_distribution_section(metrics.meal_distribution),
    ]
    if metrics.weight_trend is not None:
        sections.append(
            format_weight_trend_section(metrics.weight_trend, ctx.profile.weight_unit)
        )
    if include_derived and ctx.derived_insights:
        sections.append(format_derived_insights_section(ctx.derived_insights))
    if include_frequent_foods and ctx.frequent_foods:
        sections.append(format_frequent_foods_section(ctx.frequent_foods))
    return "\n\n".join(sections)


def format_profile_section(profile: ContextProfile) -> str:
    lines = [
        "USER PROFILE:",
        f"Nutrition goal: {_GOAL_LABELS.get(profile.goal, profile.goal)}",
        f"Activity level: {profile.activity_level.replace('_', ' ')}",
    ]
    if profile.eating_style:
        lines.append(f"Eating style: {profile.eating_style.replace('_', ' ')}")
    if profile.protein_priority:
        lines.append(f"Protein priority: {profile.protein_priority}")
    lines.append(f"Units: {profile.weight_unit}")
    return "\n".join(lines)


def format_today_section(today: TodayProgress) -> str:
    calories = today.calories
    return "\n".join(
        [
            "TODAY'S PROGRESS:",
            f"Calories: {calories.consumed} / {calories.target} kcal "
            f"({calories.percent_complete}% complete, "
            f"{calories.remaining} remaining)",
            _macro_line("Protein", today.protein),
            _macro_line("Carbs", today.carbs),
            _macro_line("Fat", today.fat),
            f"Fiber: {today.fiber.consumed}g / {today.fiber.target}g "
            f"({today.fiber.remaining}g remaining)",
            f"Meals logged today: {today.meals_logged_today}",
        ]
    )


def format_weekly_section(weekly: WeeklyTrends) -> str:
    return "\n".join(
        [
            "WEEKLY TRENDS (last 7 days):",
            f"Average daily calories: {weekly.avg_calories} kcal "
            f"(trend: {weekly.calorie_direction})",
            f"Average daily protein: {weekly.avg_protein}g "
            f"(trend: {weekly.protein_direction})",
            f"Average daily carbs: {weekly.avg_carbs}g",
            f"Average daily fat: {weekly.avg_fat}g",
            f"Average daily fiber: {weekly.avg_fiber}g",
            f"Calorie adherence: {weekly.calorie_adherence}%",
            f"Protein adherence: {weekly.protein_adherence}%",
            f"Days logged this week: {weekly.days_logged_this_week} "
            f"(last week: {weekly.days_logged_last_week})",
        ]
    )


def format_consistency_section(consistency: Consistency) -> str:
    return "\n".join(
        [
            "CONSISTENCY:",
            f"Current logging streak: {consistency.current_streak} days",
            f"Longest streak: {consistency.longest_streak} days",
            f"Logging rate (7 days): {consistency.logging_rate_7d}%",
            f"Logging rate (30 days): {consistency.logging_rate_30d}%",
        ]
    )


def format_meal_distribution_section(meals: MealDistribution) -> str:
    lines = ["MEAL DISTRIBUTION:", f"Average meals per day: {meals.avg_meals_per_day}"]
    for meal in MEAL_TYPES:
        lines.append(
            f"{_MEAL_LABELS[meal]}: logged {meals.frequencies.get(meal, 0.0)} "
            f"days/week (~{meals.calorie_distribution.get(meal, 0)}% of daily "
            "calories)"
        )
    largest = _MEAL_LABELS.get(meals.largest_meal_type or "", "n/a")
    lines.append(f"Largest meal: {largest}")
    return "\n".join(lines)


def format_weight_trend_section(weight: WeightTrend, unit: str) -> str:
    lines = [
        "WEIGHT TREND:",
        f"Current weight: {convert_weight(weight.current_weight, unit)} {unit}",
    ]
    if weight.weight_change_7d is not None:
        lines.append(
            f"Change (7 days): {format_weight_delta(weight.weight_change_7d, unit)}"
        )
    if weight.weight_change_30d is not None:
        lines.append(
            f"Change (30 days): {format_weight_delta(weight.weight_change_30d, unit)}"
        )
    lines.append(f"Direction: {weight.direction}")
    return "\n".join(lines)


def format_derived_insights_section(insights: list[DerivedInsight]) -> str:
    formatted = "\n".join(
        f"- [{insight.category}] {insight.message} "
        f"(confidence: {insight.confidence})"
        for insight in insights
    )
    return (
        "LOCALLY COMPUTED OBSERVATIONS (expand on these, do not recompute):\n"
        f"{formatted}"
    )


def format_frequent_foods_section(foods: list[FrequentFood]) -> str:
    formatted = "\n".join(
        f"- {food.name}: logged {food.times_logged} times, "
        f"~{food.avg_calories} kcal avg"
        for food in foods
    )
    return f"USER'S FREQUENT FOODS:\n{formatted}"


def convert_weight(weight_kg: float, unit: str) -> float:
    """Convert kilograms to the display unit, rounded to one decimal."""
    if unit == "lbs":
        return round(weight_kg * LBS_PER_KG, 1)
    return round(weight_kg, 1)


def format_weight_delta(delta_kg: float, unit: str) -> str:
    """Format a weight change with an explicit plus sign for gains."""
    value = convert_weight(delta_kg, unit) or 0.0
    sign = "+" if value > 0 else ""
    return f"{sign}{value} {unit}"


def _macro_line(label: str, progress: MacroProgress) -> str:
    return (
        f"{label}: {progress.consumed}g / {progress.target}g "
        f"({progress.percent_complete}% complete)"
    )
