"""Metrics snapshot computed from raw nutrition data."""

from dataclasses import dataclass
from typing import Literal

TrendDirection = Literal["stable", "increasing", "decreasing"]
WeightDirection = Literal["gaining", "losing", "maintaining", "insufficient_data"]


@dataclass(frozen=True)
class MacroProgress:
    """Progress toward a daily macro target."""

    consumed: int
    target: int
    remaining: int
    percent_complete: int


@dataclass(frozen=True)
class FiberProgress:
    """Progress toward the daily fiber recommendation."""

    consumed: int
    target: int
    remaining: int


@dataclass(frozen=True)
class TodayProgress:
    calories: MacroProgress
    protein: MacroProgress
    carbs: MacroProgress
    fat: MacroProgress
    fiber: FiberProgress
    meals_logged_today: int


@dataclass(frozen=True)
class WeeklyTrends:
    """Current 7-day window compared with the prior 7 days."""

    avg_calories: int
    avg_protein: int
    avg_carbs: int
    avg_fat: int
    avg_fiber: int
    calorie_adherence: int
    protein_adherence: int
    days_logged_this_week: int
    days_logged_last_week: int
    calorie_direction: TrendDirection
    protein_direction: TrendDirection


@dataclass(frozen=True)
class Consistency:
    current_streak: int
    longest_streak: int
    logging_rate_7d: int
    logging_rate_30d: int


@dataclass(frozen=True)
class MealDistribution:
    """How intake spreads across meal types.

    ``frequencies`` holds weekly-equivalent logged days per meal type and
    ``calorie_distribution`` the percentage share of average daily calories.
    """

    frequencies: dict[str, float]
    calorie_distribution: dict[str, int]
    avg_meals_per_day: float
    largest_meal_type: str | None


@dataclass(frozen=True)
class WeightTrend:
    """Smoothed weight summary; deltas are in kilograms."""

    current_weight: float
    weight_change_7d: float | None
    weight_change_30d: float | None
    direction: WeightDirection


@dataclass(frozen=True)
class Metrics:
    today_progress: TodayProgress
    weekly_trends: WeeklyTrends
    consistency: Consistency
    meal_distribution: MealDistribution
    weight_trend: WeightTrend | None
