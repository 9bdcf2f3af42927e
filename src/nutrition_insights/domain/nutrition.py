"""Domain models for logged nutrition history."""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from nutrition_insights.domain.weight import WeightObservation

GoalType = Literal["lose", "gain", "maintain"]
WeightUnit = Literal["kg", "lbs"]

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


@dataclass(frozen=True)
class DailyLog:
    """Nutrition totals for one calendar day with at least one logged food."""

    day: date
    calories: int
    protein: int
    carbs: int
    fat: int
    fiber: int
    meals_logged: int


@dataclass(frozen=True)
class WeeklyAverage:
    """Average daily intake over a 7-day window."""

    week_start: date
    days_logged: int
    avg_calories: int
    avg_protein: int
    avg_carbs: int
    avg_fat: int
    avg_fiber: int


@dataclass(frozen=True)
class FrequentFood:
    """A food the user logs often."""

    name: str
    times_logged: int
    avg_calories: int


@dataclass(frozen=True)
class MealPattern:
    """Per-meal-type aggregate over the meal pattern window."""

    meal_type: str
    avg_calories: int
    distinct_days_logged: int


@dataclass(frozen=True)
class MacroTargets:
    """Daily calorie and macro targets in kcal and grams."""

    calories: int
    protein: int
    carbs: int
    fat: int


DEFAULT_MACRO_TARGETS = MacroTargets(calories=2000, protein=150, carbs=200, fat=65)


@dataclass(frozen=True)
class GoalSummary:
    """Active goal with its current targets."""

    type: GoalType
    target_calories: int
    target_protein: int
    target_carbs: int
    target_fat: int


@dataclass(frozen=True)
class ProfileSummary:
    """Profile preferences relevant to nutrition advice."""

    activity_level: str | None = None
    eating_style: str | None = None
    protein_priority: str | None = None


@dataclass(frozen=True)
class RawNutritionData:
    """Snapshot of every raw table one pipeline run reads."""

    daily_logs: list[DailyLog] = field(default_factory=list)
    weekly_averages: list[WeeklyAverage] = field(default_factory=list)
    macro_targets: MacroTargets = DEFAULT_MACRO_TARGETS
    frequent_foods: list[FrequentFood] = field(default_factory=list)
    meal_patterns: list[MealPattern] = field(default_factory=list)
    weight_history: list[WeightObservation] = field(default_factory=list)
    goal: GoalSummary | None = None
    profile: ProfileSummary | None = None
    weight_unit: WeightUnit = "lbs"
