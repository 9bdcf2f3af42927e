"""Unified context handed to formatting and narrative generation."""

from dataclasses import dataclass, field
from typing import Literal

from nutrition_insights.domain.insights import DerivedInsight
from nutrition_insights.domain.metrics import Metrics
from nutrition_insights.domain.nutrition import FrequentFood, WeightUnit

DataTier = Literal["none", "minimal", "moderate", "high"]


@dataclass(frozen=True)
class DataAvailability:
    """How much history exists and how assertive generated text may be."""

    tier: DataTier
    days_logged: int
    weeks_with_data: int
    has_weight_data: bool
    has_meal_timing_data: bool
    prompt_guidance: str


@dataclass(frozen=True)
class ContextProfile:
    goal: str
    activity_level: str
    weight_unit: WeightUnit
    eating_style: str | None = None
    protein_priority: str | None = None


@dataclass(frozen=True)
class UnifiedNutritionContext:
    metrics: Metrics
    profile: ContextProfile
    data_availability: DataAvailability
    derived_insights: list[DerivedInsight] = field(default_factory=list)
    frequent_foods: list[FrequentFood] = field(default_factory=list)
