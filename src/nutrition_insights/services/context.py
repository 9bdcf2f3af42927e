"""Compose the analytics pipeline into a unified nutrition context."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_insights.config import parse_weight_unit
from nutrition_insights.domain.context import ContextProfile, UnifiedNutritionContext
from nutrition_insights.domain.nutrition import (
    DailyLog,
    FrequentFood,
    GoalSummary,
    MealPattern,
    ProfileSummary,
    RawNutritionData,
)
from nutrition_insights.services.availability import compute_data_availability
from nutrition_insights.services.insights import compute_derived_insights
from nutrition_insights.services.macros import resolve_macro_targets
from nutrition_insights.services.metrics import (
    MEAL_PATTERN_WINDOW_DAYS,
    compute_metrics,
    compute_weekly_averages,
)
from nutrition_insights.services.trend_weight import WeightRepository

DEFAULT_GOAL = "maintain"
DEFAULT_ACTIVITY_LEVEL = "moderately_active"

_logger = logging.getLogger(__name__)


class NutritionDataRepository(Protocol):
    """Read interface for the raw tables behind one pipeline run."""

    def list_daily_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        """Return per-day totals for days with at least one logged food."""

    def get_active_goal(self, user_id: UUID) -> GoalSummary | None:
        """Return the active goal, if any."""

    def get_settings_targets(self, user_id: UUID) -> dict[str, float]:
        """Return macro targets stored in user settings, keyed by macro."""

    def list_frequent_foods(self, user_id: UUID, limit: int) -> list[FrequentFood]:
        """Return the most frequently logged foods."""

    def list_meal_patterns(
        self, user_id: UUID, start: date, end: date
    ) -> list[MealPattern]:
        """Return per-meal-type aggregates for the window."""

    def get_profile(self, user_id: UUID) -> ProfileSummary | None:
        """Return profile preferences, if a profile exists."""

    def get_weight_unit(self, user_id: UUID) -> str | None:
        """Return the stored weight unit preference."""


def build_unified_context(
    raw: RawNutritionData,
    today: date,
    meal_window_days: int = MEAL_PATTERN_WINDOW_DAYS,
    frequent_food_limit: int = 10,
) -> UnifiedNutritionContext:
    """Run aggregation, rules and availability over a raw data snapshot."""
    metrics = compute_metrics(raw, today, meal_window_days=meal_window_days)
    goal_type = raw.goal.type if raw.goal else None
    profile = raw.profile or ProfileSummary()
    return UnifiedNutritionContext(
        metrics=metrics,
        profile=ContextProfile(
            goal=goal_type or DEFAULT_GOAL,
            activity_level=profile.activity_level or DEFAULT_ACTIVITY_LEVEL,
            weight_unit=raw.weight_unit,
            eating_style=profile.eating_style,
            protein_priority=profile.protein_priority,
        ),
        data_availability=compute_data_availability(raw),
        derived_insights=compute_derived_insights(raw, metrics, goal_type),
        frequent_foods=raw.frequent_foods[:frequent_food_limit],
    )


@dataclass
class NutritionContextService:
    """Loads a raw data snapshot and builds the unified context."""

    repository: NutritionDataRepository
    weight_repository: WeightRepository
    timezone_name: str = "UTC"
    daily_log_lookback_days: int = 30
    weekly_average_weeks: int = 4
    meal_pattern_window_days: int = MEAL_PATTERN_WINDOW_DAYS
    weight_history_days: int = 60
    frequent_food_limit: int = 20
    context_frequent_food_limit: int = 10

    def today(self) -> date:
        """Return today's date in the configured timezone."""
        return datetime.now(tz=ZoneInfo(self.timezone_name)).date()

    async def load_raw_data(self, user_id: UUID, today: date) -> RawNutritionData:
        """Read every raw table concurrently; read errors propagate."""
        repo = self.repository
        log_start = today - timedelta(days=self.daily_log_lookback_days)
        weekly_start = today - timedelta(days=self.weekly_average_weeks * 7 - 1)
        pattern_start = today - timedelta(days=self.meal_pattern_window_days - 1)
        weight_start = today - timedelta(days=self.weight_history_days)
        (
            daily_logs,
            weekly_rows,
            goal,
            settings_targets,
            frequent_foods,
            meal_patterns,
            weight_history,
            profile,
            weight_unit,
        ) = await asyncio.gather(
            asyncio.to_thread(repo.list_daily_logs, user_id, log_start, today),
            asyncio.to_thread(repo.list_daily_logs, user_id, weekly_start, today),
            asyncio.to_thread(repo.get_active_goal, user_id),
            asyncio.to_thread(repo.get_settings_targets, user_id),
            asyncio.to_thread(
                repo.list_frequent_foods, user_id, self.frequent_food_limit
            ),
            asyncio.to_thread(repo.list_meal_patterns, user_id, pattern_start, today),
            asyncio.to_thread(
                self.weight_repository.list_weight_history, user_id, weight_start
            ),
            asyncio.to_thread(repo.get_profile, user_id),
            asyncio.to_thread(repo.get_weight_unit, user_id),
        )
        return RawNutritionData(
            daily_logs=daily_logs,
            weekly_averages=compute_weekly_averages(
                weekly_rows, today, weeks=self.weekly_average_weeks
            ),
            macro_targets=resolve_macro_targets(goal, settings_targets),
            frequent_foods=frequent_foods,
            meal_patterns=meal_patterns,
            weight_history=weight_history,
            goal=goal,
            profile=profile,
            weight_unit=parse_weight_unit(weight_unit),
        )

    async def build_context(
        self, user_id: UUID, today: date | None = None
    ) -> UnifiedNutritionContext:
        """Return the unified context for a user as of ``today``."""
        resolved_today = today or self.today()
        raw = await self.load_raw_data(user_id, resolved_today)
        context = build_unified_context(
            raw,
            resolved_today,
            meal_window_days=self.meal_pattern_window_days,
            frequent_food_limit=self.context_frequent_food_limit,
        )
        _logger.info(
            "Built nutrition context: user_id=%s tier=%s insights=%s",
            user_id,
            context.data_availability.tier,
            len(context.derived_insights),
        )
        return context
