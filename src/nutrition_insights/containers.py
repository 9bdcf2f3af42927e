"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_insights.adapters.openai_narrative_client import OpenAINarrativeClient
from nutrition_insights.adapters.supabase_nutrition_repository import (
    SupabaseNutritionRepository,
)
from nutrition_insights.adapters.supabase_weight_repository import (
    SupabaseWeightRepository,
)
from nutrition_insights.config import Settings
from nutrition_insights.services.context import NutritionContextService
from nutrition_insights.services.narrative import NarrativeService
from nutrition_insights.services.trend_weight import TrendWeightService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    context_service: NutritionContextService
    trend_weight_service: TrendWeightService
    narrative_service: NarrativeService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    nutrition_repository = SupabaseNutritionRepository(supabase_client)
    weight_repository = SupabaseWeightRepository(supabase_client)
    context_service = NutritionContextService(
        repository=nutrition_repository,
        weight_repository=weight_repository,
        timezone_name=resolved_settings.timezone,
        daily_log_lookback_days=resolved_settings.daily_log_lookback_days,
        weekly_average_weeks=resolved_settings.weekly_average_weeks,
        meal_pattern_window_days=resolved_settings.meal_pattern_window_days,
        weight_history_days=resolved_settings.weight_history_days,
        frequent_food_limit=resolved_settings.frequent_food_limit,
        context_frequent_food_limit=resolved_settings.context_frequent_food_limit,
    )
    openai_client = OpenAINarrativeClient.create(resolved_settings.openai_api_key)
    narrative_service = NarrativeService(
        context_service=context_service,
        client=openai_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        context_service=context_service,
        trend_weight_service=TrendWeightService(weight_repository),
        narrative_service=narrative_service,
        close_resources=close_resources,
    )
