"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_insights.domain.nutrition import WeightUnit

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_store: bool = False
    timezone: str = "UTC"
    daily_log_lookback_days: int = 30
    weekly_average_weeks: int = 4
    meal_pattern_window_days: int = 14
    weight_history_days: int = 60
    frequent_food_limit: int = 20
    context_frequent_food_limit: int = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_weight_unit(raw: str | None) -> WeightUnit:
    """Parse a stored weight unit preference, defaulting to pounds."""
    if raw is None:
        return "lbs"
    cleaned = raw.strip().lower()
    if cleaned in {"kg", "kgs", "kilograms"}:
        return "kg"
    return "lbs"
