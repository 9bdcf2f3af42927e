"""Tests for container wiring."""

import asyncio

from nutrition_insights.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.context_service.timezone_name == "UTC"
    assert container.context_service.context_frequent_food_limit == 10
    assert container.narrative_service.model == settings.openai_model
    assert container.trend_weight_service is not None
    asyncio.run(container.close_resources())
