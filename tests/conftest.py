"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

import pytest

from nutrition_insights.config import Settings
from nutrition_insights.containers import AppContainer
from nutrition_insights.domain.nutrition import (
    DailyLog,
    FrequentFood,
    GoalSummary,
    MealPattern,
    ProfileSummary,
)
from nutrition_insights.domain.weight import TrendWeightUpdate, WeightObservation
from nutrition_insights.services.context import (
    NutritionContextService,
    NutritionDataRepository,
)
from nutrition_insights.services.narrative import NarrativeClient, NarrativeService
from nutrition_insights.services.trend_weight import (
    TrendWeightService,
    WeightRepository,
)

# A Wednesday, so the last 7 days hold both weekdays and a weekend.
TODAY = date(2025, 1, 15)


def make_log(  # noqa: PLR0913
    day: date,
    calories: int = 2000,
    protein: int = 150,
    carbs: int = 200,
    fat: int = 65,
    fiber: int = 25,
    meals_logged: int = 3,
) -> DailyLog:
    return DailyLog(
        day=day,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=fiber,
        meals_logged=meals_logged,
    )


def make_logs(days: int, end: date = TODAY, **values: int) -> list[DailyLog]:
    """Return one log per day for ``days`` consecutive days ending at ``end``."""
    return [
        make_log(end - timedelta(days=offset), **values)
        for offset in reversed(range(days))
    ]


def make_weights(
    weights: list[float], end: date = TODAY, step_days: int = 1
) -> list[WeightObservation]:
    """Return weigh-ins spaced ``step_days`` apart, the last one on ``end``."""
    count = len(weights)
    return [
        WeightObservation(
            id=f"w{index}",
            day=end - timedelta(days=(count - 1 - index) * step_days),
            weight_kg=weight,
        )
        for index, weight in enumerate(weights)
    ]


@dataclass
class InMemoryNutritionDataRepository(NutritionDataRepository):
    """In-memory nutrition reads for tests."""

    logs: list[DailyLog] = field(default_factory=list)
    goal: GoalSummary | None = None
    settings_targets: dict[str, float] = field(default_factory=dict)
    frequent_foods: list[FrequentFood] = field(default_factory=list)
    meal_patterns: list[MealPattern] = field(default_factory=list)
    profile: ProfileSummary | None = None
    weight_unit: str | None = None
    fail_reads: bool = False

    def list_daily_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        if self.fail_reads:
            raise OSError("database unavailable")
        return [log for log in self.logs if start <= log.day <= end]

    def get_active_goal(self, user_id: UUID) -> GoalSummary | None:
        return self.goal

    def get_settings_targets(self, user_id: UUID) -> dict[str, float]:
        return dict(self.settings_targets)

    def list_frequent_foods(self, user_id: UUID, limit: int) -> list[FrequentFood]:
        return self.frequent_foods[:limit]

    def list_meal_patterns(
        self, user_id: UUID, start: date, end: date
    ) -> list[MealPattern]:
        return list(self.meal_patterns)

    def get_profile(self, user_id: UUID) -> ProfileSummary | None:
        return self.profile

    def get_weight_unit(self, user_id: UUID) -> str | None:
        return self.weight_unit


@dataclass
class InMemoryWeightRepository(WeightRepository):
    """In-memory weight history for tests."""

    observations: list[WeightObservation] = field(default_factory=list)
    writes: list[list[TrendWeightUpdate]] = field(default_factory=list)

    def list_weight_history(
        self, user_id: UUID, start: date | None = None
    ) -> list[WeightObservation]:
        return sorted(
            (obs for obs in self.observations if start is None or obs.day >= start),
            key=lambda obs: obs.day,
        )

    def update_trend_weights(
        self, user_id: UUID, updates: list[TrendWeightUpdate]
    ) -> None:
        self.writes.append(list(updates))
        trends = {update.id: update.trend_weight_kg for update in updates}
        self.observations = [
            WeightObservation(
                id=obs.id,
                day=obs.day,
                weight_kg=obs.weight_kg,
                trend_weight_kg=trends.get(obs.id, obs.trend_weight_kg),
            )
            for obs in self.observations
        ]


@dataclass
class FakeNarrativeClient(NarrativeClient):
    """Fake narrative client returning a fixed payload."""

    output: str = (
        '{"insights": [{"category": "protein", '
        '"text": "You hit 142g protein today."}]}'
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        message: str,
        schema: dict[str, object] | None = None,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "store": store,
                "instructions": instructions,
                "message": message,
                "schema": schema,
            }
        )
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.role.key",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def nutrition_repository() -> InMemoryNutritionDataRepository:
    return InMemoryNutritionDataRepository()


@pytest.fixture
def weight_repository() -> InMemoryWeightRepository:
    return InMemoryWeightRepository()


@pytest.fixture
def narrative_client() -> FakeNarrativeClient:
    return FakeNarrativeClient()


@pytest.fixture
def context_service(
    nutrition_repository: InMemoryNutritionDataRepository,
    weight_repository: InMemoryWeightRepository,
) -> NutritionContextService:
    return NutritionContextService(
        repository=nutrition_repository, weight_repository=weight_repository
    )


@pytest.fixture
def container(
    settings: Settings,
    context_service: NutritionContextService,
    weight_repository: InMemoryWeightRepository,
    narrative_client: FakeNarrativeClient,
) -> AppContainer:
    narrative_service = NarrativeService(
        context_service=context_service,
        client=narrative_client,
        model=settings.openai_model,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        context_service=context_service,
        trend_weight_service=TrendWeightService(weight_repository),
        narrative_service=narrative_service,
        close_resources=close_resources,
    )
