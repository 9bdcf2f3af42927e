"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Request, status

from nutrition_insights.api.auth import require_token
from nutrition_insights.api.models import RecomputeRequest, TargetsRequest
from nutrition_insights.app_logging import configure_logging
from nutrition_insights.containers import AppContainer
from nutrition_insights.services.energy import (
    EnergyProfile,
    calculate_bmr,
    calculate_target_calories,
    calculate_tdee,
    validate_goal,
)
from nutrition_insights.services.formatter import format_nutrition_context
from nutrition_insights.services.macros import (
    calculate_macro_breakdown,
    validate_macros,
)
from nutrition_insights.services.prompts import (
    build_daily_request,
    build_weekly_request,
)

NARRATIVE_KINDS = ("daily", "weekly")


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{user_id}/context", dependencies=[Depends(require_token)])
    async def user_context(
        user_id: UUID, request: Request, today: date | None = None
    ) -> dict[str, object]:
        """Return the unified context and its formatted text."""
        state_container: AppContainer = request.app.state.container
        context = await state_container.context_service.build_context(
            user_id, today=today
        )
        return {"context": asdict(context), "text": format_nutrition_context(context)}

    @app.get(
        "/users/{user_id}/requests/{kind}", dependencies=[Depends(require_token)]
    )
    async def narrative_request(
        user_id: UUID, kind: str, request: Request
    ) -> dict[str, object]:
        """Return the assembled daily or weekly request without sending it."""
        _ensure_kind(kind)
        state_container: AppContainer = request.app.state.container
        now = datetime.now(tz=ZoneInfo(state_container.settings.timezone))
        context = await state_container.context_service.build_context(
            user_id, today=now.date()
        )
        built = (
            build_daily_request(context, now)
            if kind == "daily"
            else build_weekly_request(context)
        )
        return asdict(built)

    @app.get(
        "/users/{user_id}/insights/{kind}", dependencies=[Depends(require_token)]
    )
    async def narrative_insights(
        user_id: UUID, kind: str, request: Request
    ) -> dict[str, object]:
        """Generate daily or weekly insights for a user."""
        _ensure_kind(kind)
        state_container: AppContainer = request.app.state.container
        service = state_container.narrative_service
        if kind == "daily":
            result = await service.generate_daily(user_id)
        else:
            result = await service.generate_weekly(user_id)
        return {
            "status": result.status,
            "message": result.message,
            "insights": (
                [insight.model_dump() for insight in result.daily.insights]
                if result.daily
                else []
            ),
        }

    @app.post(
        "/users/{user_id}/weights/recompute", dependencies=[Depends(require_token)]
    )
    async def recompute_weights(
        user_id: UUID, payload: RecomputeRequest, request: Request
    ) -> dict[str, object]:
        """Recompute stored trend weights after a weigh-in edit."""
        state_container: AppContainer = request.app.state.container
        updates = state_container.trend_weight_service.recompute(
            user_id, payload.edit_date
        )
        return {"updated": [asdict(update) for update in updates]}

    @app.post("/targets/calculate", dependencies=[Depends(require_token)])
    async def calculate_targets(payload: TargetsRequest) -> dict[str, object]:
        """Return energy estimates and a macro split for a profile."""
        profile = EnergyProfile(
            sex=payload.sex,
            age_years=payload.age_years,
            height_cm=payload.height_cm,
            weight_kg=payload.weight_kg,
            activity_level=payload.activity_level,
        )
        try:
            calories = calculate_target_calories(
                profile, payload.goal_type, payload.rate_percent
            )
            breakdown = calculate_macro_breakdown(
                payload.weight_kg,
                calories,
                payload.eating_style,
                payload.protein_priority,
            )
            tdee = calculate_tdee(profile)
        except ValueError as exc:
            logger.warning("Rejected target calculation: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return {
            "bmr": calculate_bmr(profile),
            "tdee": tdee,
            "target_calories": calories,
            "macros": asdict(breakdown),
            "warnings": [
                *validate_goal(profile, payload.goal_type, payload.rate_percent),
                *validate_macros(breakdown.targets),
            ],
        }

    return app


def _ensure_kind(kind: str) -> None:
    if kind not in NARRATIVE_KINDS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
