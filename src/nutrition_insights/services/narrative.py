"""Narrative generation on top of the assembled requests."""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_insights.domain.narrative import DailyNarrative, NarrativeResult
from nutrition_insights.services.context import NutritionContextService
from nutrition_insights.services.prompts import (
    NarrativeRequest,
    build_daily_request,
    build_weekly_request,
)

UNAVAILABLE_MESSAGE = "Unable to generate insights right now."
INSUFFICIENT_DATA_MESSAGE = (
    "Log a few meals to unlock personalized insights about your nutrition."
)

DAILY_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "insights": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "enum": [
                            "macro_balance",
                            "protein",
                            "consistency",
                            "pattern",
                            "trend",
                            "timing",
                        ],
                    },
                    "text": {"type": "string"},
                },
                "required": ["category", "text"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["insights"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class NarrativeClient(Protocol):
    """Interface for the downstream text generator."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        message: str,
        schema: dict[str, object] | None = None,
    ) -> str:
        """Return the generated text for one request."""


@dataclass
class NarrativeService:
    """Builds context, assembles requests and calls the text generator."""

    context_service: NutritionContextService
    client: NarrativeClient
    model: str
    store: bool = False

    async def generate_daily(
        self, user_id: UUID, now: datetime | None = None
    ) -> NarrativeResult:
        """Return 2-3 structured daily observations, or a fallback status."""
        resolved_now = now or datetime.now(
            tz=ZoneInfo(self.context_service.timezone_name)
        )
        try:
            context = await self.context_service.build_context(
                user_id, today=resolved_now.date()
            )
            if context.data_availability.tier == "none":
                return _insufficient_data()
            request = build_daily_request(context, resolved_now)
            text = await self._send(request, schema=DAILY_SCHEMA)
            daily = DailyNarrative.model_validate(json.loads(text))
        except Exception:
            _logger.exception("Daily narrative failed: user_id=%s", user_id)
            return NarrativeResult(status="unavailable", message=UNAVAILABLE_MESSAGE)
        return NarrativeResult(status="ok", daily=daily)

    async def generate_weekly(
        self, user_id: UUID, today: date | None = None
    ) -> NarrativeResult:
        """Return the weekly recap text, or a fallback status."""
        try:
            context = await self.context_service.build_context(user_id, today=today)
            if context.data_availability.tier == "none":
                return _insufficient_data()
            text = await self._send(build_weekly_request(context), schema=None)
        except Exception:
            _logger.exception("Weekly narrative failed: user_id=%s", user_id)
            return NarrativeResult(status="unavailable", message=UNAVAILABLE_MESSAGE)
        return NarrativeResult(status="ok", message=text.strip())

    async def _send(
        self, request: NarrativeRequest, schema: dict[str, object] | None
    ) -> str:
        _logger.info(
            "Requesting narrative: kind=%s instructions_chars=%s",
            request.kind,
            len(request.instructions),
        )
        return await self.client.generate(
            model=self.model,
            store=self.store,
            instructions=request.instructions,
            message=request.message,
            schema=schema,
        )


def _insufficient_data() -> NarrativeResult:
    return NarrativeResult(
        status="insufficient_data", message=INSUFFICIENT_DATA_MESSAGE
    )
