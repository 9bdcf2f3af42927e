"""Models for generated narrative results."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field


class NarrativeInsight(BaseModel):
    """Single short observation returned for the daily request."""

    category: Literal[
        "macro_balance", "protein", "consistency", "pattern", "trend", "timing"
    ]
    text: str = Field(min_length=1)


class DailyNarrative(BaseModel):
    """Structured output for the daily request."""

    insights: list[NarrativeInsight]


@dataclass(frozen=True)
class NarrativeResult:
    """Outcome of a narrative generation attempt."""

    status: Literal["ok", "insufficient_data", "unavailable"]
    message: str | None = None
    daily: DailyNarrative | None = None
