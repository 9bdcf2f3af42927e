"""Assemble outbound narrative requests from the formatted context."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from nutrition_insights.domain.context import UnifiedNutritionContext
from nutrition_insights.services.formatter import (
    format_derived_insights_section,
    format_frequent_foods_section,
    format_nutrition_context,
)

NarrativeKind = Literal["daily", "weekly"]

NO_INSIGHTS_FALLBACK = "No patterns detected yet — the user needs more logged data."
NO_FREQUENT_FOODS_FALLBACK = "No frequent foods data yet."

_PLACEHOLDER_PATTERN = re.compile(r"\{[A-Z][A-Z_]*\}")

MORNING_END_HOUR = 11
MIDDAY_END_HOUR = 15
EVENING_END_HOUR = 20

SYSTEM_TEMPLATE = """You are a nutrition insight assistant for a macro-tracking app.

=== IDENTITY & TONE ===
- Warm, supportive and non-judgmental; speak like a knowledgeable friend
- Never use words like "failed", "cheated", "bad", "guilty" or "ruined"
- Prefer "opportunity", "adjustment", "progress" and "building toward"
- Celebrate effort and consistency, not perfection

=== DATA AVAILABILITY ===
{DATA_AVAILABILITY}

=== YOUR DATA ===
All numbers below were computed by the app. Treat them as facts and do not
recalculate, estimate or contradict them.

{NUTRITION_CONTEXT}

=== DERIVED OBSERVATIONS ===
These patterns were detected by the app's analysis rules. Acknowledge the most
relevant ones, explain why they matter in plain language and suggest one
concrete step. Do not recompute them.

{DERIVED_INSIGHTS}

=== USER'S FREQUENT FOODS ===
Reference these foods when making suggestions so advice stays practical.

{FREQUENT_FOODS}

=== RESPONSE GUIDELINES ===
- Keep responses concise and reference specific numbers from the data
- Use the user's preferred weight unit ({WEIGHT_UNIT})
- Write macros as "142g protein", not "protein 142g"

=== HARD BOUNDARIES ===
1. Never diagnose medical conditions or eating disorders
2. Never prescribe new calorie targets; only comment on adherence
3. Never recommend supplements, medications or brands
4. Never invent data that was not provided
5. Never suggest intakes below 1200 kcal
6. Never make moral judgments about food choices
7. Never claim to be a dietitian or medical professional
8. Never perform calculations; every number is already provided"""

DAILY_MESSAGE_TEMPLATE = """It is currently {TIME_OF_DAY}. Generate 2-3 personalized \
daily nutrition insights based on my data.

Respond in this exact JSON format only, with no other text:
{
  "insights": [
    {"category": "<category>", "text": "<1-2 sentence insight>"}
  ]
}

Valid categories: macro_balance, protein, consistency, pattern, trend, timing
Reference specific numbers from my data. Keep each insight to 1-2 sentences."""

WEEKLY_MESSAGE_TEMPLATE = """Generate a weekly nutrition recap based on my data. \
Focus on trends, consistency and week-over-week changes.

Keep it to 2-3 short paragraphs:
- Lead with the most notable trend or achievement
- Include ONE specific, actionable suggestion for next week
- End with an encouraging, forward-looking statement"""


@dataclass(frozen=True)
class NarrativeRequest:
    """Instructions plus user message for the text generator."""

    kind: NarrativeKind
    instructions: str
    message: str


def build_daily_request(
    ctx: UnifiedNutritionContext, now: datetime
) -> NarrativeRequest:
    """Build the request for 2-3 JSON-structured daily observations."""
    message = render_template(
        DAILY_MESSAGE_TEMPLATE, {"TIME_OF_DAY": time_of_day(now)}
    )
    return NarrativeRequest(
        kind="daily", instructions=build_instructions(ctx), message=message
    )


def build_weekly_request(ctx: UnifiedNutritionContext) -> NarrativeRequest:
    """Build the request for a short weekly recap narrative."""
    return NarrativeRequest(
        kind="weekly",
        instructions=build_instructions(ctx),
        message=render_template(WEEKLY_MESSAGE_TEMPLATE, {}),
    )


def build_instructions(ctx: UnifiedNutritionContext) -> str:
    """Substitute the context sections into the shared instructions."""
    core = format_nutrition_context(
        ctx, include_derived=False, include_frequent_foods=False
    )
    derived = (
        format_derived_insights_section(ctx.derived_insights)
        if ctx.derived_insights
        else NO_INSIGHTS_FALLBACK
    )
    foods = (
        format_frequent_foods_section(ctx.frequent_foods)
        if ctx.frequent_foods
        else NO_FREQUENT_FOODS_FALLBACK
    )
    return render_template(
        SYSTEM_TEMPLATE,
        {
            "DATA_AVAILABILITY": ctx.data_availability.prompt_guidance,
            "NUTRITION_CONTEXT": core,
            "DERIVED_INSIGHTS": derived,
            "FREQUENT_FOODS": foods,
            "WEIGHT_UNIT": ctx.profile.weight_unit,
        },
    )


def render_template(template: str, values: dict[str, str]) -> str:
    """Replace ``{TOKEN}`` placeholders in a single pass.

    Raises ``ValueError`` when the template holds a token with no value.
    Token-like text inside a value is rewritten with parentheses so that the
    rendered output never carries a placeholder.
    """
    missing = [
        token
        for token in find_unresolved_placeholders(template)
        if token[1:-1] not in values
    ]
    if missing:
        raise ValueError(f"Unresolved template placeholders: {', '.join(missing)}")
    rendered = _PLACEHOLDER_PATTERN.sub(
        lambda match: _neutralize(values[match.group()[1:-1]]), template
    )
    leftover = find_unresolved_placeholders(rendered)
    if leftover:
        raise ValueError(f"Unresolved template placeholders: {', '.join(leftover)}")
    return rendered


def find_unresolved_placeholders(text: str) -> list[str]:
    """Return ``{TOKEN}``-style placeholders present in ``text``."""
    return _PLACEHOLDER_PATTERN.findall(text)


def _neutralize(value: str) -> str:
    return _PLACEHOLDER_PATTERN.sub(lambda match: f"({match.group()[1:-1]})", value)


def time_of_day(now: datetime) -> str:
    if now.hour < MORNING_END_HOUR:
        return "morning"
    if now.hour < MIDDAY_END_HOUR:
        return "midday"
    if now.hour < EVENING_END_HOUR:
        return "evening"
    return "late night"
