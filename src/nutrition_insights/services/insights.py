"""Deterministic heuristic rules over the metrics snapshot.

Each rule is a pure function of ``(raw, metrics, goal_type)`` returning zero or
more insights with rule-specific ids. Results are filtered by confidence,
ordered by priority and capped before being handed to the formatter.
"""

import logging
import statistics
from collections.abc import Callable
from datetime import timedelta

from nutrition_insights.domain.insights import DerivedInsight
from nutrition_insights.domain.metrics import Metrics
from nutrition_insights.domain.nutrition import DailyLog, RawNutritionData

# Heuristic thresholds, pending product review.
MIN_LOGGED_DAYS = 3
PROTEIN_ADHERENCE_FLOOR = 60
BREAKFAST_MIN_DAYS_PER_WEEK = 3
BREAKFAST_MIN_SHARE_PCT = 10
BREAKFAST_PROTEIN_SHARE_PCT = 15
VARIANCE_MIN_DAYS = 7
CALORIE_CV_THRESHOLD = 0.25
DRIFT_THRESHOLD = 0.15
DRIFT_MIN_DAYS = 3
MIN_MEALS_PER_DAY = 1
HEAVY_MEAL_PCT = 50
HEAVY_SNACK_PCT = 30
SKIPPED_MEAL_DAYS_PER_WEEK = 3.5
WEEKEND_MIN_HISTORY_DAYS = 7
WEEKEND_MIN_DAYS = 2
WEEKDAY_MIN_DAYS = 3
WEEKEND_DRIFT_RATIO = 0.2
WEEKEND_PROTEIN_DROP_RATIO = 0.85
FIBER_FLOOR_G = 20
LOSE_ADHERENCE_FLOOR = 80
MAINTENANCE_DRIFT_KG = 0.9
DROPOFF_POINTS = 20
EXCELLENT_30D = 90
EXCELLENT_7D = 85
CONFIDENCE_FLOOR = 0.5
MAX_INSIGHTS = 5

MAIN_MEALS = ("breakfast", "lunch", "dinner")
SATURDAY = 5

Rule = Callable[[RawNutritionData, Metrics, str | None], list[DerivedInsight]]

_logger = logging.getLogger(__name__)


def compute_derived_insights(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    """Run every rule and return at most five insights, highest priority first."""
    insights: list[DerivedInsight] = []
    for rule in RULES:
        insights.extend(rule(raw, metrics, goal_type))
    kept = [insight for insight in insights if insight.confidence >= CONFIDENCE_FLOOR]
    ranked = sorted(kept, key=lambda insight: insight.priority)[:MAX_INSIGHTS]
    _logger.debug(
        "Derived insights: fired=%s kept=%s",
        [insight.id for insight in insights],
        [insight.id for insight in ranked],
    )
    return ranked


def detect_protein_patterns(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    results: list[DerivedInsight] = []
    weekly = metrics.weekly_trends
    target = raw.macro_targets.protein
    if weekly.days_logged_this_week < MIN_LOGGED_DAYS:
        return results
    if (
        weekly.protein_adherence < PROTEIN_ADHERENCE_FLOOR
        and weekly.avg_protein < target
    ):
        results.append(
            DerivedInsight(
                id="protein-low-adherence",
                category="protein",
                message=(
                    "Protein intake is running below target this week. "
                    f"Average: {weekly.avg_protein}g vs target: {target}g."
                ),
                confidence=0.8,
                priority=1,
            )
        )

    # Breakfast calorie share stands in for its share of the protein target.
    meals = metrics.meal_distribution
    breakfast_share = meals.calorie_distribution.get("breakfast", 0)
    if (
        meals.frequencies.get("breakfast", 0.0) >= BREAKFAST_MIN_DAYS_PER_WEEK
        and BREAKFAST_MIN_SHARE_PCT < breakfast_share < BREAKFAST_PROTEIN_SHARE_PCT
    ):
        results.append(
            DerivedInsight(
                id="protein-low-breakfast",
                category="protein",
                message=(
                    "Breakfast meals tend to be lower in protein; this meal "
                    "could be a leverage point for hitting your target."
                ),
                confidence=0.65,
                priority=3,
            )
        )
    return results


def detect_calorie_consistency(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    results: list[DerivedInsight] = []
    logs = sorted(raw.daily_logs, key=lambda log: log.day)
    calories = [log.calories for log in logs]

    if len(calories) >= VARIANCE_MIN_DAYS:
        mean = statistics.fmean(calories)
        if mean > 0 and statistics.pstdev(calories) / mean > CALORIE_CV_THRESHOLD:
            results.append(
                DerivedInsight(
                    id="calorie-high-variance",
                    category="calories",
                    message=(
                        "Daily calorie intake varies significantly "
                        f"(range: {min(calories)}-{max(calories)}). "
                        "Consistency may help progress."
                    ),
                    confidence=0.75,
                    priority=2,
                )
            )

    direction, streak = _trailing_drift(logs, raw.macro_targets.calories)
    if direction and streak >= DRIFT_MIN_DAYS:
        results.append(
            DerivedInsight(
                id="calorie-consecutive-drift",
                category="calories",
                message=(
                    f"Calorie intake has been consistently {direction} target "
                    f"for {streak} days."
                ),
                confidence=0.8,
                priority=2,
            )
        )
    return results


def detect_meal_imbalance(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    results: list[DerivedInsight] = []
    meals = metrics.meal_distribution
    if meals.avg_meals_per_day < MIN_MEALS_PER_DAY:
        return results
    shares = meals.calorie_distribution

    heavy = next(
        (meal for meal in MAIN_MEALS if shares.get(meal, 0) > HEAVY_MEAL_PCT), None
    )
    if heavy:
        results.append(
            DerivedInsight(
                id=f"meal-heavy-{heavy}",
                category="balance",
                message=(
                    f"{heavy.capitalize()} accounts for ~{shares[heavy]}% of daily "
                    "calories. Spreading intake may improve energy."
                ),
                confidence=0.7,
                priority=3,
            )
        )

    if shares.get("snack", 0) > HEAVY_SNACK_PCT:
        results.append(
            DerivedInsight(
                id="meal-heavy-snacks",
                category="balance",
                message=(
                    f"Snacking accounts for ~{shares['snack']}% of daily intake, "
                    "which is higher than typical."
                ),
                confidence=0.65,
                priority=4,
            )
        )

    skipped = next(
        (
            meal
            for meal in MAIN_MEALS
            if 0 < meals.frequencies.get(meal, 0) < SKIPPED_MEAL_DAYS_PER_WEEK
        ),
        None,
    )
    if skipped:
        results.append(
            DerivedInsight(
                id=f"meal-skipped-{skipped}",
                category="timing",
                message=(
                    f"{skipped.capitalize()} is only logged "
                    f"{meals.frequencies[skipped]:.1f} days/week. "
                    "Regular meals support consistent nutrition."
                ),
                confidence=0.6,
                priority=4,
            )
        )
    return results


def detect_weekend_drift(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    results: list[DerivedInsight] = []
    if len(raw.daily_logs) < WEEKEND_MIN_HISTORY_DAYS:
        return results
    weekend = [log for log in raw.daily_logs if log.day.weekday() >= SATURDAY]
    weekday = [log for log in raw.daily_logs if log.day.weekday() < SATURDAY]
    if len(weekend) < WEEKEND_MIN_DAYS or len(weekday) < WEEKDAY_MIN_DAYS:
        return results

    weekend_calories = round(statistics.fmean(log.calories for log in weekend))
    weekday_calories = round(statistics.fmean(log.calories for log in weekday))
    difference = weekend_calories - weekday_calories
    threshold = weekday_calories * WEEKEND_DRIFT_RATIO
    if weekday_calories > 0 and difference > threshold:
        results.append(
            DerivedInsight(
                id="weekend-calorie-drift",
                category="calories",
                message=(
                    f"Weekend calories average {weekend_calories} vs weekday "
                    f"{weekday_calories}, {difference} calories higher."
                ),
                confidence=0.75,
                priority=2,
            )
        )

    weekend_protein = round(statistics.fmean(log.protein for log in weekend))
    weekday_protein = round(statistics.fmean(log.protein for log in weekday))
    if weekday_protein > 0 and (
        weekend_protein < weekday_protein * WEEKEND_PROTEIN_DROP_RATIO
    ):
        results.append(
            DerivedInsight(
                id="weekend-protein-drop",
                category="protein",
                message=(
                    "Protein intake tends to drop on weekends "
                    f"({weekend_protein}g vs {weekday_protein}g weekday)."
                ),
                confidence=0.7,
                priority=3,
            )
        )
    return results


def detect_fiber_intake(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    weekly = metrics.weekly_trends
    if weekly.days_logged_this_week < MIN_LOGGED_DAYS:
        return []
    if weekly.avg_fiber >= FIBER_FLOOR_G:
        return []
    return [
        DerivedInsight(
            id="fiber-low",
            category="fiber",
            message=(
                f"Average fiber intake is {weekly.avg_fiber}g/day. "
                "The general recommendation is 25-30g."
            ),
            confidence=0.7,
            priority=3,
        )
    ]


def detect_weight_alignment(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    weight = metrics.weight_trend
    if weight is None or goal_type is None:
        return []
    if weight.direction == "insufficient_data":
        return []

    if (
        goal_type == "lose"
        and weight.direction == "gaining"
        and metrics.weekly_trends.calorie_adherence > LOSE_ADHERENCE_FLOOR
    ):
        return [
            DerivedInsight(
                id="weight-calorie-mismatch-cut",
                category="weight",
                message=(
                    "Weight is trending up despite hitting calorie targets. "
                    "The targets may need re-evaluation."
                ),
                confidence=0.7,
                priority=1,
            )
        ]
    if goal_type == "gain" and weight.direction == "losing":
        return [
            DerivedInsight(
                id="weight-calorie-mismatch-bulk",
                category="weight",
                message=(
                    "Weight is trending down despite a surplus goal. "
                    "Consider whether the calorie target is sufficient."
                ),
                confidence=0.7,
                priority=1,
            )
        ]
    change = weight.weight_change_30d
    if goal_type == "maintain" and change is not None:
        if abs(change) > MAINTENANCE_DRIFT_KG:
            direction = "up" if change > 0 else "down"
            return [
                DerivedInsight(
                    id="weight-maintenance-drift",
                    category="weight",
                    message=(
                        f"Weight has shifted {direction} by {abs(change):.1f}kg "
                        "over 30 days. Minor adjustments may help maintain."
                    ),
                    confidence=0.65,
                    priority=2,
                )
            ]
    return []


def detect_logging_consistency(
    raw: RawNutritionData, metrics: Metrics, goal_type: str | None
) -> list[DerivedInsight]:
    results: list[DerivedInsight] = []
    consistency = metrics.consistency
    rate_7d = consistency.logging_rate_7d
    rate_30d = consistency.logging_rate_30d

    if rate_30d > 0 and rate_7d < rate_30d - DROPOFF_POINTS:
        results.append(
            DerivedInsight(
                id="logging-dropoff",
                category="consistency",
                message=(
                    f"Logging has dropped off this week ({rate_7d}% vs your "
                    f"30-day average of {rate_30d}%)."
                ),
                confidence=0.8,
                priority=2,
            )
        )
    if rate_30d >= EXCELLENT_30D and rate_7d >= EXCELLENT_7D:
        results.append(
            DerivedInsight(
                id="logging-excellent",
                category="consistency",
                message=(
                    f"Excellent logging consistency at {rate_30d}%. This level of "
                    "tracking supports accurate insights."
                ),
                confidence=0.9,
                priority=5,
            )
        )
    return results


RULES: tuple[Rule, ...] = (
    detect_protein_patterns,
    detect_calorie_consistency,
    detect_meal_imbalance,
    detect_weekend_drift,
    detect_fiber_intake,
    detect_weight_alignment,
    detect_logging_consistency,
)


def _trailing_drift(logs: list[DailyLog], target: int) -> tuple[str | None, int]:
    """Return the direction and length of the latest over/under-target run.

    The run only spans calendar-consecutive logged days.
    """
    if target <= 0 or not logs:
        return None, 0
    direction = _drift_direction(logs[-1].calories, target)
    if direction is None:
        return None, 0
    streak = 1
    for previous, current in zip(reversed(logs[:-1]), reversed(logs[1:]), strict=True):
        if current.day - previous.day != timedelta(days=1):
            break
        if _drift_direction(previous.calories, target) != direction:
            break
        streak += 1
    return direction, streak


def _drift_direction(calories: int, target: int) -> str | None:
    ratio = (calories - target) / target
    if ratio > DRIFT_THRESHOLD:
        return "over"
    if ratio < -DRIFT_THRESHOLD:
        return "under"
    return None
