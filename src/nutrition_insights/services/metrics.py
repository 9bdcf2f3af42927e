"""Metrics aggregation over raw nutrition data."""

from collections.abc import Iterable
from datetime import date, timedelta

from nutrition_insights.domain.metrics import (
    Consistency,
    FiberProgress,
    MacroProgress,
    MealDistribution,
    Metrics,
    TodayProgress,
    TrendDirection,
    WeeklyTrends,
    WeightDirection,
    WeightTrend,
)
from nutrition_insights.domain.nutrition import (
    MEAL_TYPES,
    DailyLog,
    RawNutritionData,
    WeeklyAverage,
)
from nutrition_insights.domain.weight import WeightObservation
from nutrition_insights.services.trend_weight import fill_missing_trend_weights

FIBER_TARGET_G = 28
DIRECTION_CHANGE_PCT = 5
MIN_POINTS_FOR_TREND = 3
WEIGHT_CHANGE_THRESHOLD_KG = 0.2
MEAL_PATTERN_WINDOW_DAYS = 14
DAYS_PER_WEEK = 7


def compute_metrics(
    raw: RawNutritionData,
    today: date,
    meal_window_days: int = MEAL_PATTERN_WINDOW_DAYS,
) -> Metrics:
    """Compute the full metrics snapshot for ``today``."""
    return Metrics(
        today_progress=compute_today_progress(raw, today),
        weekly_trends=compute_weekly_trends(raw, today),
        consistency=compute_consistency(raw.daily_logs, today),
        meal_distribution=compute_meal_distribution(raw, meal_window_days),
        weight_trend=compute_weight_trend(raw.weight_history, today),
    )


def compute_today_progress(raw: RawNutritionData, today: date) -> TodayProgress:
    """Return consumed/target/remaining for today's calories and macros."""
    log = next((entry for entry in raw.daily_logs if entry.day == today), None)
    targets = raw.macro_targets
    fiber = log.fiber if log else 0
    return TodayProgress(
        calories=_progress(log.calories if log else 0, targets.calories),
        protein=_progress(log.protein if log else 0, targets.protein),
        carbs=_progress(log.carbs if log else 0, targets.carbs),
        fat=_progress(log.fat if log else 0, targets.fat),
        fiber=FiberProgress(
            consumed=fiber, target=FIBER_TARGET_G, remaining=FIBER_TARGET_G - fiber
        ),
        meals_logged_today=log.meals_logged if log else 0,
    )


def compute_weekly_trends(raw: RawNutritionData, today: date) -> WeeklyTrends:
    """Compare the last 7 days (today inclusive) with the 7 days before."""
    current = _logs_between(raw.daily_logs, today - timedelta(days=6), today)
    prior = _logs_between(
        raw.daily_logs, today - timedelta(days=13), today - timedelta(days=7)
    )
    targets = raw.macro_targets
    avg_calories = _mean(log.calories for log in current)
    avg_protein = _mean(log.protein for log in current)
    prior_calories = _mean(log.calories for log in prior)
    prior_protein = _mean(log.protein for log in prior)
    return WeeklyTrends(
        avg_calories=avg_calories,
        avg_protein=avg_protein,
        avg_carbs=_mean(log.carbs for log in current),
        avg_fat=_mean(log.fat for log in current),
        avg_fiber=_mean(log.fiber for log in current),
        calorie_adherence=_adherence(avg_calories, targets.calories, bool(current)),
        protein_adherence=_adherence(avg_protein, targets.protein, bool(current)),
        days_logged_this_week=len(current),
        days_logged_last_week=len(prior),
        calorie_direction=_direction(avg_calories, prior_calories),
        protein_direction=_direction(avg_protein, prior_protein),
    )


def compute_consistency(daily_logs: list[DailyLog], today: date) -> Consistency:
    """Return logging streaks and 7/30 day logging rates."""
    logged_days = {log.day for log in daily_logs}

    current_streak = 0
    cursor = today
    while cursor in logged_days:
        current_streak += 1
        cursor -= timedelta(days=1)

    longest_streak = 0
    run = 0
    previous: date | None = None
    for day in sorted(logged_days):
        run = run + 1 if previous and (day - previous).days == 1 else 1
        longest_streak = max(longest_streak, run)
        previous = day

    return Consistency(
        current_streak=current_streak,
        longest_streak=longest_streak,
        logging_rate_7d=_logging_rate(logged_days, today, 7),
        logging_rate_30d=_logging_rate(logged_days, today, 30),
    )


def compute_meal_distribution(
    raw: RawNutritionData, window_days: int = MEAL_PATTERN_WINDOW_DAYS
) -> MealDistribution:
    """Return per-meal frequency and calorie share.

    Frequencies are distinct logged days scaled to a 7-day week.
    """
    patterns = {pattern.meal_type: pattern for pattern in raw.meal_patterns}
    avg_calories = {
        meal: patterns[meal].avg_calories if meal in patterns else 0
        for meal in MEAL_TYPES
    }
    frequencies = {
        meal: round(
            patterns[meal].distinct_days_logged / window_days * DAYS_PER_WEEK, 1
        )
        if meal in patterns and window_days > 0
        else 0.0
        for meal in MEAL_TYPES
    }
    total = sum(avg_calories.values())
    calorie_distribution = {
        meal: round(calories / total * 100) if total > 0 else 0
        for meal, calories in avg_calories.items()
    }
    largest = (
        max(MEAL_TYPES, key=lambda meal: avg_calories[meal]) if total > 0 else None
    )
    meals = [log.meals_logged for log in raw.daily_logs]
    avg_meals_per_day = round(sum(meals) / len(meals), 1) if meals else 0.0
    return MealDistribution(
        frequencies=frequencies,
        calorie_distribution=calorie_distribution,
        avg_meals_per_day=avg_meals_per_day,
        largest_meal_type=largest,
    )


def compute_weight_trend(
    history: list[WeightObservation], today: date
) -> WeightTrend | None:
    """Summarize smoothed weight, or None with too few weigh-ins."""
    points = [obs for obs in fill_missing_trend_weights(history) if obs.day <= today]
    if len(points) < MIN_POINTS_FOR_TREND:
        return None
    current = points[-1].trend_weight_kg
    change_7d = _change_since(points, today - timedelta(days=7), current)
    change_30d = _change_since(points, today - timedelta(days=30), current)
    return WeightTrend(
        current_weight=round(current, 2),
        weight_change_7d=change_7d,
        weight_change_30d=change_30d,
        direction=_weight_direction(
            change_30d if change_30d is not None else change_7d
        ),
    )


def compute_weekly_averages(
    daily_logs: list[DailyLog], today: date, weeks: int = 4
) -> list[WeeklyAverage]:
    """Average daily intake for 7-day windows back from today, newest first."""
    averages: list[WeeklyAverage] = []
    for week in range(weeks):
        end = today - timedelta(days=week * DAYS_PER_WEEK)
        start = end - timedelta(days=DAYS_PER_WEEK - 1)
        logs = _logs_between(daily_logs, start, end)
        if not logs:
            continue
        averages.append(
            WeeklyAverage(
                week_start=start,
                days_logged=len(logs),
                avg_calories=_mean(log.calories for log in logs),
                avg_protein=_mean(log.protein for log in logs),
                avg_carbs=_mean(log.carbs for log in logs),
                avg_fat=_mean(log.fat for log in logs),
                avg_fiber=_mean(log.fiber for log in logs),
            )
        )
    return averages


def _progress(consumed: float, target: float) -> MacroProgress:
    return MacroProgress(
        consumed=round(consumed),
        target=round(target),
        remaining=round(target - consumed),
        percent_complete=round(consumed / target * 100) if target > 0 else 0,
    )


def _logs_between(logs: list[DailyLog], start: date, end: date) -> list[DailyLog]:
    return [log for log in logs if start <= log.day <= end]


def _mean(values: Iterable[float]) -> int:
    items = list(values)
    return round(sum(items) / len(items)) if items else 0


def _adherence(average: int, target: int, has_data: bool) -> int:
    if not has_data or target <= 0:
        return 0
    score = 100 - abs(average - target) / target * 100
    return round(min(100.0, max(0.0, score)))


def _direction(current: int, prior: int) -> TrendDirection:
    if current <= 0 or prior <= 0:
        return "stable"
    change_pct = (current - prior) / prior * 100
    if change_pct > DIRECTION_CHANGE_PCT:
        return "increasing"
    if change_pct < -DIRECTION_CHANGE_PCT:
        return "decreasing"
    return "stable"


def _logging_rate(logged_days: set[date], today: date, days: int) -> int:
    hits = sum(
        1 for offset in range(days) if today - timedelta(days=offset) in logged_days
    )
    return round(hits / days * 100)


def _change_since(
    points: list[WeightObservation], anchor: date, current: float
) -> float | None:
    baseline = next(
        (obs for obs in reversed(points) if obs.day <= anchor), None
    )
    if baseline is None:
        return None
    return round(current - baseline.trend_weight_kg, 2)


def _weight_direction(change: float | None) -> WeightDirection:
    if change is None:
        return "insufficient_data"
    if abs(change) < WEIGHT_CHANGE_THRESHOLD_KG:
        return "maintaining"
    return "gaining" if change > 0 else "losing"
