"""Supabase repository for the raw nutrition tables."""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_insights.domain.nutrition import (
    DailyLog,
    FrequentFood,
    GoalSummary,
    MealPattern,
    ProfileSummary,
)
from nutrition_insights.services.context import NutritionDataRepository

_ENTRY_COLUMNS = "date, meal_type, calories, protein, carbs, fat"

_SETTINGS_TARGET_COLUMNS = {
    "daily_calorie_goal": "calories",
    "daily_protein_goal": "protein",
    "daily_carbs_goal": "carbs",
    "daily_fat_goal": "fat",
}


@dataclass
class SupabaseNutritionRepository(NutritionDataRepository):
    """Supabase implementation of the nutrition reads.

    Food log entries and quick-add entries are merged per day; sums and
    averages are computed here and rounded to whole numbers.
    """

    client: Client

    def list_daily_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        """Return per-day totals for days with at least one entry."""
        totals: dict[date, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        meals: dict[date, set[str]] = defaultdict(set)
        for row in self._list_entries(user_id, start, end):
            day = _parse_date(row["date"])
            for key in ("calories", "protein", "carbs", "fat", "fiber"):
                totals[day][key] += _as_float(row.get(key))
            if row.get("meal_type"):
                meals[day].add(str(row["meal_type"]))
        return [
            DailyLog(
                day=day,
                calories=round(values["calories"]),
                protein=round(values["protein"]),
                carbs=round(values["carbs"]),
                fat=round(values["fat"]),
                fiber=round(values["fiber"]),
                meals_logged=len(meals[day]),
            )
            for day, values in sorted(totals.items())
        ]

    def get_active_goal(self, user_id: UUID) -> GoalSummary | None:
        """Return the newest active goal."""
        response = (
            self.client.table("goals")
            .select(
                "type, current_target_calories, current_protein_g, "
                "current_carbs_g, current_fat_g"
            )
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return GoalSummary(
            type=row.get("type") or "maintain",
            target_calories=round(_as_float(row.get("current_target_calories"))),
            target_protein=round(_as_float(row.get("current_protein_g"))),
            target_carbs=round(_as_float(row.get("current_carbs_g"))),
            target_fat=round(_as_float(row.get("current_fat_g"))),
        )

    def get_settings_targets(self, user_id: UUID) -> dict[str, float]:
        """Return macro targets set in user settings, skipping empty values."""
        row = self._settings_row(user_id, ", ".join(_SETTINGS_TARGET_COLUMNS))
        if row is None:
            return {}
        return {
            key: _as_float(row[column])
            for column, key in _SETTINGS_TARGET_COLUMNS.items()
            if row.get(column) is not None
        }

    def list_frequent_foods(self, user_id: UUID, limit: int) -> list[FrequentFood]:
        """Return the most logged foods with their average calories."""
        response = (
            self.client.table("log_entries")
            .select("food_name, calories")
            .eq("user_id", str(user_id))
            .execute()
        )
        counts: Counter[str] = Counter()
        calories: dict[str, float] = defaultdict(float)
        for row in response.data or []:
            name = row.get("food_name")
            if not name:
                continue
            counts[name] += 1
            calories[name] += _as_float(row.get("calories"))
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [
            FrequentFood(
                name=name,
                times_logged=count,
                avg_calories=round(calories[name] / count),
            )
            for name, count in ranked[:limit]
        ]

    def list_meal_patterns(
        self, user_id: UUID, start: date, end: date
    ) -> list[MealPattern]:
        """Return average per-day calories and day counts by meal type."""
        per_day: dict[str, dict[date, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        for row in self._list_entries(user_id, start, end):
            meal_type = row.get("meal_type")
            if not meal_type:
                continue
            per_day[str(meal_type)][_parse_date(row["date"])] += _as_float(
                row.get("calories")
            )
        return [
            MealPattern(
                meal_type=meal_type,
                avg_calories=round(sum(days.values()) / len(days)),
                distinct_days_logged=len(days),
            )
            for meal_type, days in sorted(per_day.items())
        ]

    def get_profile(self, user_id: UUID) -> ProfileSummary | None:
        """Return profile preferences."""
        response = (
            self.client.table("user_profiles")
            .select("activity_level, eating_style, protein_priority")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ProfileSummary(
            activity_level=row.get("activity_level"),
            eating_style=row.get("eating_style"),
            protein_priority=row.get("protein_priority"),
        )

    def get_weight_unit(self, user_id: UUID) -> str | None:
        """Return the stored weight unit preference."""
        row = self._settings_row(user_id, "weight_unit")
        if row is None:
            return None
        return row.get("weight_unit")

    def _settings_row(self, user_id: UUID, columns: str) -> dict[str, object] | None:
        response = (
            self.client.table("user_settings")
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _list_entries(
        self, user_id: UUID, start: date, end: date
    ) -> list[dict[str, object]]:
        logged = (
            self.client.table("log_entries")
            .select(f"{_ENTRY_COLUMNS}, fiber")
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        quick_add = (
            self.client.table("quick_add_entries")
            .select(_ENTRY_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [*(logged.data or []), *(quick_add.data or [])]


def _parse_date(raw: object) -> date:
    return date.fromisoformat(str(raw)[:10])


def _as_float(value: object) -> float:
    if value is None:
        return 0.0
    return float(value)
