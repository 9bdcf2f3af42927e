"""Supabase repository for weigh-ins and trend weights."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_insights.domain.weight import TrendWeightUpdate, WeightObservation
from nutrition_insights.services.trend_weight import WeightRepository


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Supabase implementation for the weight_entries table."""

    client: Client

    def list_weight_history(
        self, user_id: UUID, start: date | None = None
    ) -> list[WeightObservation]:
        """Return weigh-ins ordered by day."""
        query = (
            self.client.table("weight_entries")
            .select("id, date, weight_kg, trend_weight_kg")
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("date", start.isoformat())
        response = query.order("date", desc=False).execute()
        return [_parse_row(row) for row in response.data or []]

    def update_trend_weights(
        self, user_id: UUID, updates: list[TrendWeightUpdate]
    ) -> None:
        """Write recomputed trend weights row by row."""
        for update in updates:
            self.client.table("weight_entries").update(
                {"trend_weight_kg": update.trend_weight_kg}
            ).eq("id", update.id).eq("user_id", str(user_id)).execute()


def _parse_row(row: dict[str, object]) -> WeightObservation:
    trend = row.get("trend_weight_kg")
    return WeightObservation(
        id=str(row["id"]),
        day=date.fromisoformat(str(row["date"])[:10]),
        weight_kg=float(row["weight_kg"]),
        trend_weight_kg=float(trend) if trend is not None else None,
    )
