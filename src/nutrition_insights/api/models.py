"""Request payloads accepted by the API."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field


class RecomputeRequest(BaseModel):
    edit_date: date


class TargetsRequest(BaseModel):
    """Body measurements and preferences for target calculation."""

    sex: Literal["male", "female"]
    age_years: int = Field(gt=0, lt=130)
    height_cm: float = Field(gt=0)
    weight_kg: float = Field(gt=0)
    activity_level: str
    goal_type: Literal["lose", "gain", "maintain"] = "maintain"
    rate_percent: float = Field(default=0.0, ge=0)
    eating_style: str = "flexible"
    protein_priority: str = "active"
