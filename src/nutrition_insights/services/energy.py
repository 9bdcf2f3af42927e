"""Energy expenditure and goal calorie calculations."""

import math
from dataclasses import dataclass
from typing import Literal

from nutrition_insights.domain.nutrition import GoalType, MacroTargets

Sex = Literal["male", "female"]

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extremely_active": 1.9,
}

# Percent of body weight per week.
RATE_OPTIONS: dict[str, list[float]] = {
    "lose": [0.25, 0.5, 0.75, 1.0],
    "maintain": [0.0],
    "gain": [0.25, 0.5],
}

KCAL_PER_KG = 7700
MIN_SAFE_CALORIES = 1200
MAX_SUSTAINABLE_LOSS_RATE = 1.0
UNDERWEIGHT_BMI = 18.5

# Protein in g/kg body weight, fat as a share of total calories.
_GOAL_MACRO_GUIDELINES: dict[str, tuple[float, float]] = {
    "lose": (2.0, 0.30),
    "maintain": (1.6, 0.30),
    "gain": (1.8, 0.25),
}


@dataclass(frozen=True)
class EnergyProfile:
    """Body measurements used for energy estimates."""

    sex: Sex
    age_years: int
    height_cm: float
    weight_kg: float
    activity_level: str


def calculate_bmr(profile: EnergyProfile) -> int:
    """Return basal metabolic rate using the Mifflin-St Jeor equation."""
    base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age_years
    adjusted = base + 5 if profile.sex == "male" else base - 161
    return round(adjusted)


def calculate_tdee(profile: EnergyProfile) -> float:
    """Return total daily energy expenditure (BMR times activity multiplier)."""
    multiplier = ACTIVITY_MULTIPLIERS.get(profile.activity_level)
    if multiplier is None:
        raise ValueError(f"Unknown activity level: {profile.activity_level}")
    return calculate_bmr(profile) * multiplier


def calculate_target_calories(
    profile: EnergyProfile, goal_type: GoalType, rate_percent: float
) -> int:
    """Return the daily calorie target for a goal and weekly rate."""
    tdee = calculate_tdee(profile)
    if goal_type == "maintain":
        return round(tdee)
    daily_adjustment = _daily_adjustment(profile, rate_percent)
    if goal_type == "lose":
        return max(MIN_SAFE_CALORIES, round(tdee - daily_adjustment))
    return round(tdee + daily_adjustment)


def calculate_goal_macros(
    profile: EnergyProfile, goal_type: GoalType, rate_percent: float
) -> MacroTargets:
    """Return goal-based macro targets with carbs filling the remainder."""
    calories = calculate_target_calories(profile, goal_type, rate_percent)
    protein_per_kg, fat_share = _GOAL_MACRO_GUIDELINES[goal_type]
    protein = round(profile.weight_kg * protein_per_kg)
    fat_calories = round(calories * fat_share)
    fat = round(fat_calories / 9)
    carbs = round((calories - protein * 4 - fat_calories) / 4)
    return MacroTargets(
        calories=calories,
        protein=max(0, protein),
        carbs=max(0, carbs),
        fat=max(0, fat),
    )


def rate_options(goal_type: GoalType) -> list[float]:
    """Return the selectable weekly rates for a goal type."""
    return list(RATE_OPTIONS[goal_type])


def estimate_weeks_to_goal(
    current_weight_kg: float, target_weight_kg: float, rate_percent: float
) -> int | None:
    """Return weeks needed to reach a target weight, or None if not moving."""
    if not target_weight_kg or rate_percent <= 0:
        return None
    weekly_change = rate_percent / 100 * current_weight_kg
    return math.ceil(abs(target_weight_kg - current_weight_kg) / weekly_change)


def validate_goal(
    profile: EnergyProfile, goal_type: GoalType, rate_percent: float
) -> list[str]:
    """Return warnings for goal settings that look unsafe or unsustainable."""
    warnings: list[str] = []
    if (
        goal_type == "lose"
        and calculate_tdee(profile) - _daily_adjustment(profile, rate_percent)
        < MIN_SAFE_CALORIES
    ):
        warnings.append("Calorie target may be too low for long-term health.")
    if goal_type == "lose" and rate_percent > MAX_SUSTAINABLE_LOSS_RATE:
        warnings.append(
            "Losing more than 1% body weight per week may not be sustainable."
        )
    bmi = profile.weight_kg / (profile.height_cm / 100) ** 2
    if goal_type == "lose" and bmi < UNDERWEIGHT_BMI:
        warnings.append("Your BMI suggests you may already be underweight.")
    return warnings


def _daily_adjustment(profile: EnergyProfile, rate_percent: float) -> int:
    weekly_change_kg = rate_percent / 100 * profile.weight_kg
    return round(weekly_change_kg * KCAL_PER_KG / 7)
