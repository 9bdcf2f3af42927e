"""Macro split calculations and target resolution."""

from collections.abc import Mapping
from dataclasses import dataclass

from nutrition_insights.domain.nutrition import (
    DEFAULT_MACRO_TARGETS,
    GoalSummary,
    MacroTargets,
)

KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}

MIN_PROTEIN_G = 40
MIN_FAT_G = 30
MAX_CALORIE_MISMATCH = 50


@dataclass(frozen=True)
class EatingStyle:
    """Split of non-protein calories between carbs and fat."""

    carb_ratio: float
    fat_ratio: float
    carb_cap_g: int | None = None


EATING_STYLES: dict[str, EatingStyle] = {
    "flexible": EatingStyle(carb_ratio=0.5, fat_ratio=0.5),
    "carb_focused": EatingStyle(carb_ratio=0.65, fat_ratio=0.35),
    "fat_focused": EatingStyle(carb_ratio=0.35, fat_ratio=0.65, carb_cap_g=150),
    "very_low_carb": EatingStyle(carb_ratio=0.1, fat_ratio=0.9, carb_cap_g=50),
}

# Grams of protein per kg of body weight.
PROTEIN_PRIORITIES: dict[str, float] = {
    "standard": 1.32,
    "active": 1.65,
    "athletic": 1.98,
    "maximum": 2.2,
}


@dataclass(frozen=True)
class MacroBreakdown:
    """Macro targets with calorie contributions and percentages."""

    targets: MacroTargets
    protein_calories: int
    carbs_calories: int
    fat_calories: int
    protein_percent: int
    carbs_percent: int
    fat_percent: int
    carb_cap_applied: bool


def calculate_macros(
    weight_kg: float,
    target_calories: int,
    eating_style: str,
    protein_priority: str,
) -> MacroTargets:
    """Return protein from body weight and split the rest by eating style."""
    return calculate_macro_breakdown(
        weight_kg, target_calories, eating_style, protein_priority
    ).targets


def calculate_macro_breakdown(
    weight_kg: float,
    target_calories: int,
    eating_style: str,
    protein_priority: str,
) -> MacroBreakdown:
    """Return macro targets along with per-macro calories and percentages.

    Protein comes first from the priority's g/kg rate. The remaining calories
    are split by the eating style; when a carb cap applies, the calories above
    the cap move to fat.
    """
    style = EATING_STYLES.get(eating_style)
    if style is None:
        raise ValueError(f"Unknown eating style: {eating_style}")
    grams_per_kg = PROTEIN_PRIORITIES.get(protein_priority)
    if grams_per_kg is None:
        raise ValueError(f"Unknown protein priority: {protein_priority}")

    protein = round(weight_kg * grams_per_kg)
    remaining = max(0, target_calories - protein * KCAL_PER_GRAM["protein"])
    carbs = round(remaining * style.carb_ratio / KCAL_PER_GRAM["carbs"])
    fat = round(remaining * style.fat_ratio / KCAL_PER_GRAM["fat"])

    carb_cap_applied = False
    if style.carb_cap_g is not None and carbs > style.carb_cap_g:
        carb_cap_applied = True
        carbs = style.carb_cap_g
        overflow = remaining - carbs * KCAL_PER_GRAM["carbs"]
        fat = round(overflow / KCAL_PER_GRAM["fat"])

    targets = MacroTargets(
        calories=target_calories,
        protein=max(0, protein),
        carbs=max(0, carbs),
        fat=max(0, fat),
    )
    protein_calories = targets.protein * KCAL_PER_GRAM["protein"]
    carbs_calories = targets.carbs * KCAL_PER_GRAM["carbs"]
    fat_calories = targets.fat * KCAL_PER_GRAM["fat"]
    total = protein_calories + carbs_calories + fat_calories

    def percent(value: int) -> int:
        return round(value / total * 100) if total > 0 else 0

    return MacroBreakdown(
        targets=targets,
        protein_calories=protein_calories,
        carbs_calories=carbs_calories,
        fat_calories=fat_calories,
        protein_percent=percent(protein_calories),
        carbs_percent=percent(carbs_calories),
        fat_percent=percent(fat_calories),
        carb_cap_applied=carb_cap_applied,
    )


def validate_macros(targets: MacroTargets) -> list[str]:
    """Return warnings for macro combinations that look unreasonable."""
    warnings: list[str] = []
    if targets.protein < MIN_PROTEIN_G:
        warnings.append("Protein is very low. Consider increasing protein priority.")
    if targets.fat < MIN_FAT_G:
        warnings.append("Fat is very low. This may affect hormone function.")
    computed = (
        targets.protein * KCAL_PER_GRAM["protein"]
        + targets.carbs * KCAL_PER_GRAM["carbs"]
        + targets.fat * KCAL_PER_GRAM["fat"]
    )
    if abs(computed - targets.calories) > MAX_CALORIE_MISMATCH:
        warnings.append("Macro totals differ significantly from calorie target.")
    return warnings


def resolve_macro_targets(
    goal: GoalSummary | None, settings_targets: Mapping[str, float] | None = None
) -> MacroTargets:
    """Return targets from the active goal, then settings, then defaults.

    Settings values are keyed by ``calories``, ``protein``, ``carbs`` and
    ``fat``; a missing or zero value falls back to the default for that field.
    """
    if goal is not None:
        return MacroTargets(
            calories=round(goal.target_calories),
            protein=round(goal.target_protein),
            carbs=round(goal.target_carbs),
            fat=round(goal.target_fat),
        )
    values = settings_targets or {}

    def pick(key: str, default: int) -> int:
        value = values.get(key)
        return round(value) if value else default

    return MacroTargets(
        calories=pick("calories", DEFAULT_MACRO_TARGETS.calories),
        protein=pick("protein", DEFAULT_MACRO_TARGETS.protein),
        carbs=pick("carbs", DEFAULT_MACRO_TARGETS.carbs),
        fat=pick("fat", DEFAULT_MACRO_TARGETS.fat),
    )
