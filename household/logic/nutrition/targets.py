"""Nutrition target calculator: BMR, TDEE and macro split (metric units)."""
from typing import Dict, List, Optional

from household.utilities.constants import (
    ACTIVITY_MULTIPLIERS,
    GOAL_ADJUSTMENTS,
    DEFAULT_PROTEIN_PER_KG,
    DEFAULT_FAT_PER_KG,
    MACRO_TOLERANCE_KCAL,
)

FORMULAS = ("mifflin_st_jeor", "harris_benedict", "katch_mcardle")


class CalculatorInput:
    def __init__(self, age: int, sex: str, height_cm: float, weight_kg: float,
                 activity_level: str = "sedentary", formula: str = "mifflin_st_jeor",
                 body_fat_percent: Optional[float] = None):
        self.age = age
        self.sex = sex
        self.height_cm = height_cm
        self.weight_kg = weight_kg
        self.activity_level = activity_level
        self.formula = formula
        self.body_fat_percent = body_fat_percent


class MacroRules:
    def __init__(self, protein_per_kg: float = DEFAULT_PROTEIN_PER_KG, fat_per_kg: float = DEFAULT_FAT_PER_KG):
        self.protein_per_kg = protein_per_kg
        self.fat_per_kg = fat_per_kg


def calculate_mifflin_st_jeor(weight_kg: float, height_cm: float, age: int, sex: str) -> float:
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if sex == "male" else base - 161


def calculate_harris_benedict(weight_kg: float, height_cm: float, age: int, sex: str) -> float:
    """Revised (1984) Harris-Benedict equation."""
    if sex == "male":
        return 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age + 88.362
    return 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age + 447.593


def calculate_katch_mcardle(weight_kg: float, body_fat_percent: float) -> float:
    lean_mass = weight_kg * (1 - body_fat_percent / 100)
    return 370 + 21.6 * lean_mass


def calculate_bmr(inp: CalculatorInput) -> float:
    if inp.formula == "harris_benedict":
        return calculate_harris_benedict(inp.weight_kg, inp.height_cm, inp.age, inp.sex)
    if inp.formula == "katch_mcardle":
        if inp.body_fat_percent is None:
            raise ValueError("Katch-McArdle formula requires body fat percentage")
        return calculate_katch_mcardle(inp.weight_kg, inp.body_fat_percent)
    return calculate_mifflin_st_jeor(inp.weight_kg, inp.height_cm, inp.age, inp.sex)


def calculate_tdee(bmr: float, activity_level: str) -> float:
    if activity_level not in ACTIVITY_MULTIPLIERS:
        raise ValueError(f"Unknown activity level: {activity_level}")
    return bmr * ACTIVITY_MULTIPLIERS[activity_level]


def calculate_macros(target_calories: float, weight_kg: float, rules: Optional[MacroRules] = None) -> Dict[str, int]:
    """Protein and fat from per-kg rules; carbs fill what is left (never negative)."""
    rules = rules or MacroRules()
    protein = round(rules.protein_per_kg * weight_kg)
    fat = round(rules.fat_per_kg * weight_kg)
    left = max(0, target_calories - protein * 4 - fat * 9)
    return {"protein_grams": protein, "fat_grams": fat, "carbs_grams": round(left / 4)}


def calculate_nutrition_targets(inp: CalculatorInput, goal: str = "maintain",
                                rules: Optional[MacroRules] = None) -> Dict[str, int]:
    if goal not in GOAL_ADJUSTMENTS:
        raise ValueError(f"Unknown goal: {goal}")
    bmr = calculate_bmr(inp)
    tdee = calculate_tdee(bmr, inp.activity_level)
    target = round(tdee + GOAL_ADJUSTMENTS[goal])
    out = {"bmr": round(bmr), "tdee": round(tdee), "target_calories": target}
    out.update(calculate_macros(target, inp.weight_kg, rules))
    return out


def validate_calculator_input(inp: CalculatorInput) -> List[str]:
    """All validation errors for the input (empty list when valid)."""
    errors = []
    if not inp.age or not 15 <= inp.age <= 100:
        errors.append("Age must be between 15 and 100")
    if inp.sex not in ("male", "female"):
        errors.append("Sex is required")
    if not inp.height_cm or not 100 <= inp.height_cm <= 250:
        errors.append("Height must be between 100 and 250 cm")
    if not inp.weight_kg or not 30 <= inp.weight_kg <= 300:
        errors.append("Weight must be between 30 and 300 kg")
    if inp.body_fat_percent is not None and not 3 <= inp.body_fat_percent <= 60:
        errors.append("Body fat must be between 3% and 60%")
    if inp.formula == "katch_mcardle" and inp.body_fat_percent is None:
        errors.append("Katch-McArdle formula requires body fat percentage")
    return errors


def verify_macro_balance(output: Dict[str, int], tolerance: float = MACRO_TOLERANCE_KCAL) -> bool:
    kcal = output["protein_grams"] * 4 + output["carbs_grams"] * 4 + output["fat_grams"] * 9
    return abs(kcal - output["target_calories"]) <= tolerance


__all__ = [
    'FORMULAS', 'CalculatorInput', 'MacroRules', 'calculate_mifflin_st_jeor', 'calculate_harris_benedict',
    'calculate_katch_mcardle', 'calculate_bmr', 'calculate_tdee', 'calculate_macros',
    'calculate_nutrition_targets', 'validate_calculator_input', 'verify_macro_balance',
]
