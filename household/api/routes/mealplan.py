"""Shopping week windows, blackout ranges and nutrition targets."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from household.api.security import get_current_user
from household.infra.MealPlan_Repository import BlackoutRepository
from household.logic.mealplan.shopping_week import Blackout, describe_shopping_week, get_smart_week_start
from household.logic.nutrition.targets import CalculatorInput, MacroRules, calculate_nutrition_targets, validate_calculator_input
from household.utilities.validators import BlackoutInput, NutritionInput

router = APIRouter(prefix="/api", tags=["mealplan"])
logger = logging.getLogger(__name__)


def get_blackout_repository() -> BlackoutRepository:
    return BlackoutRepository()


@router.get("/shopping-week")
def shopping_week(anchor: Optional[date] = None, user: dict = Depends(get_current_user),
                  repo: BlackoutRepository = Depends(get_blackout_repository)):
    today = date.today()
    week = describe_shopping_week(anchor or today, repo.list_blackouts(user["id"]))
    week["smart_week_start"] = get_smart_week_start(today).isoformat()
    return week


@router.get("/shopping-week/blackouts")
def list_blackouts(user: dict = Depends(get_current_user), repo: BlackoutRepository = Depends(get_blackout_repository)):
    blackouts = sorted(repo.list_blackouts(user["id"]), key=lambda b: b.start_date)
    return {"blackouts": [b.to_dict() for b in blackouts]}


@router.post("/shopping-week/blackouts", status_code=201)
def add_blackout(payload: BlackoutInput, user: dict = Depends(get_current_user),
                 repo: BlackoutRepository = Depends(get_blackout_repository)):
    row = Blackout(payload.start_date, payload.end_date, payload.reason.strip()).to_dict()
    row.pop("id")
    return repo.insert(row, user["id"])


@router.delete("/shopping-week/blackouts/{blackout_id}")
def delete_blackout(blackout_id: str, user: dict = Depends(get_current_user),
                    repo: BlackoutRepository = Depends(get_blackout_repository)):
    if not repo.delete(blackout_id, user["id"]):
        raise HTTPException(status_code=404, detail="Blackout not found")
    return {"status": "deleted", "id": blackout_id}


@router.post("/nutrition/targets")
def nutrition_targets(payload: NutritionInput):
    """BMR, TDEE, goal calories and macro grams; range problems come back as a 400 listing every error."""
    inp = CalculatorInput(payload.age, payload.sex, payload.height_cm, payload.weight_kg,
                          payload.activity_level, payload.formula, payload.body_fat_percent)
    errors = validate_calculator_input(inp)
    if errors:
        raise HTTPException(status_code=400, detail=errors)
    return calculate_nutrition_targets(inp, payload.goal, MacroRules(payload.protein_per_kg, payload.fat_per_kg))
