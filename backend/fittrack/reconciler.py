"""
Keeps Meal.total_calories equal to the sum of the meal's food calories.

increment_meal_calories is the only code that writes the column. It issues
a relative UPDATE so concurrent food mutations on the same meal never lose
an increment. The food mutations below each run as one transaction: the
food row change and the meal total change commit or roll back together.
"""
import logging
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models
from .database import transaction

logger = logging.getLogger(__name__)

FOOD_FIELDS = ("food_name", "quantity", "calories", "proteins", "carbohydrates", "fats")


def increment_meal_calories(db: Session, meal_id: int, delta: float) -> None:
    """UPDATE meals SET total_calories = total_calories + :delta (no commit)."""
    if not delta:
        return
    db.query(models.Meal).filter(models.Meal.id == meal_id).update(
        {models.Meal.total_calories: models.Meal.total_calories + delta},
        synchronize_session=False,
    )


def live_total_calories(db: Session, meal_id: int) -> float:
    """SUM(foods.calories) for the meal, straight from the table."""
    total = db.query(func.coalesce(func.sum(models.Food.calories), 0)).filter(
        models.Food.meal_id == meal_id
    ).scalar()
    return float(total or 0)


def _locked_calories(db: Session, food_id: int) -> float:
    row = db.query(models.Food.calories).filter(models.Food.id == food_id).with_for_update().one()
    return float(row.calories or 0)


def add_food(db: Session, meal: models.Meal, data: Dict[str, Any]) -> models.Food:
    """Insert a food and add its calories to the meal total."""
    calories = data.get("calories") or 0
    with transaction(db):
        food = models.Food(
            meal_id=meal.id,
            food_name=data["food_name"],
            quantity=data.get("quantity"),
            calories=calories,
            proteins=data.get("proteins") or 0,
            carbohydrates=data.get("carbohydrates") or 0,
            fats=data.get("fats") or 0,
        )
        db.add(food)
        db.flush()
        increment_meal_calories(db, meal.id, calories)
    db.refresh(food)
    logger.debug("Added food %s to meal %s (+%s kcal)", food.id, meal.id, calories)
    return food


def update_food(db: Session, food: models.Food, changes: Dict[str, Any]) -> models.Food:
    """
    Apply field changes to a food. When calories change, the meal total
    moves by (new - old), where old is read under a row lock in the same
    transaction as the update.
    """
    with transaction(db):
        old_calories = _locked_calories(db, food.id) if "calories" in changes else None
        for field_name in FOOD_FIELDS:
            if field_name in changes:
                value = changes[field_name]
                if field_name in ("calories", "proteins", "carbohydrates", "fats") and value is None:
                    value = 0
                setattr(food, field_name, value)
        db.flush()
        if old_calories is not None:
            increment_meal_calories(db, food.meal_id, (food.calories or 0) - old_calories)
    db.refresh(food)
    return food


def delete_food(db: Session, food: models.Food) -> None:
    """Delete a food and subtract its calories from the meal total."""
    meal_id = food.meal_id
    with transaction(db):
        calories = _locked_calories(db, food.id)
        db.delete(food)
        db.flush()
        increment_meal_calories(db, meal_id, -calories)
    logger.debug("Deleted food from meal %s (-%s kcal)", meal_id, calories)
