"""
Meal plan routes: meal plans, meals and foods.

Food mutations go through the reconciler so a meal's total_calories stays
equal to the sum of its foods. Ownership is enforced by joining up to
meal_plans.user_id on every access.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List
import logging

from ..database import get_db
from .. import models, schemas, reconciler
from ..auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/food", tags=["Meal Plans"])


# ---------- Ownership lookups ----------
def get_owned_meal_plan(db: Session, user_id: int, plan_id: int) -> models.MealPlan:
    plan = db.query(models.MealPlan).filter(
        models.MealPlan.id == plan_id,
        models.MealPlan.user_id == user_id
    ).first()
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal plan not found")
    return plan


def get_owned_meal(db: Session, user_id: int, plan_id: int, meal_id: int) -> models.Meal:
    meal = db.query(models.Meal).join(models.MealPlan).filter(
        models.Meal.id == meal_id,
        models.MealPlan.id == plan_id,
        models.MealPlan.user_id == user_id
    ).first()
    if not meal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found")
    return meal


def get_owned_food(db: Session, user_id: int, plan_id: int, meal_id: int, food_id: int) -> models.Food:
    food = db.query(models.Food).join(models.Meal).join(models.MealPlan).filter(
        models.Food.id == food_id,
        models.Meal.id == meal_id,
        models.MealPlan.id == plan_id,
        models.MealPlan.user_id == user_id
    ).first()
    if not food:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Food not found")
    return food


# ---------- Meal plans ----------
@router.post("/mealplans", response_model=schemas.MealPlan, status_code=status.HTTP_201_CREATED)
def create_meal_plan(
    plan: schemas.MealPlanCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an empty meal plan for the current user."""
    db_plan = models.MealPlan(
        user_id=current_user.id,
        meal_plan_name=plan.meal_plan_name,
        description=plan.description,
    )
    db.add(db_plan)
    db.commit()
    db.refresh(db_plan)
    return db_plan


@router.get("/mealplans", response_model=List[schemas.MealPlan])
def list_meal_plans(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all meal plans for the current user, newest first."""
    return db.query(models.MealPlan).filter(
        models.MealPlan.user_id == current_user.id
    ).order_by(desc(models.MealPlan.created_at), desc(models.MealPlan.id)).all()


@router.get("/mealplans/{plan_id}", response_model=schemas.MealPlanDetail)
def get_meal_plan(
    plan_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a meal plan with its meals."""
    plan = get_owned_meal_plan(db, current_user.id, plan_id)
    return {"plan": plan, "meals": plan.meals}


@router.delete("/mealplans/{plan_id}")
def delete_meal_plan(
    plan_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a meal plan and all its meals and foods."""
    plan = get_owned_meal_plan(db, current_user.id, plan_id)
    db.delete(plan)
    db.commit()
    return {"message": "Meal plan and all its meals and foods deleted successfully"}


# ---------- Meals ----------
@router.post("/mealplans/{plan_id}/meals", response_model=schemas.Meal, status_code=status.HTTP_201_CREATED)
def create_meal(
    plan_id: int,
    meal: schemas.MealCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a meal to a plan. The total starts at 0 and follows the foods added to it."""
    plan = get_owned_meal_plan(db, current_user.id, plan_id)
    db_meal = models.Meal(meal_plan_id=plan.id, meal_type=meal.meal_type, total_calories=0)
    db.add(db_meal)
    db.commit()
    db.refresh(db_meal)
    return db_meal


@router.get("/mealplans/{plan_id}/meals", response_model=List[schemas.Meal])
def list_meals(
    plan_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all meals for a plan."""
    return get_owned_meal_plan(db, current_user.id, plan_id).meals


@router.get("/mealplans/{plan_id}/meals/{meal_id}", response_model=schemas.MealDetail)
def get_meal(
    plan_id: int,
    meal_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a meal with its foods, plus the live food sum as a consistency check."""
    meal = get_owned_meal(db, current_user.id, plan_id, meal_id)
    live_total = reconciler.live_total_calories(db, meal.id)
    consistent = abs(live_total - float(meal.total_calories or 0)) < 0.005
    if not consistent:
        logger.warning(
            "Meal %s total_calories=%s differs from food sum %s", meal.id, meal.total_calories, live_total
        )
    return {
        "meal": meal,
        "foods": meal.foods,
        "live_total_calories": live_total,
        "calories_consistent": consistent,
    }


@router.delete("/mealplans/{plan_id}/meals/{meal_id}")
def delete_meal(
    plan_id: int,
    meal_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a meal and all its foods."""
    meal = get_owned_meal(db, current_user.id, plan_id, meal_id)
    db.delete(meal)
    db.commit()
    return {"message": "Meal and all its foods deleted successfully"}


# ---------- Foods ----------
@router.post(
    "/mealplans/{plan_id}/meals/{meal_id}/foods",
    response_model=schemas.Food,
    status_code=status.HTTP_201_CREATED
)
def create_food(
    plan_id: int,
    meal_id: int,
    food: schemas.FoodCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a food to a meal and add its calories to the meal total."""
    meal = get_owned_meal(db, current_user.id, plan_id, meal_id)
    try:
        return reconciler.add_food(db, meal, food.model_dump())
    except Exception as e:
        logger.exception("Error creating food")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating food: {str(e)}"
        )


@router.get("/mealplans/{plan_id}/meals/{meal_id}/foods", response_model=List[schemas.Food])
def list_foods(
    plan_id: int,
    meal_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all foods for a meal."""
    return get_owned_meal(db, current_user.id, plan_id, meal_id).foods


@router.get("/mealplans/{plan_id}/meals/{meal_id}/foods/{food_id}", response_model=schemas.Food)
def get_food(
    plan_id: int,
    meal_id: int,
    food_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific food."""
    return get_owned_food(db, current_user.id, plan_id, meal_id, food_id)


@router.put("/mealplans/{plan_id}/meals/{meal_id}/foods/{food_id}", response_model=schemas.Food)
def update_food(
    plan_id: int,
    meal_id: int,
    food_id: int,
    food_update: schemas.FoodUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a food; a calorie change moves the meal total by the difference."""
    food = get_owned_food(db, current_user.id, plan_id, meal_id, food_id)

    changes = food_update.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    if "food_name" in changes and not (changes["food_name"] or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Food name cannot be empty")

    try:
        return reconciler.update_food(db, food, changes)
    except Exception as e:
        logger.exception("Error updating food")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating food: {str(e)}"
        )


@router.delete("/mealplans/{plan_id}/meals/{meal_id}/foods/{food_id}")
def delete_food(
    plan_id: int,
    meal_id: int,
    food_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a food and subtract its calories from the meal total."""
    food = get_owned_food(db, current_user.id, plan_id, meal_id, food_id)
    try:
        reconciler.delete_food(db, food)
    except Exception as e:
        logger.exception("Error deleting food")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting food: {str(e)}"
        )
    return {"message": "Food deleted successfully"}
