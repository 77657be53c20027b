"""
Atomic persistence of parsed AI plans.

Rows are written parent first, each parent flushed for its id before its
children are built. The whole plan lives in one transaction: a failure on
any row rolls back the plan and every child already inserted.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from . import models
from .database import transaction
from .plan_parsing import ParsedMealPlan, ParsedWorkoutPlan
from .reconciler import increment_meal_calories

logger = logging.getLogger(__name__)


class PlanPersistenceError(Exception):
    """A parsed plan could not be written; nothing was committed."""


@dataclass
class SavedPlan:
    plan_id: int
    title: str
    description: Optional[str]


def save_workout_plan(db: Session, user_id: int, plan: ParsedWorkoutPlan) -> SavedPlan:
    try:
        with transaction(db):
            program = models.Program(
                user_id=user_id,
                program_name=plan.title,
                description=plan.description,
            )
            db.add(program)
            db.flush()

            for parsed_workout in plan.workouts:
                workout = models.Workout(program_id=program.id, workout_name=parsed_workout.name)
                db.add(workout)
                db.flush()

                for parsed_exercise in parsed_workout.exercises:
                    db.add(models.Exercise(
                        workout_id=workout.id,
                        exercise_name=parsed_exercise.name,
                        sets=parsed_exercise.sets,
                        reps=str(parsed_exercise.reps),
                        weight=str(parsed_exercise.weight),
                    ))
                    db.flush()
            program_id = program.id
    except Exception as e:
        logger.exception("Saving workout plan for user %s failed", user_id)
        raise PlanPersistenceError(str(e)) from e

    logger.info("Saved workout plan %s (%d workouts) for user %s", program_id, len(plan.workouts), user_id)
    return SavedPlan(plan_id=program_id, title=plan.title, description=plan.description)


def save_meal_plan(db: Session, user_id: int, plan: ParsedMealPlan) -> SavedPlan:
    try:
        with transaction(db):
            meal_plan = models.MealPlan(
                user_id=user_id,
                meal_plan_name=plan.title,
                description=plan.description,
            )
            db.add(meal_plan)
            db.flush()

            for parsed_meal in plan.meals:
                meal = models.Meal(
                    meal_plan_id=meal_plan.id,
                    meal_type=parsed_meal.meal_type,
                    total_calories=0,
                    declared_calories=parsed_meal.declared_calories,
                )
                db.add(meal)
                db.flush()

                for ingredient in parsed_meal.ingredients:
                    db.add(models.Food(
                        meal_id=meal.id,
                        food_name=ingredient.name,
                        quantity=ingredient.quantity,
                        calories=ingredient.calories,
                        proteins=ingredient.protein,
                        carbohydrates=ingredient.carbs,
                        fats=ingredient.fats,
                    ))
                    db.flush()
                    increment_meal_calories(db, meal.id, ingredient.calories)
            meal_plan_id = meal_plan.id
    except Exception as e:
        logger.exception("Saving meal plan for user %s failed", user_id)
        raise PlanPersistenceError(str(e)) from e

    logger.info("Saved meal plan %s (%d meals) for user %s", meal_plan_id, len(plan.meals), user_id)
    return SavedPlan(plan_id=meal_plan_id, title=plan.title, description=plan.description)
