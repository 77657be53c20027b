"""
AI plan generation routes.

POST /api/ai/workout-plan
POST /api/ai/meal-plan

Flow: validate request -> generate raw text -> normalize -> parse -> save.
A plan the model formatted badly is not a request failure: the caller gets
200 with the raw text so it can still be shown, and nothing is stored.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas
from ..auth import get_current_user
from ..llm.planner import PlanGenerator, get_plan_generator
from ..plan_parsing import PlanFormatError, PlanKind, normalize, parse_plan
from ..plan_writer import save_meal_plan, save_workout_plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI Plans"])


def _require_fields(payload: schemas.PlanRequest) -> None:
    missing = payload.missing_fields()
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required parameters: {', '.join(missing)}"
        )


def validated_workout_request(payload: schemas.WorkoutPlanRequest) -> schemas.WorkoutPlanRequest:
    _require_fields(payload)
    return payload


def validated_meal_request(payload: schemas.MealPlanRequest) -> schemas.MealPlanRequest:
    _require_fields(payload)
    return payload


def _unsaved(db: Session, kind: PlanKind, error: PlanFormatError) -> JSONResponse:
    db.rollback()
    logger.warning("Generated %s plan not saved: %s", kind.value, error.reason)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "message": f"{kind.value.capitalize()} plan generated but not saved (invalid format)",
            "rawResponse": error.raw_text,
        },
    )


@router.post("/workout-plan", status_code=status.HTTP_201_CREATED)
def generate_workout_plan(
    current_user: models.User = Depends(get_current_user),
    payload: schemas.WorkoutPlanRequest = Depends(validated_workout_request),
    db: Session = Depends(get_db),
    generator: PlanGenerator = Depends(get_plan_generator),
):
    """
    Generate a workout program with the LLM and save it.

    - **201**: saved; returns program_id, program_name, description
    - **200**: generated but unparseable; returns the raw model text
    """
    try:
        raw = generator.generate_workout_plan(payload)
        logger.debug("Raw AI workout response: %s", raw)

        parsed = parse_plan(normalize(raw), PlanKind.WORKOUT, raw)
        if isinstance(parsed, PlanFormatError):
            return _unsaved(db, PlanKind.WORKOUT, parsed)

        saved = save_workout_plan(db, current_user.id, parsed)
        return {
            "message": "Workout plan generated and saved successfully",
            "program_id": saved.plan_id,
            "program_name": saved.title,
            "description": saved.description,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating workout plan: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error while generating workout plan: {str(e)}"
        )


@router.post("/meal-plan", status_code=status.HTTP_201_CREATED)
def generate_meal_plan(
    current_user: models.User = Depends(get_current_user),
    payload: schemas.MealPlanRequest = Depends(validated_meal_request),
    db: Session = Depends(get_db),
    generator: PlanGenerator = Depends(get_plan_generator),
):
    """
    Generate a meal plan with the LLM and save it.

    - **201**: saved; returns meal_plan_id, meal_plan_name, description
    - **200**: generated but unparseable; returns the raw model text
    """
    try:
        raw = generator.generate_meal_plan(payload)
        logger.debug("Raw AI meal response: %s", raw)

        parsed = parse_plan(normalize(raw), PlanKind.MEAL, raw)
        if isinstance(parsed, PlanFormatError):
            return _unsaved(db, PlanKind.MEAL, parsed)

        saved = save_meal_plan(db, current_user.id, parsed)
        return {
            "message": "Meal plan generated and saved successfully",
            "meal_plan_id": saved.plan_id,
            "meal_plan_name": saved.title,
            "description": saved.description,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating meal plan: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error while generating meal plan: {str(e)}"
        )
