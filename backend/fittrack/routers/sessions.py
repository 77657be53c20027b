"""
Workout session routes: start a session from a workout template, log sets,
browse history.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Optional
from datetime import date
import logging

from dateutil import parser as date_parser

from ..database import get_db, transaction
from .. import models, schemas
from ..auth import get_current_user
from ..plan_parsing import flex_value
from .programs import get_owned_workout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


def serialize_log(log: models.ExerciseLog) -> dict:
    return {
        "id": log.id,
        "session_id": log.session_id,
        "exercise_id": log.exercise_id,
        "exercise_name": log.exercise.exercise_name,
        "sets": log.sets,
        "reps": log.reps,
        "weight": log.weight,
        "completed": log.completed,
    }


def serialize_session(session: models.WorkoutSession) -> dict:
    """Session row plus workout/program names and its logs with exercise names."""
    workout = session.workout
    return {
        "id": session.id,
        "user_id": session.user_id,
        "workout_id": session.workout_id,
        "workout_name": workout.workout_name,
        "program_id": workout.program_id,
        "program_name": workout.program.program_name,
        "date": session.date,
        "notes": session.notes,
        "exercises": [serialize_log(log) for log in session.logs],
    }


def _parse_session_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date: {value}")


@router.post("/start/{program_id}/{workout_id}", response_model=schemas.WorkoutSession, status_code=status.HTTP_201_CREATED)
def start_session(
    program_id: int,
    workout_id: int,
    payload: Optional[schemas.SessionStart] = None,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Start a workout session from a workout template.
    One exercise log is created per template exercise, pre-filled with the
    target sets/reps/weight and marked not completed.
    """
    payload = payload or schemas.SessionStart()
    workout = get_owned_workout(db, current_user.id, program_id, workout_id)
    session_date = _parse_session_date(payload.date)

    try:
        with transaction(db):
            session = models.WorkoutSession(
                user_id=current_user.id,
                workout_id=workout.id,
                date=session_date,
                notes=payload.notes or "",
            )
            db.add(session)
            db.flush()
            for exercise in workout.exercises:
                db.add(models.ExerciseLog(
                    session_id=session.id,
                    exercise_id=exercise.id,
                    sets=exercise.sets,
                    reps=exercise.reps,
                    weight=exercise.weight,
                    completed=False,
                ))
    except Exception as e:
        logger.exception("Error starting workout session")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error starting workout session: {str(e)}"
        )

    db.refresh(session)
    return serialize_session(session)


@router.put("/log/{log_id}", response_model=schemas.ExerciseLog)
def update_exercise_log(
    log_id: int,
    log_update: schemas.ExerciseLogUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record the sets/reps/weight actually performed, or mark the exercise completed."""
    log = db.query(models.ExerciseLog).join(models.WorkoutSession).filter(
        models.ExerciseLog.id == log_id,
        models.WorkoutSession.user_id == current_user.id
    ).first()
    if not log:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise log not found")

    changes = log_update.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if changes.get("sets") is not None:
        log.sets = changes["sets"]
    if "reps" in changes:
        log.reps = str(flex_value(changes["reps"]))
    if "weight" in changes:
        log.weight = str(flex_value(changes["weight"]))
    if changes.get("completed") is not None:
        log.completed = changes["completed"]

    db.commit()
    db.refresh(log)
    return serialize_log(log)


@router.get("/history", response_model=List[schemas.WorkoutSession])
def list_sessions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get all workout sessions for the current user, newest first.

    - **start_date**: Only sessions on or after this date (optional)
    - **end_date**: Only sessions on or before this date (optional)
    """
    query = db.query(models.WorkoutSession).filter(models.WorkoutSession.user_id == current_user.id)
    if start_date:
        query = query.filter(models.WorkoutSession.date >= start_date)
    if end_date:
        query = query.filter(models.WorkoutSession.date <= end_date)

    sessions = query.order_by(desc(models.WorkoutSession.date), desc(models.WorkoutSession.id)).all()
    return [serialize_session(s) for s in sessions]


@router.get("/{session_id}", response_model=schemas.WorkoutSession)
def get_session(
    session_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific workout session with its exercise logs."""
    session = db.query(models.WorkoutSession).filter(
        models.WorkoutSession.id == session_id,
        models.WorkoutSession.user_id == current_user.id
    ).first()
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout session not found")
    return serialize_session(session)
