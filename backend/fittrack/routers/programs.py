"""
Workout program routes: programs, their workouts and exercise templates.

Every lookup joins up to programs.user_id, so a resource owned by another
user is indistinguishable from one that does not exist (404).
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List

from ..database import get_db
from .. import models, schemas
from ..auth import get_current_user
from ..plan_parsing import flex_value

router = APIRouter(prefix="/api/gym", tags=["Programs"])


# ---------- Ownership lookups ----------
def get_owned_program(db: Session, user_id: int, program_id: int) -> models.Program:
    program = db.query(models.Program).filter(
        models.Program.id == program_id,
        models.Program.user_id == user_id
    ).first()
    if not program:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program not found")
    return program


def get_owned_workout(db: Session, user_id: int, program_id: int, workout_id: int) -> models.Workout:
    workout = db.query(models.Workout).join(models.Program).filter(
        models.Workout.id == workout_id,
        models.Program.id == program_id,
        models.Program.user_id == user_id
    ).first()
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return workout


def get_owned_exercise(
    db: Session, user_id: int, program_id: int, workout_id: int, exercise_id: int
) -> models.Exercise:
    exercise = db.query(models.Exercise).join(models.Workout).join(models.Program).filter(
        models.Exercise.id == exercise_id,
        models.Workout.id == workout_id,
        models.Program.id == program_id,
        models.Program.user_id == user_id
    ).first()
    if not exercise:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    return exercise


# ---------- Programs ----------
@router.post("/programs", response_model=schemas.Program, status_code=status.HTTP_201_CREATED)
def create_program(
    program: schemas.ProgramCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an empty program for the current user."""
    db_program = models.Program(
        user_id=current_user.id,
        program_name=program.program_name,
        description=program.description,
    )
    db.add(db_program)
    db.commit()
    db.refresh(db_program)
    return db_program


@router.get("/programs", response_model=List[schemas.Program])
def list_programs(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all programs for the current user, newest first."""
    return db.query(models.Program).filter(
        models.Program.user_id == current_user.id
    ).order_by(desc(models.Program.created_at), desc(models.Program.id)).all()


@router.get("/programs/{program_id}", response_model=schemas.ProgramDetail)
def get_program(
    program_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a program with its workouts."""
    program = get_owned_program(db, current_user.id, program_id)
    return {"program": program, "workouts": program.workouts}


@router.delete("/programs/{program_id}")
def delete_program(
    program_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a program and all its workouts and exercises."""
    program = get_owned_program(db, current_user.id, program_id)
    db.delete(program)
    db.commit()
    return {"message": "Program and all its workouts and exercises deleted successfully"}


# ---------- Workouts ----------
@router.post("/programs/{program_id}/workouts", response_model=schemas.Workout, status_code=status.HTTP_201_CREATED)
def create_workout(
    program_id: int,
    workout: schemas.WorkoutCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a workout to a program."""
    program = get_owned_program(db, current_user.id, program_id)
    db_workout = models.Workout(program_id=program.id, workout_name=workout.workout_name)
    db.add(db_workout)
    db.commit()
    db.refresh(db_workout)
    return db_workout


@router.get("/programs/{program_id}/workouts", response_model=List[schemas.Workout])
def list_workouts(
    program_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all workouts for a program."""
    return get_owned_program(db, current_user.id, program_id).workouts


@router.get("/programs/{program_id}/workouts/{workout_id}", response_model=schemas.WorkoutDetail)
def get_workout(
    program_id: int,
    workout_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a workout with its exercises."""
    workout = get_owned_workout(db, current_user.id, program_id, workout_id)
    return {"workout": workout, "exercises": workout.exercises}


@router.delete("/programs/{program_id}/workouts/{workout_id}")
def delete_workout(
    program_id: int,
    workout_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a workout and all its exercises."""
    workout = get_owned_workout(db, current_user.id, program_id, workout_id)
    db.delete(workout)
    db.commit()
    return {"message": "Workout and all its exercises deleted successfully"}


# ---------- Exercises ----------
@router.post(
    "/programs/{program_id}/workouts/{workout_id}/exercises",
    response_model=schemas.Exercise,
    status_code=status.HTTP_201_CREATED
)
def create_exercise(
    program_id: int,
    workout_id: int,
    exercise: schemas.ExerciseCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an exercise to a workout. Reps and weight are stored as text ("8-12", "25kg")."""
    workout = get_owned_workout(db, current_user.id, program_id, workout_id)
    db_exercise = models.Exercise(
        workout_id=workout.id,
        exercise_name=exercise.exercise_name,
        sets=exercise.sets,
        reps=str(flex_value(exercise.reps)),
        weight=str(flex_value(exercise.weight)),
    )
    db.add(db_exercise)
    db.commit()
    db.refresh(db_exercise)
    return db_exercise


@router.get("/programs/{program_id}/workouts/{workout_id}/exercises", response_model=List[schemas.Exercise])
def list_exercises(
    program_id: int,
    workout_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all exercises for a workout."""
    return get_owned_workout(db, current_user.id, program_id, workout_id).exercises


@router.get(
    "/programs/{program_id}/workouts/{workout_id}/exercises/{exercise_id}",
    response_model=schemas.Exercise
)
def get_exercise(
    program_id: int,
    workout_id: int,
    exercise_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific exercise."""
    return get_owned_exercise(db, current_user.id, program_id, workout_id, exercise_id)


@router.put(
    "/programs/{program_id}/workouts/{workout_id}/exercises/{exercise_id}",
    response_model=schemas.Exercise
)
def update_exercise(
    program_id: int,
    workout_id: int,
    exercise_id: int,
    exercise_update: schemas.ExerciseUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an exercise's target sets, reps or weight."""
    exercise = get_owned_exercise(db, current_user.id, program_id, workout_id, exercise_id)

    changes = exercise_update.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if changes.get("sets") is not None:
        exercise.sets = changes["sets"]
    if "reps" in changes:
        exercise.reps = str(flex_value(changes["reps"]))
    if "weight" in changes:
        exercise.weight = str(flex_value(changes["weight"]))

    db.commit()
    db.refresh(exercise)
    return exercise


@router.delete("/programs/{program_id}/workouts/{workout_id}/exercises/{exercise_id}")
def delete_exercise(
    program_id: int,
    workout_id: int,
    exercise_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an exercise."""
    exercise = get_owned_exercise(db, current_user.id, program_id, workout_id, exercise_id)
    db.delete(exercise)
    db.commit()
    return {"message": "Exercise deleted successfully"}
