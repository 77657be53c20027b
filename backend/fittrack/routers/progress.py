"""
Progress analytics over logged workout sessions.

- GET /api/progress/history: sessions with per-exercise volume
- GET /api/progress/progression/{exercise_name}: completed logs over time
- GET /api/progress/personal-records: best weight and volume per exercise
- GET /api/progress/frequency-stats: workout days per month, top exercises

Reps and weight are free text; volume uses their leading number
("8-12" -> 8, "25kg" -> 25) and counts anything unparseable as 0.
"""
import re
from collections import Counter, OrderedDict
from datetime import date
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas
from ..auth import get_current_user


router = APIRouter(prefix="/api/progress", tags=["Progress"])

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")

LogRow = Tuple[models.ExerciseLog, models.WorkoutSession, models.Workout, models.Program, models.Exercise]


# ---------------- Utilities ----------------
def leading_number(text: Optional[str]) -> float:
    if not text:
        return 0.0
    match = _LEADING_NUMBER.match(str(text))
    return float(match.group(1)) if match else 0.0


def volume(sets: Optional[int], reps: Optional[str], weight: Optional[str]) -> float:
    return (sets or 0) * leading_number(reps) * leading_number(weight)


def _log_rows(db: Session, user_id: int):
    return db.query(
        models.ExerciseLog, models.WorkoutSession, models.Workout, models.Program, models.Exercise
    ).join(
        models.WorkoutSession, models.ExerciseLog.session_id == models.WorkoutSession.id
    ).join(
        models.Workout, models.WorkoutSession.workout_id == models.Workout.id
    ).join(
        models.Program, models.Workout.program_id == models.Program.id
    ).join(
        models.Exercise, models.ExerciseLog.exercise_id == models.Exercise.id
    ).filter(models.WorkoutSession.user_id == user_id)


def _completed_rows(db: Session, user_id: int) -> List[LogRow]:
    return _log_rows(db, user_id).filter(models.ExerciseLog.completed.is_(True)).order_by(
        models.WorkoutSession.date, models.ExerciseLog.id
    ).all()


# ---------------- Endpoints ----------------
@router.get("/history", response_model=List[schemas.ProgressSession])
def workout_history(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    program_id: Optional[int] = None,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Sessions (newest first) with each exercise log and its volume."""
    query = _log_rows(db, current_user.id)
    if start_date:
        query = query.filter(models.WorkoutSession.date >= start_date)
    if end_date:
        query = query.filter(models.WorkoutSession.date <= end_date)
    if program_id:
        query = query.filter(models.Program.id == program_id)

    rows = query.order_by(
        models.WorkoutSession.date.desc(), models.WorkoutSession.id, models.ExerciseLog.id
    ).all()

    sessions: "OrderedDict[int, dict]" = OrderedDict()
    for log, session, workout, program, exercise in rows:
        entry = sessions.get(session.id)
        if entry is None:
            entry = {
                "session_id": session.id,
                "date": session.date,
                "program_id": program.id,
                "program_name": program.program_name,
                "workout_id": workout.id,
                "workout_name": workout.workout_name,
                "exercises": [],
            }
            sessions[session.id] = entry
        entry["exercises"].append({
            "log_id": log.id,
            "exercise_id": exercise.id,
            "exercise_name": exercise.exercise_name,
            "sets": log.sets,
            "reps": log.reps,
            "weight": log.weight,
            "completed": log.completed,
            "volume": volume(log.sets, log.reps, log.weight),
        })
    return list(sessions.values())


@router.get("/progression/{exercise_name}", response_model=List[schemas.ProgressionPoint])
def exercise_progression(
    exercise_name: str,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Completed logs for one exercise name, oldest first."""
    rows = [r for r in _completed_rows(db, current_user.id) if r[4].exercise_name == exercise_name]
    return [
        {
            "date": session.date,
            "log_id": log.id,
            "sets": log.sets,
            "reps": log.reps,
            "weight": log.weight,
            "volume": volume(log.sets, log.reps, log.weight),
        }
        for log, session, _, _, _ in rows
    ]


@router.get("/personal-records", response_model=schemas.PersonalRecords)
def personal_records(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Heaviest weight and largest volume per exercise across completed logs."""
    best_weight: Dict[str, Tuple[float, date]] = {}
    best_volume: Dict[str, Tuple[float, date]] = {}
    for log, session, _, _, exercise in _completed_rows(db, current_user.id):
        name = exercise.exercise_name
        w = leading_number(log.weight)
        v = volume(log.sets, log.reps, log.weight)
        # strict > keeps the earliest date on ties
        if name not in best_weight or w > best_weight[name][0]:
            best_weight[name] = (w, session.date)
        if name not in best_volume or v > best_volume[name][0]:
            best_volume[name] = (v, session.date)

    max_weight = sorted(
        ({"exercise_name": n, "max_weight": w, "record_date": d} for n, (w, d) in best_weight.items()),
        key=lambda r: r["max_weight"], reverse=True,
    )
    max_volume = sorted(
        ({"exercise_name": n, "max_volume": v, "record_date": d} for n, (v, d) in best_volume.items()),
        key=lambda r: r["max_volume"], reverse=True,
    )
    return {"max_weight": max_weight, "max_volume": max_volume}


@router.get("/frequency-stats", response_model=schemas.FrequencyStats)
def frequency_stats(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Distinct workout days per month and the ten most completed exercises."""
    session_dates = [
        d for (d,) in db.query(models.WorkoutSession.date).filter(
            models.WorkoutSession.user_id == current_user.id
        ).distinct().all()
    ]
    per_month: Counter = Counter(d.strftime("%Y-%m") for d in set(session_dates))
    monthly = [{"month": m, "workout_days": per_month[m]} for m in sorted(per_month)]

    counts = Counter(r[4].exercise_name for r in _completed_rows(db, current_user.id))
    frequent = [{"exercise_name": n, "frequency": c} for n, c in counts.most_common(10)]

    return {"monthly_frequency": monthly, "frequent_exercises": frequent}
