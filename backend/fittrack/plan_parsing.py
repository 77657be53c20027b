"""
Turning raw model output into plan structures ready for persistence.

Two stages:
- normalize: pull the JSON payload out of whatever the model wrapped it in
  and repair it into strict JSON (never raises).
- parse_*: strict-parse the repaired text and map it onto the dataclasses
  below, substituting defaults for anything missing. A document that cannot
  be used comes back as a PlanFormatError carrying the raw model text.
"""
from __future__ import annotations

import enum
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import json_repair

from .config import settings

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)
_RECOMMENDED_WEIGHT = re.compile(r"recommendedWeight:\s*([^\n]+)", re.IGNORECASE)

DEFAULT_PROGRAM_TITLE = "Custom Workout Program"
DEFAULT_MEAL_PLAN_TITLE = "Custom Meal Plan"
DEFAULT_SETS = 3

# Column widths in models.py; longer model text is clipped rather than failing the insert
NAME_MAX = 255
MEAL_TYPE_MAX = 50
REPS_MAX = 50
WEIGHT_MAX = 100
QUANTITY_MAX = 100


# ---------- Normalizer ----------

def extract_payload(text: str) -> str:
    """Return the interior of the first fenced block (or the text itself), minus // comment lines."""
    match = _FENCED_BLOCK.search(text)
    raw_json = match.group(1) if match else text
    return _LINE_COMMENT.sub("", raw_json).strip()


def repair(text: str) -> str:
    """Best-effort repair into strict JSON. Returns the input unchanged if repair is skipped or fails."""
    if len(text) > settings.plan_repair_max_chars:
        logger.warning("Skipping JSON repair (input too large: %d chars)", len(text))
        return text
    try:
        repaired = json_repair.repair_json(text)
    except Exception as e:
        logger.warning("JSON repair failed: %s", e)
        return text
    return repaired if isinstance(repaired, str) else text


def normalize(text: str) -> str:
    return repair(extract_payload(text or ""))


# ---------- Tagged values for reps / weight ----------

@dataclass(frozen=True)
class NumericValue:
    number: float

    def __str__(self) -> str:
        if float(self.number).is_integer():
            return str(int(self.number))
        return str(self.number)


@dataclass(frozen=True)
class TextValue:
    text: str

    def __str__(self) -> str:
        return self.text


FlexValue = Union[NumericValue, TextValue]


def _is_number(val: Any) -> bool:
    """JSON number that can be stored: not a bool, not NaN or infinity."""
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        return False
    return not isinstance(val, float) or math.isfinite(val)


def flex_value(val: Any) -> FlexValue:
    """Wrap a number-or-text JSON value; null/absent/other becomes empty text."""
    if _is_number(val):
        return NumericValue(val)
    if isinstance(val, str):
        return TextValue(val)
    return TextValue("")


def _number_or(val: Any, default: float = 0) -> float:
    if _is_number(val):
        return val
    if isinstance(val, str):
        try:
            number = float(val.strip())
        except ValueError:
            return default
        return number if math.isfinite(number) else default
    return default


def _sets(val: Any) -> int:
    if isinstance(val, str) and val.strip().isdigit():
        val = int(val.strip())
    if _is_number(val) and val > 0:
        return int(val)
    return DEFAULT_SETS


def _weight(exercise: Dict[str, Any]) -> FlexValue:
    weight = exercise.get("weight")
    if isinstance(weight, str):
        return TextValue(weight)

    notes = exercise.get("notes")
    if isinstance(notes, str):
        match = _RECOMMENDED_WEIGHT.search(notes)
        if match:
            return TextValue(match.group(1).strip())

    if _is_number(weight):
        return NumericValue(weight)
    return flex_value(exercise.get("recommendedWeight"))


def _objects(val: Any) -> List[Dict[str, Any]]:
    """Dict entries of a JSON array; anything else yields nothing."""
    if not isinstance(val, list):
        return []
    return [item for item in val if isinstance(item, dict)]


def _text(val: Any, limit: Optional[int] = NAME_MAX) -> Optional[str]:
    return val[:limit] if isinstance(val, str) and val.strip() else None


def _clip(value: FlexValue, limit: int) -> FlexValue:
    if isinstance(value, TextValue) and len(value.text) > limit:
        return TextValue(value.text[:limit])
    return value


# ---------- Parsed plan structures ----------

class PlanKind(str, enum.Enum):
    WORKOUT = "workout"
    MEAL = "meal"


@dataclass
class PlanFormatError:
    """The model answered, but not with something we can persist."""
    raw_text: str
    reason: str


@dataclass
class ParsedExercise:
    name: str
    sets: int
    reps: FlexValue
    weight: FlexValue


@dataclass
class ParsedWorkout:
    name: str
    exercises: List[ParsedExercise] = field(default_factory=list)


@dataclass
class ParsedWorkoutPlan:
    title: str
    description: Optional[str]
    workouts: List[ParsedWorkout] = field(default_factory=list)


@dataclass
class ParsedIngredient:
    name: str
    quantity: Optional[str]
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0


@dataclass
class ParsedMeal:
    meal_type: str
    declared_calories: float
    ingredients: List[ParsedIngredient] = field(default_factory=list)


@dataclass
class ParsedMealPlan:
    title: str
    description: Optional[str]
    meals: List[ParsedMeal] = field(default_factory=list)  # flattened across days, in order


ParsedPlan = Union[ParsedWorkoutPlan, ParsedMealPlan]


# ---------- Mapper ----------

def _load_object(repaired: str, raw: str) -> Union[Dict[str, Any], PlanFormatError]:
    try:
        data = json.loads(repaired)
    except (TypeError, ValueError) as e:
        return PlanFormatError(raw_text=raw, reason=f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return PlanFormatError(raw_text=raw, reason="top-level JSON value is not an object")
    return data


def _map_exercise(data: Dict[str, Any]) -> ParsedExercise:
    return ParsedExercise(
        name=_text(data.get("name")) or "Unnamed Exercise",
        sets=_sets(data.get("sets")),
        reps=_clip(flex_value(data.get("reps")), REPS_MAX),
        weight=_clip(_weight(data), WEIGHT_MAX),
    )


def _workout_name(data: Dict[str, Any]) -> str:
    name = _text(data.get("name"))
    if name:
        return name
    day = data.get("day")
    return f"Workout {day}"[:NAME_MAX] if day not in (None, "") else "Workout"


def parse_workout_plan(repaired: str, raw: str) -> Union[ParsedWorkoutPlan, PlanFormatError]:
    data = _load_object(repaired, raw)
    if isinstance(data, PlanFormatError):
        return data
    if not isinstance(data.get("workouts"), list):
        return PlanFormatError(raw_text=raw, reason="'workouts' is missing or not a list")

    workouts = [
        ParsedWorkout(
            name=_workout_name(w),
            exercises=[_map_exercise(e) for e in _objects(w.get("exercises"))],
        )
        for w in _objects(data["workouts"])
    ]
    return ParsedWorkoutPlan(
        title=_text(data.get("title")) or DEFAULT_PROGRAM_TITLE,
        description=_text(data.get("description"), limit=None),
        workouts=workouts,
    )


def _map_ingredient(data: Dict[str, Any]) -> ParsedIngredient:
    nutrition = data.get("nutrition")
    if not isinstance(nutrition, dict):
        nutrition = {}
    quantity = data.get("quantity")
    return ParsedIngredient(
        name=_text(data.get("name")) or "Unnamed Ingredient",
        quantity=str(quantity)[:QUANTITY_MAX] if quantity not in (None, "") else None,
        calories=_number_or(nutrition.get("calories")),
        protein=_number_or(nutrition.get("protein")),
        carbs=_number_or(nutrition.get("carbs")),
        fats=_number_or(nutrition.get("fats")),
    )


def _declared_calories(meal: Dict[str, Any]) -> float:
    info = meal.get("nutritionalInfo")
    if isinstance(info, dict) and "calories" in info:
        return _number_or(info.get("calories"))
    return _number_or(meal.get("totalCalories"))


def parse_meal_plan(repaired: str, raw: str) -> Union[ParsedMealPlan, PlanFormatError]:
    data = _load_object(repaired, raw)
    if isinstance(data, PlanFormatError):
        return data

    meals: List[ParsedMeal] = []
    for day in _objects(data.get("days")):
        for meal in _objects(day.get("meals")):
            meals.append(ParsedMeal(
                meal_type=_text(meal.get("type"), MEAL_TYPE_MAX) or "meal",
                declared_calories=_declared_calories(meal),
                ingredients=[_map_ingredient(i) for i in _objects(meal.get("ingredients"))],
            ))
    return ParsedMealPlan(
        title=_text(data.get("title")) or DEFAULT_MEAL_PLAN_TITLE,
        description=_text(data.get("description"), limit=None),
        meals=meals,
    )


def parse_plan(repaired: str, kind: PlanKind, raw: str) -> Union[ParsedPlan, PlanFormatError]:
    if kind is PlanKind.WORKOUT:
        return parse_workout_plan(repaired, raw)
    return parse_meal_plan(repaired, raw)
