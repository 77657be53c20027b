"""
Prompt construction and OpenAI chat completion calls for workout and meal
plans. The generator returns the model's raw text; nothing here parses it.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from openai import OpenAI

from .. import schemas
from ..config import settings

logger = logging.getLogger(__name__)


class PlanGenerationError(Exception):
    """The model provider call failed."""


def _optional_line(label: str, values: Optional[List[str]]) -> str:
    return f"- {label}: {', '.join(values)}" if values else ""


class PlanGenerator:
    """Builds plan prompts and returns the model's raw text answer."""

    def __init__(self, model: Optional[str] = None, client: Optional[OpenAI] = None):
        self.model = model or (settings.model_id or "gpt-4.1")
        if client is None:
            if not settings.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY not configured")
            client = OpenAI(api_key=settings.openai_api_key)
        self.client = client

    def workout_prompt(self, request: schemas.WorkoutPlanRequest) -> str:
        lines = [
            "Create a personalized workout program based on the following information:",
            "",
            "User Information:",
            f"- Height: {request.height} cm",
            f"- Weight: {request.weight} kg",
            f"- Age: {request.age}",
            f"- Gender: {request.gender}",
            f"- Fitness Level: {request.fitness_level}",
            f"- Fitness Goals: {', '.join(request.fitness_goals or [])}",
            f"- Workout Frequency: {request.workout_frequency} days per week",
            _optional_line("Preferred Exercises", request.preferred_exercises),
            _optional_line("Health Conditions", request.health_conditions),
            _optional_line("Available Equipment", request.equipment),
            "",
            "For each workout day include specific exercises with sets, reps and a recommended weight.",
            "",
            "Return only valid JSON, with no markdown, comments or explanations, matching:",
            '{"title": "Program title", "description": "Brief program description",',
            ' "workoutFrequency": number,',
            ' "workouts": [{"name": "Workout name", "day": "Day of week",',
            '   "exercises": [{"name": "Exercise name", "sets": number,',
            '     "reps": number or "rep range (e.g., 8-12)", "weight": "recommended weight"}]}]}',
        ]
        return "\n".join(lines)

    def meal_prompt(self, request: schemas.MealPlanRequest) -> str:
        lines = [
            "Create a personalized 3-day meal plan based on the following information:",
            "",
            "User Information:",
            f"- Height: {request.height} cm",
            f"- Weight: {request.weight} kg",
            f"- Age: {request.age}",
            f"- Gender: {request.gender}",
            f"- Fitness Goals: {', '.join(request.fitness_goals or [])}",
            f"- Meals Per Day: {request.meals_per_day}",
            _optional_line("Dietary Preferences", request.dietary_preferences),
            _optional_line("Allergies", request.allergies),
            f"- Daily Calorie Target: {request.calorie_target}" if request.calorie_target else "",
            "",
            "For EACH ingredient include a \"nutrition\" object with calories, protein, carbs and fats.",
            "",
            "Return only valid JSON, with no markdown, comments or explanations, matching:",
            '{"title": "Meal plan title", "description": "Brief meal plan description",',
            ' "dailyCalories": number,',
            ' "days": [{"day": "Day of week", "meals": [{"name": "Meal name",',
            '   "type": "breakfast/lunch/dinner/snack", "nutritionalInfo": {"calories": number},',
            '   "ingredients": [{"name": "Ingredient name", "quantity": "amount with unit",',
            '     "nutrition": {"calories": number, "protein": number, "carbs": number, "fats": number}}]}]}]}',
        ]
        return "\n".join(lines)

    def _complete(self, system: str, prompt: str) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=settings.plan_temperature,
                max_tokens=settings.plan_max_tokens,
            )
        except Exception as e:
            logger.error("Plan generation failed: %s", e)
            raise PlanGenerationError(f"OpenAI error: {e}") from e
        return completion.choices[0].message.content or ""

    def generate_workout_plan(self, request: schemas.WorkoutPlanRequest) -> str:
        return self._complete(
            "You are a certified personal trainer specialized in creating personalized workout plans.",
            self.workout_prompt(request),
        )

    def generate_meal_plan(self, request: schemas.MealPlanRequest) -> str:
        return self._complete(
            "You are a certified nutritionist specialized in creating personalized meal plans. "
            "ALWAYS include nutrition information for EACH ingredient.",
            self.meal_prompt(request),
        )


def get_plan_generator() -> PlanGenerator:
    """FastAPI dependency; overridden in tests."""
    try:
        return PlanGenerator()
    except RuntimeError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Plan generation unavailable: {e}"
        )
