"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import ClassVar, List, Optional, Tuple, Union
from datetime import date, datetime


# ============ User / Auth Schemas ============

class UserCreate(BaseModel):
    """Schema for user registration."""
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=4, max_length=100)


class User(BaseModel):
    """Schema for user response."""
    id: int
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Schema for token payload data."""
    user_id: Optional[int] = None


# ============ AI Plan Request Schemas ============

class PlanRequest(BaseModel):
    """Shared biometrics; every field optional so missing ones can be reported as a 400."""
    height: Optional[float] = None
    weight: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    fitness_goals: Optional[List[str]] = Field(None, alias="fitnessGoals")

    model_config = ConfigDict(populate_by_name=True)

    REQUIRED: ClassVar[Tuple[str, ...]] = ()

    @field_validator("fitness_goals", mode="before")
    @classmethod
    def _goals_as_list(cls, v):
        if isinstance(v, str):
            return [g.strip() for g in v.split(",") if g.strip()]
        return v

    def missing_fields(self) -> List[str]:
        return [name for name in self.REQUIRED if not getattr(self, name)]


class WorkoutPlanRequest(PlanRequest):
    """Body of POST /api/ai/workout-plan."""
    fitness_level: Optional[str] = Field(None, alias="fitnessLevel")  # beginner, intermediate, advanced
    workout_frequency: Optional[int] = Field(None, alias="workoutFrequency")  # days per week
    preferred_exercises: Optional[List[str]] = Field(None, alias="preferredExercises")
    health_conditions: Optional[List[str]] = Field(None, alias="healthConditions")
    equipment: Optional[List[str]] = None

    REQUIRED: ClassVar[Tuple[str, ...]] = (
        "height", "weight", "age", "gender", "fitness_level", "fitness_goals", "workout_frequency"
    )


class MealPlanRequest(PlanRequest):
    """Body of POST /api/ai/meal-plan."""
    meals_per_day: Optional[int] = Field(None, alias="mealsPerDay")
    dietary_preferences: Optional[List[str]] = Field(None, alias="dietaryPreferences")
    allergies: Optional[List[str]] = None
    calorie_target: Optional[int] = Field(None, alias="calorieTarget")

    REQUIRED: ClassVar[Tuple[str, ...]] = ("height", "weight", "age", "gender", "fitness_goals", "meals_per_day")


# ============ Program / Workout / Exercise Schemas ============

class ProgramCreate(BaseModel):
    """Schema for creating a program by hand."""
    program_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class Program(BaseModel):
    """Schema for program response."""
    id: int
    user_id: int
    program_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutCreate(BaseModel):
    workout_name: str = Field(..., min_length=1, max_length=255)


class Workout(BaseModel):
    """Schema for workout response."""
    id: int
    program_id: int
    workout_name: str

    model_config = ConfigDict(from_attributes=True)


class ProgramDetail(BaseModel):
    """Program with its workouts."""
    program: Program
    workouts: List[Workout]


class ExerciseCreate(BaseModel):
    """Schema for adding an exercise; reps/weight accept numbers or text."""
    exercise_name: str = Field(..., min_length=1, max_length=255)
    sets: int = Field(3, ge=0)
    reps: Union[int, float, str, None] = None
    weight: Union[int, float, str, None] = None


class ExerciseUpdate(BaseModel):
    """Schema for updating an exercise (all fields optional)."""
    sets: Optional[int] = Field(None, ge=0)
    reps: Union[int, float, str, None] = None
    weight: Union[int, float, str, None] = None


class Exercise(BaseModel):
    """Schema for exercise response."""
    id: int
    workout_id: int
    exercise_name: str
    sets: int
    reps: str
    weight: str

    model_config = ConfigDict(from_attributes=True)


class WorkoutDetail(BaseModel):
    """Workout with its exercises."""
    workout: Workout
    exercises: List[Exercise]


# ============ Meal Plan / Meal / Food Schemas ============

class MealPlanCreate(BaseModel):
    meal_plan_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class MealPlan(BaseModel):
    """Schema for meal plan response."""
    id: int
    user_id: int
    meal_plan_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MealCreate(BaseModel):
    """Schema for adding a meal; its total starts at 0 and follows its foods."""
    meal_type: str = Field(..., min_length=1, max_length=50)


class Meal(BaseModel):
    """Schema for meal response."""
    id: int
    meal_plan_id: int
    meal_type: str
    total_calories: float
    declared_calories: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class MealPlanDetail(BaseModel):
    """Meal plan with its meals."""
    plan: MealPlan
    meals: List[Meal]


class FoodCreate(BaseModel):
    """Schema for adding a food to a meal."""
    food_name: str = Field(..., min_length=1, max_length=255)
    quantity: Optional[str] = None
    calories: float = Field(0, ge=0)
    proteins: float = Field(0, ge=0)
    carbohydrates: float = Field(0, ge=0)
    fats: float = Field(0, ge=0)


class FoodUpdate(BaseModel):
    """Schema for updating a food (all fields optional)."""
    food_name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[str] = None
    calories: Optional[float] = Field(None, ge=0)
    proteins: Optional[float] = Field(None, ge=0)
    carbohydrates: Optional[float] = Field(None, ge=0)
    fats: Optional[float] = Field(None, ge=0)


class Food(BaseModel):
    """Schema for food response."""
    id: int
    meal_id: int
    food_name: str
    quantity: Optional[str] = None
    calories: float
    proteins: float
    carbohydrates: float
    fats: float

    model_config = ConfigDict(from_attributes=True)


class MealDetail(BaseModel):
    """Meal with its foods and a live check of the maintained total."""
    meal: Meal
    foods: List[Food]
    live_total_calories: float
    calories_consistent: bool


# ============ Session Schemas ============

class SessionStart(BaseModel):
    """Schema for starting a session; date is free-form, defaults to today."""
    date: Optional[str] = None
    notes: Optional[str] = None


class ExerciseLogUpdate(BaseModel):
    sets: Optional[int] = Field(None, ge=0)
    reps: Union[int, float, str, None] = None
    weight: Union[int, float, str, None] = None
    completed: Optional[bool] = None


class ExerciseLog(BaseModel):
    """Schema for exercise log response."""
    id: int
    session_id: int
    exercise_id: int
    exercise_name: Optional[str] = None
    sets: int
    reps: str
    weight: str
    completed: bool

    model_config = ConfigDict(from_attributes=True)


class WorkoutSession(BaseModel):
    """Session with its workout/program names and exercise logs."""
    id: int
    user_id: int
    workout_id: int
    workout_name: str
    program_id: int
    program_name: str
    date: date
    notes: Optional[str] = None
    exercises: List[ExerciseLog]


# ============ Progress Schemas ============

class ProgressLog(BaseModel):
    log_id: int
    exercise_id: int
    exercise_name: str
    sets: int
    reps: str
    weight: str
    completed: bool
    volume: float


class ProgressSession(BaseModel):
    session_id: int
    date: date
    program_id: int
    program_name: str
    workout_id: int
    workout_name: str
    exercises: List[ProgressLog]


class ProgressionPoint(BaseModel):
    date: date
    log_id: int
    sets: int
    reps: str
    weight: str
    volume: float


class MaxWeightRecord(BaseModel):
    exercise_name: str
    max_weight: float
    record_date: date


class MaxVolumeRecord(BaseModel):
    exercise_name: str
    max_volume: float
    record_date: date


class PersonalRecords(BaseModel):
    max_weight: List[MaxWeightRecord]
    max_volume: List[MaxVolumeRecord]


class MonthlyFrequency(BaseModel):
    month: str  # YYYY-MM
    workout_days: int


class ExerciseFrequency(BaseModel):
    exercise_name: str
    frequency: int


class FrequencyStats(BaseModel):
    monthly_frequency: List[MonthlyFrequency]
    frequent_exercises: List[ExerciseFrequency]
