"""
SQLAlchemy models for Fitness Tracker database tables.
"""
from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class User(Base):
    """User model matching the 'users' table."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255))  # null for external-identity accounts
    external_id = Column(String(255), unique=True)  # identity provider subject
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    programs = relationship("Program", back_populates="user", cascade="all, delete-orphan")
    meal_plans = relationship("MealPlan", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship("WorkoutSession", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class Program(Base):
    """Workout program matching the 'programs' table."""
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    program_name = Column(String(255), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="programs")
    workouts = relationship(
        "Workout", back_populates="program", cascade="all, delete-orphan", order_by="Workout.id"
    )

    def __repr__(self):
        return f"<Program(id={self.id}, user_id={self.user_id}, name={self.program_name})>"


class Workout(Base):
    """Workout template matching the 'workouts' table."""
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, index=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_name = Column(String(255), nullable=False)

    # Relationships
    program = relationship("Program", back_populates="workouts")
    exercises = relationship(
        "Exercise", back_populates="workout", cascade="all, delete-orphan", order_by="Exercise.id"
    )
    sessions = relationship("WorkoutSession", back_populates="workout", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Workout(id={self.id}, program_id={self.program_id}, name={self.workout_name})>"


class Exercise(Base):
    """Exercise template matching the 'exercises' table."""
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_name = Column(String(255), nullable=False)
    sets = Column(Integer, nullable=False, default=3)
    reps = Column(String(50), nullable=False, default="")  # "10" or "8-12"
    weight = Column(String(100), nullable=False, default="")  # "25kg", "bodyweight", ...

    # Relationships
    workout = relationship("Workout", back_populates="exercises")
    logs = relationship("ExerciseLog", back_populates="exercise", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Exercise(id={self.id}, workout_id={self.workout_id}, name={self.exercise_name})>"


class MealPlan(Base):
    """Meal plan matching the 'meal_plans' table."""
    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_plan_name = Column(String(255), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="meal_plans")
    meals = relationship("Meal", back_populates="meal_plan", cascade="all, delete-orphan", order_by="Meal.id")

    def __repr__(self):
        return f"<MealPlan(id={self.id}, user_id={self.user_id}, name={self.meal_plan_name})>"


class Meal(Base):
    """Meal matching the 'meals' table.

    total_calories is maintained by the reconciler and always equals the
    sum of this meal's food calories after a commit.
    """
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, index=True)
    meal_plan_id = Column(Integer, ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = Column(String(50), nullable=False, default="meal")
    total_calories = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    declared_calories = Column(Numeric(10, 2, asdecimal=False))  # figure stated by the generator

    # Relationships
    meal_plan = relationship("MealPlan", back_populates="meals")
    foods = relationship("Food", back_populates="meal", cascade="all, delete-orphan", order_by="Food.id")

    def __repr__(self):
        return f"<Meal(id={self.id}, meal_plan_id={self.meal_plan_id}, total={self.total_calories})>"


class Food(Base):
    """Food line item matching the 'foods' table."""
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, index=True)
    meal_id = Column(Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False, index=True)
    food_name = Column(String(255), nullable=False)
    quantity = Column(String(100))
    calories = Column(Numeric(8, 2, asdecimal=False), nullable=False, default=0)
    proteins = Column(Numeric(8, 2, asdecimal=False), nullable=False, default=0)
    carbohydrates = Column(Numeric(8, 2, asdecimal=False), nullable=False, default=0)
    fats = Column(Numeric(8, 2, asdecimal=False), nullable=False, default=0)

    # Relationships
    meal = relationship("Meal", back_populates="foods")

    def __repr__(self):
        return f"<Food(id={self.id}, meal_id={self.meal_id}, calories={self.calories})>"


class WorkoutSession(Base):
    """Logged workout matching the 'workout_sessions' table."""
    __tablename__ = "workout_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    notes = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="sessions")
    workout = relationship("Workout", back_populates="sessions")
    logs = relationship(
        "ExerciseLog", back_populates="session", cascade="all, delete-orphan", order_by="ExerciseLog.id"
    )

    def __repr__(self):
        return f"<WorkoutSession(id={self.id}, user_id={self.user_id}, date={self.date})>"


class ExerciseLog(Base):
    """Performed sets for one exercise matching the 'exercise_logs' table."""
    __tablename__ = "exercise_logs"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    sets = Column(Integer, nullable=False, default=0)
    reps = Column(String(50), nullable=False, default="")
    weight = Column(String(100), nullable=False, default="")
    completed = Column(Boolean, nullable=False, default=False)

    # Relationships
    session = relationship("WorkoutSession", back_populates="logs")
    exercise = relationship("Exercise", back_populates="logs")

    def __repr__(self):
        return f"<ExerciseLog(id={self.id}, session_id={self.session_id}, completed={self.completed})>"
