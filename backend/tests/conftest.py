"""Shared test fixtures for the Fitness Tracker API tests."""
import os

# Settings are read at import time; point them at SQLite before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fittrack import models
from fittrack.auth import create_access_token, get_password_hash
from fittrack.database import Base, get_db
from fittrack.llm.planner import get_plan_generator
from fittrack.main import app


WORKOUT_REQUEST = {
    "height": 180,
    "weight": 80,
    "age": 30,
    "gender": "male",
    "fitnessLevel": "intermediate",
    "fitnessGoals": ["muscle gain"],
    "workoutFrequency": 3,
}

MEAL_REQUEST = {
    "height": 165,
    "weight": 60,
    "age": 28,
    "gender": "female",
    "fitnessGoals": ["weight loss"],
    "mealsPerDay": 3,
}


class StubPlanGenerator:
    """Stands in for the OpenAI-backed generator; returns canned text."""

    def __init__(self):
        self.response = ""
        self.error = None
        self.calls = []

    def _answer(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    def generate_workout_plan(self, request):
        return self._answer(request)

    def generate_meal_plan(self, request):
        return self._answer(request)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def plan_generator():
    return StubPlanGenerator()


@pytest.fixture
def client(session_factory, plan_generator):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_plan_generator] = lambda: plan_generator
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, email):
    user = models.User(email=email, password_hash=get_password_hash("secret123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db_session):
    return _make_user(db_session, "owner@example.com")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "intruder@example.com")


@pytest.fixture
def auth_headers(user):
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_user):
    token = create_access_token(data={"sub": str(other_user.id)})
    return {"Authorization": f"Bearer {token}"}


def count_rows(db, model):
    """Fresh COUNT(*) straight from the table, bypassing the identity map."""
    return db.query(func.count(model.id)).scalar()


def meal_total(db, meal_id):
    return float(db.query(models.Meal.total_calories).filter(models.Meal.id == meal_id).scalar())


def food_sum(db, meal_id):
    total = db.query(func.coalesce(func.sum(models.Food.calories), 0)).filter(
        models.Food.meal_id == meal_id
    ).scalar()
    return float(total)
