"""Meal totals follow their foods through insert, update and delete."""
import pytest
from sqlalchemy import event

from fittrack import models, reconciler
from tests.conftest import count_rows, meal_total


@pytest.fixture
def meal(db_session, user):
    plan = models.MealPlan(user_id=user.id, meal_plan_name="Bulk")
    db_session.add(plan)
    db_session.flush()
    meal = models.Meal(meal_plan_id=plan.id, meal_type="lunch", total_calories=0)
    db_session.add(meal)
    db_session.commit()
    return meal


def assert_consistent(db, meal_id, expected):
    assert meal_total(db, meal_id) == pytest.approx(expected)
    assert reconciler.live_total_calories(db, meal_id) == pytest.approx(expected)


@pytest.mark.integration
class TestReconciler:

    def test_insert_update_delete_sequence(self, db_session, meal):
        meal_id = meal.id

        rice = reconciler.add_food(db_session, meal, {"food_name": "Rice", "calories": 200})
        assert_consistent(db_session, meal_id, 200)

        beans = reconciler.add_food(db_session, meal, {"food_name": "Beans", "calories": 150.5, "proteins": 9})
        assert_consistent(db_session, meal_id, 350.5)

        reconciler.update_food(db_session, rice, {"calories": 260})
        assert_consistent(db_session, meal_id, 410.5)

        reconciler.update_food(db_session, beans, {"food_name": "Black beans", "proteins": 10})
        assert_consistent(db_session, meal_id, 410.5)

        reconciler.delete_food(db_session, rice)
        assert_consistent(db_session, meal_id, 150.5)

        reconciler.delete_food(db_session, beans)
        assert_consistent(db_session, meal_id, 0)

    def test_null_calories_update_counts_as_zero(self, db_session, meal):
        food = reconciler.add_food(db_session, meal, {"food_name": "Tea", "calories": 5})

        reconciler.update_food(db_session, food, {"calories": None})

        assert food.calories == 0
        assert_consistent(db_session, meal.id, 0)

    def test_missing_optional_fields_default_to_zero(self, db_session, meal):
        food = reconciler.add_food(db_session, meal, {"food_name": "Water"})

        assert (food.calories, food.proteins, food.carbohydrates, food.fats) == (0, 0, 0, 0)
        assert_consistent(db_session, meal.id, 0)

    def test_increment_is_relative(self, db_session, meal):
        reconciler.increment_meal_calories(db_session, meal.id, 100)
        reconciler.increment_meal_calories(db_session, meal.id, -40)
        db_session.commit()

        assert meal_total(db_session, meal.id) == pytest.approx(60)


@pytest.mark.integration
class TestReconcilerRollback:
    """The food change and the meal total change commit or roll back together."""

    @pytest.fixture
    def rice(self, db_session, meal):
        food = reconciler.add_food(db_session, meal, {"food_name": "Rice", "calories": 200})
        return food.id

    @pytest.fixture
    def failing_increment(self, monkeypatch):
        def fail(db, meal_id, delta):
            raise RuntimeError("meal total update failed")

        monkeypatch.setattr(reconciler, "increment_meal_calories", fail)

    def food_calories(self, db, food_id):
        return db.query(models.Food.calories).filter(models.Food.id == food_id).scalar()

    def test_add_rolls_back_food_when_total_fails(self, db_session, meal, failing_increment):
        meal_id = meal.id

        with pytest.raises(RuntimeError, match="meal total update failed"):
            reconciler.add_food(db_session, meal, {"food_name": "Bread", "calories": 80})

        assert count_rows(db_session, models.Food) == 0
        assert_consistent(db_session, meal_id, 0)

    def test_update_rolls_back_food_when_total_fails(self, db_session, meal, rice, failing_increment):
        meal_id = meal.id
        food = db_session.get(models.Food, rice)

        with pytest.raises(RuntimeError):
            reconciler.update_food(db_session, food, {"calories": 500})

        assert self.food_calories(db_session, rice) == pytest.approx(200)
        assert_consistent(db_session, meal_id, 200)

    def test_delete_rolls_back_food_when_total_fails(self, db_session, meal, rice, failing_increment):
        meal_id = meal.id
        food = db_session.get(models.Food, rice)

        with pytest.raises(RuntimeError):
            reconciler.delete_food(db_session, food)

        assert self.food_calories(db_session, rice) == pytest.approx(200)
        assert_consistent(db_session, meal_id, 200)

    def test_total_untouched_when_food_write_fails(self, db_session, meal, rice):
        meal_id = meal.id
        food = db_session.get(models.Food, rice)

        def fail_food_update(mapper, connection, target):
            raise RuntimeError("food row update failed")

        event.listen(models.Food, "before_update", fail_food_update)
        try:
            with pytest.raises(RuntimeError, match="food row update failed"):
                reconciler.update_food(db_session, food, {"calories": 500})
        finally:
            event.remove(models.Food, "before_update", fail_food_update)

        assert self.food_calories(db_session, rice) == pytest.approx(200)
        assert_consistent(db_session, meal_id, 200)
