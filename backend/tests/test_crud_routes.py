"""Manual editing of programs and meal plans."""
import pytest

from tests.conftest import food_sum, meal_total


@pytest.mark.integration
class TestProgramRoutes:

    @pytest.fixture
    def workout_url(self, client, auth_headers):
        program = client.post(
            "/api/gym/programs", json={"program_name": "PPL", "description": "Push pull legs"}, headers=auth_headers
        ).json()
        workout = client.post(
            f"/api/gym/programs/{program['id']}/workouts", json={"workout_name": "Pull"}, headers=auth_headers
        ).json()
        return f"/api/gym/programs/{program['id']}/workouts/{workout['id']}"

    def test_exercise_values_stored_as_text(self, client, auth_headers, workout_url):
        resp = client.post(
            f"{workout_url}/exercises",
            json={"exercise_name": "Chin-up", "sets": 4, "reps": 7.5, "weight": None},
            headers=auth_headers,
        )

        assert resp.status_code == 201
        assert (resp.json()["reps"], resp.json()["weight"]) == ("7.5", "")

    def test_exercise_update(self, client, auth_headers, workout_url):
        exercise = client.post(
            f"{workout_url}/exercises", json={"exercise_name": "Row", "sets": 3, "reps": 10}, headers=auth_headers
        ).json()
        url = f"{workout_url}/exercises/{exercise['id']}"

        resp = client.put(url, json={"reps": "8-12", "weight": 50}, headers=auth_headers)

        assert resp.status_code == 200
        assert (resp.json()["sets"], resp.json()["reps"], resp.json()["weight"]) == (3, "8-12", "50")
        assert client.put(url, json={}, headers=auth_headers).status_code == 400

    def test_delete_program_cascades(self, client, auth_headers, workout_url):
        client.post(f"{workout_url}/exercises", json={"exercise_name": "Row"}, headers=auth_headers)
        program_url = workout_url.rsplit("/workouts/", 1)[0]

        assert client.delete(program_url, headers=auth_headers).status_code == 200
        assert client.get(program_url, headers=auth_headers).status_code == 404
        assert client.get("/api/gym/programs", headers=auth_headers).json() == []


@pytest.mark.integration
class TestMealRoutes:

    @pytest.fixture
    def meal_url(self, client, auth_headers):
        plan = client.post("/api/food/mealplans", json={"meal_plan_name": "Cut"}, headers=auth_headers).json()
        meal = client.post(
            f"/api/food/mealplans/{plan['id']}/meals", json={"meal_type": "lunch"}, headers=auth_headers
        ).json()
        assert meal["total_calories"] == 0
        return f"/api/food/mealplans/{plan['id']}/meals/{meal['id']}"

    def meal_id(self, meal_url):
        return int(meal_url.rsplit("/", 1)[1])

    def test_food_changes_keep_total_in_step(self, client, auth_headers, meal_url, db_session):
        meal_id = self.meal_id(meal_url)

        rice = client.post(f"{meal_url}/foods", json={"food_name": "Rice", "calories": 210}, headers=auth_headers)
        tofu = client.post(f"{meal_url}/foods", json={"food_name": "Tofu", "calories": 180}, headers=auth_headers)
        assert rice.status_code == tofu.status_code == 201
        assert meal_total(db_session, meal_id) == pytest.approx(390)

        resp = client.put(f"{meal_url}/foods/{rice.json()['id']}", json={"calories": 250}, headers=auth_headers)
        assert resp.status_code == 200
        assert meal_total(db_session, meal_id) == pytest.approx(430)

        resp = client.delete(f"{meal_url}/foods/{tofu.json()['id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert meal_total(db_session, meal_id) == pytest.approx(250)
        assert meal_total(db_session, meal_id) == pytest.approx(food_sum(db_session, meal_id))

        detail = client.get(meal_url, headers=auth_headers).json()
        assert detail["meal"]["total_calories"] == pytest.approx(250)
        assert detail["live_total_calories"] == pytest.approx(250)
        assert detail["calories_consistent"] is True

    def test_food_update_validation(self, client, auth_headers, meal_url):
        food = client.post(f"{meal_url}/foods", json={"food_name": "Egg"}, headers=auth_headers).json()
        url = f"{meal_url}/foods/{food['id']}"

        assert client.put(url, json={}, headers=auth_headers).status_code == 400
        assert client.put(url, json={"food_name": None}, headers=auth_headers).status_code == 400
        assert client.put(url, json={"food_name": "   "}, headers=auth_headers).status_code == 400
        assert client.put(url, json={"calories": -5}, headers=auth_headers).status_code == 422

    def test_delete_meal_plan_cascades(self, client, auth_headers, meal_url):
        client.post(f"{meal_url}/foods", json={"food_name": "Rice", "calories": 210}, headers=auth_headers)
        plan_url = meal_url.rsplit("/meals/", 1)[0]

        assert client.delete(plan_url, headers=auth_headers).status_code == 200
        assert client.get(meal_url, headers=auth_headers).status_code == 404
        assert client.get("/api/food/mealplans", headers=auth_headers).json() == []
