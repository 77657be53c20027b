"""Session logging and the progress analytics built on it."""
import pytest

from fittrack.routers.progress import leading_number, volume


@pytest.fixture
def leg_day(client, auth_headers):
    program = client.post("/api/gym/programs", json={"program_name": "Legs"}, headers=auth_headers).json()
    workout = client.post(
        f"/api/gym/programs/{program['id']}/workouts", json={"workout_name": "Leg Day"}, headers=auth_headers
    ).json()
    base = f"/api/gym/programs/{program['id']}/workouts/{workout['id']}/exercises"
    client.post(base, json={"exercise_name": "Squat", "sets": 3, "reps": 5, "weight": "100kg"}, headers=auth_headers)
    client.post(base, json={"exercise_name": "Lunge", "sets": 3, "reps": "8-10", "weight": 20}, headers=auth_headers)
    return f"/api/sessions/start/{program['id']}/{workout['id']}"


def start(client, headers, url, day, notes=None):
    resp = client.post(url, json={"date": day, "notes": notes}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def complete(client, headers, log, **changes):
    resp = client.put(f"/api/sessions/log/{log['id']}", json=dict(changes, completed=True), headers=headers)
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.unit
class TestVolumeHelpers:

    @pytest.mark.parametrize("text, expected", [
        ("100kg", 100), ("8-12", 8), ("12.5 lbs", 12.5), ("bodyweight", 0), ("", 0), (None, 0),
    ])
    def test_leading_number(self, text, expected):
        assert leading_number(text) == expected

    def test_volume(self):
        assert volume(3, "10", "50kg") == 1500
        assert volume(None, "10", "50kg") == 0


@pytest.mark.integration
class TestSessions:

    def test_start_copies_template(self, client, auth_headers, leg_day):
        session = start(client, auth_headers, leg_day, "2024-03-05", "felt strong")

        assert session["date"] == "2024-03-05"
        assert session["notes"] == "felt strong"
        assert session["workout_name"] == "Leg Day"
        assert session["program_name"] == "Legs"
        assert [(e["exercise_name"], e["sets"], e["reps"], e["weight"], e["completed"])
                for e in session["exercises"]] == [
            ("Squat", 3, "5", "100kg", False),
            ("Lunge", 3, "8-10", "20", False),
        ]

    def test_start_without_body_uses_today(self, client, auth_headers, leg_day):
        resp = client.post(leg_day, headers=auth_headers)

        assert resp.status_code == 201
        assert resp.json()["date"]

    def test_invalid_date_rejected(self, client, auth_headers, leg_day):
        resp = client.post(leg_day, json={"date": "not a date"}, headers=auth_headers)

        assert resp.status_code == 400

    def test_log_update(self, client, auth_headers, leg_day):
        squat = start(client, auth_headers, leg_day, "2024-03-05")["exercises"][0]

        log = complete(client, auth_headers, squat, reps=6, weight="105kg")

        assert (log["reps"], log["weight"], log["completed"]) == ("6", "105kg", True)

    def test_empty_log_update_rejected(self, client, auth_headers, leg_day):
        squat = start(client, auth_headers, leg_day, "2024-03-05")["exercises"][0]

        assert client.put(f"/api/sessions/log/{squat['id']}", json={}, headers=auth_headers).status_code == 400

    def test_history_newest_first_and_filtered(self, client, auth_headers, leg_day):
        start(client, auth_headers, leg_day, "2024-03-05")
        start(client, auth_headers, leg_day, "2024-04-02")

        dates = [s["date"] for s in client.get("/api/sessions/history", headers=auth_headers).json()]
        assert dates == ["2024-04-02", "2024-03-05"]

        resp = client.get("/api/sessions/history", params={"start_date": "2024-04-01"}, headers=auth_headers)
        assert [s["date"] for s in resp.json()] == ["2024-04-02"]


@pytest.mark.integration
class TestProgress:

    @pytest.fixture
    def logged(self, client, auth_headers, leg_day):
        march = start(client, auth_headers, leg_day, "2024-03-05")
        complete(client, auth_headers, march["exercises"][0])
        april = start(client, auth_headers, leg_day, "2024-04-02")
        complete(client, auth_headers, april["exercises"][0], weight="110kg")
        complete(client, auth_headers, april["exercises"][1])
        return march, april

    def test_history_includes_volume(self, client, auth_headers, logged):
        history = client.get("/api/progress/history", headers=auth_headers).json()

        assert [s["date"] for s in history] == ["2024-04-02", "2024-03-05"]
        march_logs = {e["exercise_name"]: e for e in history[1]["exercises"]}
        assert march_logs["Squat"]["volume"] == 1500
        assert march_logs["Lunge"]["volume"] == 480
        assert march_logs["Lunge"]["completed"] is False

    def test_progression_only_completed(self, client, auth_headers, logged):
        squat = client.get("/api/progress/progression/Squat", headers=auth_headers).json()
        lunge = client.get("/api/progress/progression/Lunge", headers=auth_headers).json()

        assert [(p["date"], p["weight"]) for p in squat] == [("2024-03-05", "100kg"), ("2024-04-02", "110kg")]
        assert [p["date"] for p in lunge] == ["2024-04-02"]

    def test_personal_records(self, client, auth_headers, logged):
        records = client.get("/api/progress/personal-records", headers=auth_headers).json()

        assert records["max_weight"][0] == {
            "exercise_name": "Squat", "max_weight": 110, "record_date": "2024-04-02"
        }
        volumes = {r["exercise_name"]: r["max_volume"] for r in records["max_volume"]}
        assert volumes == {"Squat": 1650, "Lunge": 480}

    def test_frequency_stats(self, client, auth_headers, logged):
        stats = client.get("/api/progress/frequency-stats", headers=auth_headers).json()

        assert stats["monthly_frequency"] == [
            {"month": "2024-03", "workout_days": 1},
            {"month": "2024-04", "workout_days": 1},
        ]
        assert stats["frequent_exercises"][0] == {"exercise_name": "Squat", "frequency": 2}

    def test_other_user_sees_nothing(self, client, other_auth_headers, logged):
        assert client.get("/api/progress/history", headers=other_auth_headers).json() == []
        assert client.get("/api/progress/personal-records", headers=other_auth_headers).json() == {
            "max_weight": [], "max_volume": []
        }
