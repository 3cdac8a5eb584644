import json

from fastapi.testclient import TestClient

from suggestion_engine.adapters.json_store import JsonStateStore
from suggestion_engine.adapters.memory_store import MemoryStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine
from suggestion_engine.errors import PersistenceUnavailable
from suggestion_engine.service import create_app


def make_client():
    engine = SuggestionEngine(MemoryStateStore(), EngineConfig(seed=5))
    return TestClient(create_app(engine))


def test_suggest():
    client = make_client()
    response = client.get("/suggest", params={"action": "I have a quiz tomorrow", "after": ""})
    assert response.status_code == 200
    body = response.json()
    assert body["tag"] == "school"
    assert body["length_minutes"] == 30
    assert body["repeat_rule"] == "none"
    assert body["start"] in {"2021-06-06T07:30:00", "2021-06-06T07:45:00", "2021-06-06T08:00:00"}


def test_suggest_missing_action():
    response = make_client().get("/suggest")
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Missing `action` parameter"}


def test_suggest_bad_window():
    response = make_client().get("/suggest", params={"action": "gym", "by": "next week"})
    assert response.status_code == 400
    assert response.json()["ok"] is False


def test_feedback():
    client = make_client()
    params = {"tag": "work", "start_date": "2021-06-07T10:00:00", "length": "60", "accepted": "true"}
    response = client.post("/suggest", params=params)
    assert response.json() == {"ok": True, "error": ""}

    response = client.get("/suggest", params={"action": "Finish the report"})
    assert response.json()["start"] == "2021-06-07T10:00:00"
    assert response.json()["length_minutes"] == 45


def test_feedback_unknown_tag():
    params = {"tag": "chores", "start_date": "2021-06-07T10:00:00", "length": "60", "accepted": "false"}
    response = make_client().post("/suggest", params=params)
    assert response.status_code == 404
    assert response.json()["error"] == "Unknown tag 'chores'"


def test_schedule_commit_and_list():
    client = make_client()
    params = {
        "action": "Team sync",
        "tag": "work",
        "start_date": "2021-06-07T09:00:00",
        "length": "30",
        "repeats": "weekly",
    }
    assert client.post("/schedule", params=params).json()["ok"] is True
    assert client.post("/schedule", params={**params, "start_date": "2021-06-14T09:00:00"}).json()["ok"] is True

    events = client.get("/schedule").json()["events"]
    assert events == [
        {
            "action": "Team sync",
            "tag": "work",
            "start": "2021-06-07T09:00:00",
            "length_minutes": 30,
            "repeat_rule": "weekly",
        }
    ]


def test_schedule_missing_repeats():
    params = {"action": "Gym", "tag": "leisure", "start_date": "2021-06-07T09:00:00", "length": "30"}
    response = make_client().post("/schedule", params=params)
    assert response.status_code == 400
    assert "repeats" in response.json()["error"]


def test_reset():
    client = make_client()
    assert client.get("/reset").status_code == 409
    client.post(
        "/schedule",
        params={"action": "Gym", "tag": "leisure", "start_date": "2021-06-07T09:00:00", "length": "30", "repeats": "none"},
    )
    assert client.get("/reset").json() == {"ok": True, "error": ""}
    assert client.get("/schedule").json() == {"events": []}


class DownStore(MemoryStateStore):
    def load(self):
        raise PersistenceUnavailable("backend down")


def test_storage_outage_returns_503():
    client = TestClient(create_app(SuggestionEngine(DownStore(), EngineConfig(seed=5))))
    response = client.get("/suggest", params={"action": "quiz"})
    assert response.status_code == 503
    assert response.json() == {"ok": False, "error": "backend down"}


def test_corrupt_state_file_returns_400(tmp_path):
    path = tmp_path / "state.json"
    config = EngineConfig(seed=5)
    client = TestClient(create_app(SuggestionEngine(JsonStateStore(path, config), config)))

    path.write_bytes(b"\xff\xfe{garbage")
    response = client.get("/schedule")
    assert response.status_code == 400
    assert response.json()["ok"] is False

    path.write_text(
        json.dumps({"probabilities": [], "average_durations": {}, "recent_slots": [0] * 9}),
        encoding="utf-8",
    )
    response = client.get("/schedule")
    assert response.status_code == 400
    assert response.json()["ok"] is False
