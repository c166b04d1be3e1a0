import uuid
from datetime import datetime

from fastapi.testclient import TestClient

from hitlog.store import WorkoutStore

# ---------------------------------------------------------------------------
# List / create
# ---------------------------------------------------------------------------


def test_list_empty(client: TestClient):
    response = client.get("/api/templates/")
    assert response.status_code == 200
    assert response.json() == []


def test_create_with_exercises(client: TestClient, store: WorkoutStore):
    response = client.post(
        "/api/templates/",
        json={"name": "Push Day", "exercise_names": ["Bench Press", "Dips", "bench press"]},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Push Day"
    assert [e["name"] for e in body["exercises"]] == ["Bench Press", "Dips"]
    assert len(store.list_exercises()) == 2


def test_create_reuses_library_items(client: TestClient, store: WorkoutStore):
    squat = store.get_or_create_exercise_by_name("Squat")
    body = client.post("/api/templates/", json={"name": "Leg Day", "exercise_names": ["squat"]}).json()
    assert body["exercises"][0]["exercise_id"] == str(squat.id)
    assert body["exercises"][0]["name"] == "Squat"


# ---------------------------------------------------------------------------
# Get / patch
# ---------------------------------------------------------------------------


def test_get_nonexistent(client: TestClient):
    response = client.get(f"/api/templates/{uuid.uuid4()}")
    assert response.status_code == 404


def test_rename(client: TestClient):
    template_id = client.post("/api/templates/", json={"name": "Push"}).json()["id"]
    response = client.patch(f"/api/templates/{template_id}", json={"name": "Push Day"})
    assert response.status_code == 200
    assert response.json()["name"] == "Push Day"
    assert client.get(f"/api/templates/{template_id}").json()["name"] == "Push Day"


def test_reorder_and_replace_exercises(client: TestClient, store: WorkoutStore):
    created = client.post(
        "/api/templates/", json={"name": "Push Day", "exercise_names": ["Bench Press", "Dips", "Fly"]}
    ).json()
    entries = {e["name"]: e for e in created["exercises"]}
    press = store.get_or_create_exercise_by_name("Overhead Press")

    response = client.patch(
        f"/api/templates/{created['id']}",
        json={
            "exercise_ids": [
                entries["Fly"]["exercise_id"],
                str(press.id),
                entries["Bench Press"]["exercise_id"],
            ]
        },
    )
    assert response.status_code == 200
    exercises = response.json()["exercises"]
    assert [e["name"] for e in exercises] == ["Fly", "Overhead Press", "Bench Press"]
    # kept entries keep their identity
    assert exercises[0]["id"] == entries["Fly"]["id"]


def test_patch_with_unknown_exercise(client: TestClient):
    template_id = client.post("/api/templates/", json={"name": "Push Day", "exercise_names": ["Dips"]}).json()["id"]
    response = client.patch(f"/api/templates/{template_id}", json={"exercise_ids": [str(uuid.uuid4())]})
    assert response.status_code == 400
    assert [e["name"] for e in client.get(f"/api/templates/{template_id}").json()["exercises"]] == ["Dips"]


def test_patch_with_repeated_exercise(client: TestClient):
    created = client.post("/api/templates/", json={"name": "Push Day", "exercise_names": ["Dips"]}).json()
    dips_id = created["exercises"][0]["exercise_id"]
    response = client.patch(f"/api/templates/{created['id']}", json={"exercise_ids": [dips_id, dips_id]})
    assert response.status_code == 400


def test_patch_nonexistent(client: TestClient):
    response = client.patch(f"/api/templates/{uuid.uuid4()}", json={"name": "Ghost"})
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Delete / sessions
# ---------------------------------------------------------------------------


def test_delete(client: TestClient, store: WorkoutStore, log_session):
    log_session("Push Day", datetime(2025, 1, 15, 18, 30), {"Bench Press": [(8, 60.0)]})
    template = store.find_template_by_name("Push Day")

    response = client.delete(f"/api/templates/{template.id}")

    assert response.status_code == 204
    assert client.get("/api/templates/").json() == []
    assert client.get("/api/sessions/").json() == []


def test_template_sessions(client: TestClient, store: WorkoutStore, log_session):
    log_session("Push Day", datetime(2025, 1, 10, 18, 30), {"Bench Press": [(8, 60.0)]})
    log_session("Push Day", datetime(2025, 1, 15, 18, 30), {"Bench Press": [(8, 62.5), (8, 62.5)]})
    template = store.find_template_by_name("Push Day")

    response = client.get(f"/api/templates/{template.id}/sessions")

    assert response.status_code == 200
    body = response.json()
    assert [s["date"] for s in body] == ["2025-01-15T18:30:00", "2025-01-10T18:30:00"]
    assert body[0]["set_count"] == 2
    assert body[0]["exercise_names"] == ["Bench Press"]
