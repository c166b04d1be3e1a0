import uuid
from datetime import datetime

import pytest

from hitlog.exceptions import ExerciseNotFoundError
from hitlog.store import WorkoutStore

# ---------------------------------------------------------------------------
# Exercise library
# ---------------------------------------------------------------------------


def test_get_or_create_exercise_is_case_insensitive(store: WorkoutStore):
    first = store.get_or_create_exercise_by_name("Bench Press")
    second = store.get_or_create_exercise_by_name("bench press")
    assert first.id == second.id
    assert len(store.list_exercises()) == 1
    assert store.exercise_exists("BENCH PRESS")
    assert not store.exercise_exists("Squat")


def test_exercise_notes(store: WorkoutStore):
    item = store.get_or_create_exercise_by_name("Squat")
    assert store.get_exercise_notes(item.id) == ""
    store.update_exercise_notes(item.id, "Brace before descent")
    assert store.get_exercise_notes(item.id) == "Brace before descent"


def test_notes_of_unknown_exercise_are_empty(store: WorkoutStore):
    assert store.get_exercise_notes(uuid.uuid4()) == ""


def test_update_notes_of_unknown_exercise_raises(store: WorkoutStore):
    with pytest.raises(ExerciseNotFoundError):
        store.update_exercise_notes(uuid.uuid4(), "nope")


def test_rename_exercise_keeps_cached_names(store: WorkoutStore, log_session):
    log_session("Push Day", datetime(2025, 1, 15, 18, 30), {"Bench": [(8, 60.0)]})
    item = store.find_exercise_by_name("Bench")

    store.rename_exercise(item.id, "Bench Press")

    assert store.get_exercise(item.id).name == "Bench Press"
    template = store.find_template_by_name("Push Day")
    assert template.exercises[0].name == "Bench"
    assert store.list_sessions()[0].exercises[0].name == "Bench"


def test_delete_exercise_cascades(store: WorkoutStore, log_session):
    log_session(
        "Push Day",
        datetime(2025, 1, 15, 18, 30),
        {"Bench Press": [(8, 60.0)], "Dips": [(10, 0.0)], "Fly": [(12, 15.0)]},
    )
    dips = store.find_exercise_by_name("Dips")

    store.delete_exercise(dips.id)

    assert store.get_exercise(dips.id) is None
    template = store.find_template_by_name("Push Day")
    assert [e.name for e in template.exercises] == ["Bench Press", "Fly"]
    assert [e.position for e in template.exercises] == [0, 1]
    workout = store.list_sessions()[0]
    assert [e.name for e in workout.exercises] == ["Bench Press", "Fly"]


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def test_create_and_find_template(store: WorkoutStore):
    squat = store.get_or_create_exercise_by_name("Squat")
    lunge = store.get_or_create_exercise_by_name("Lunge")

    template = store.create_template("Leg Day", [squat, lunge])

    assert store.find_template_by_name("Leg Day").id == template.id
    assert store.find_template_by_name("leg day") is None
    assert [e.exercise_id for e in template.exercises] == [squat.id, lunge.id]
    assert store.get_template(template.id) is template


def test_update_template_appends_exercise(store: WorkoutStore):
    template = store.create_template("Pull Day")
    row = store.get_or_create_exercise_by_name("Row")

    from hitlog.models import TemplateExercise

    template.exercises.append(TemplateExercise(exercise_id=row.id, name=row.name))
    store.update_template(template)
    store.session.expire_all()

    assert [e.name for e in store.get_template(template.id).exercises] == ["Row"]


def test_delete_template_removes_its_sessions(store: WorkoutStore, log_session):
    log_session("Push Day", datetime(2025, 1, 15, 18, 30), {"Bench Press": [(8, 60.0)]})
    log_session("Leg Day", datetime(2025, 1, 16, 18, 30), {"Squat": [(5, 100.0)]})
    template = store.find_template_by_name("Push Day")

    store.delete_template(template)

    assert [t.name for t in store.list_templates()] == ["Leg Day"]
    assert len(store.list_sessions()) == 1


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def test_sessions_for_template_newest_first(store: WorkoutStore, log_session):
    older = log_session("Push Day", datetime(2025, 1, 10, 18, 0), {"Bench Press": [(8, 60.0)]})
    newer = log_session("Push Day", datetime(2025, 1, 17, 18, 0), {"Bench Press": [(8, 62.5)]})
    log_session("Leg Day", datetime(2025, 1, 12, 18, 0), {"Squat": [(5, 100.0)]})

    template = store.find_template_by_name("Push Day")
    sessions = store.sessions_for_template(template.id)
    assert [s.id for s in sessions] == [newer.id, older.id]


def test_sessions_for_exercise_across_templates(store: WorkoutStore, log_session):
    log_session("Push Day", datetime(2025, 1, 10, 18, 0), {"Bench Press": [(8, 60.0)]})
    log_session("Upper", datetime(2025, 1, 14, 18, 0), {"Bench Press": [(6, 65.0)], "Row": [(8, 50.0)]})
    log_session("Leg Day", datetime(2025, 1, 12, 18, 0), {"Squat": [(5, 100.0)]})
    bench = store.find_exercise_by_name("Bench Press")

    pairs = store.sessions_for_exercise(bench.id)

    assert [workout.date.day for workout, _ in pairs] == [14, 10]
    assert all(exercise.exercise_id == bench.id for _, exercise in pairs)
    assert pairs[0][1].sets[0].reps == 6


def test_update_session_appends_sets(store: WorkoutStore, log_session):
    workout = log_session("Push Day", datetime(2025, 1, 10, 18, 0), {"Bench Press": [(8, 60.0)]})

    from hitlog.models import ExerciseSet

    workout.exercises[0].sets.append(ExerciseSet(reps=6, weight=65.0))
    store.update_session(workout)
    store.session.expire_all()

    loaded = store.get_session(workout.id)
    assert [(s.reps, s.weight) for s in loaded.exercises[0].sets] == [(8, 60.0), (6, 65.0)]


def test_delete_session(store: WorkoutStore, log_session):
    workout = log_session("Push Day", datetime(2025, 1, 10, 18, 0), {"Bench Press": [(8, 60.0)]})
    store.delete_session(workout)
    assert store.list_sessions() == []
    assert store.find_template_by_name("Push Day") is not None
