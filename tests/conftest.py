from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from hitlog.database import get_session
from hitlog.main import app
from hitlog.models import ExerciseForm, ExerciseSet, SessionExercise, WorkoutSession
from hitlog.store import WorkoutStore


@pytest.fixture(name="session")
def session_fixture():
    # StaticPool ensures the in-memory DB is shared across all connections,
    # including those spawned by TestClient's anyio thread pool.
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> WorkoutStore:
    return WorkoutStore(session)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(name="log_session")
def log_session_fixture(store: WorkoutStore):
    """Return a helper that logs a session directly through the store.

    ``exercises`` maps exercise names to lists of (reps, weight) sets.
    """

    def _log(
        template_name: str,
        when: datetime,
        exercises: dict[str, list[tuple[int, float]]],
        form: ExerciseForm = ExerciseForm.GOOD,
    ) -> WorkoutSession:
        items = [store.get_or_create_exercise_by_name(name) for name in exercises]
        template = store.find_template_by_name(template_name)
        if template is None:
            template = store.create_template(template_name, items)
        workout = WorkoutSession(template_id=template.id, date=when)
        for item, sets in zip(items, exercises.values()):
            exercise = SessionExercise(exercise_id=item.id, name=item.name, form=form)
            for reps, weight in sets:
                exercise.sets.append(ExerciseSet(reps=reps, weight=weight))
            workout.exercises.append(exercise)
        return store.create_session(workout)

    return _log
