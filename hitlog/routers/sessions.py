import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Field, SQLModel

from hitlog.database import get_store
from hitlog.models import (
    ExerciseForm,
    ExerciseSet,
    SessionExercise,
    WorkoutSession,
)
from hitlog.store import WorkoutStore

router = APIRouter()

StoreDep = Annotated[WorkoutStore, Depends(get_store)]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SetRead(SQLModel):
    id: uuid.UUID
    set_number: int
    reps: int
    weight: float


class ExerciseEntryRead(SQLModel):
    id: uuid.UUID
    exercise_id: uuid.UUID
    name: str
    form: ExerciseForm
    sets: list[SetRead]


class SessionRead(SQLModel):
    id: uuid.UUID
    template_id: uuid.UUID
    date: datetime
    exercises: list[ExerciseEntryRead]


class SessionSummary(SQLModel):
    id: uuid.UUID
    template_id: uuid.UUID
    date: datetime
    exercise_names: list[str]
    set_count: int


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SetWrite(SQLModel):
    reps: int = Field(default=0, ge=0)
    weight: float = Field(default=0.0, ge=0)


class ExerciseEntryWrite(SQLModel):
    exercise_id: uuid.UUID
    form: ExerciseForm = ExerciseForm.GOOD
    sets: list[SetWrite] = []


class SessionCreate(SQLModel):
    template_id: uuid.UUID
    date: datetime
    exercises: list[ExerciseEntryWrite] = []


class SessionUpdate(SQLModel):
    date: datetime
    exercises: list[ExerciseEntryWrite] = []


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_exercise_read(exercise: SessionExercise) -> ExerciseEntryRead:
    return ExerciseEntryRead(
        id=exercise.id,
        exercise_id=exercise.exercise_id,
        name=exercise.name,
        form=exercise.form,
        sets=[
            SetRead(id=s.id, set_number=index + 1, reps=s.reps, weight=s.weight)
            for index, s in enumerate(exercise.sets)
        ],
    )


def build_session_read(workout: WorkoutSession) -> SessionRead:
    return SessionRead(
        id=workout.id,
        template_id=workout.template_id,
        date=workout.date,
        exercises=[build_exercise_read(e) for e in workout.exercises],
    )


def build_session_summary(workout: WorkoutSession) -> SessionSummary:
    return SessionSummary(
        id=workout.id,
        template_id=workout.template_id,
        date=workout.date,
        exercise_names=[e.name for e in workout.exercises],
        set_count=sum(len(e.sets) for e in workout.exercises),
    )


def _build_exercises(entries: list[ExerciseEntryWrite], store: WorkoutStore) -> list[SessionExercise]:
    """Turn request entries into session exercises, rejecting unknown or repeated exercises."""
    seen: set[uuid.UUID] = set()
    exercises: list[SessionExercise] = []
    for entry in entries:
        item = store.get_exercise(entry.exercise_id)
        if item is None:
            raise HTTPException(
                status_code=400,
                detail=f"Exercise with id {entry.exercise_id} does not exist",
            )
        if entry.exercise_id in seen:
            raise HTTPException(status_code=400, detail=f"Exercise {item.name} appears twice")
        seen.add(entry.exercise_id)

        exercise = SessionExercise(exercise_id=item.id, name=item.name, form=entry.form)
        for s in entry.sets:
            # Weights are kept to 2 decimals
            exercise.sets.append(ExerciseSet(reps=s.reps, weight=round(s.weight, 2)))
        exercises.append(exercise)
    return exercises


def _get_or_404(session_id: uuid.UUID, store: WorkoutStore) -> WorkoutSession:
    workout = store.get_session(session_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return workout


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[SessionSummary])
def list_sessions(store: StoreDep, template_id: uuid.UUID | None = None):
    if template_id is not None:
        sessions = store.sessions_for_template(template_id)
    else:
        sessions = sorted(store.list_sessions(), key=lambda s: s.date, reverse=True)
    return [build_session_summary(s) for s in sessions]


@router.post("/", response_model=SessionRead, status_code=201)
def create_session(body: SessionCreate, store: StoreDep):
    if store.get_template(body.template_id) is None:
        raise HTTPException(status_code=404, detail="Template not found")
    workout = WorkoutSession(template_id=body.template_id, date=body.date)
    for exercise in _build_exercises(body.exercises, store):
        workout.exercises.append(exercise)
    store.create_session(workout)
    return build_session_read(workout)


@router.get("/{id}", response_model=SessionRead)
def get_session(id: uuid.UUID, store: StoreDep):
    return build_session_read(_get_or_404(id, store))


@router.put("/{id}", response_model=SessionRead)
def update_session(id: uuid.UUID, body: SessionUpdate, store: StoreDep):
    workout = _get_or_404(id, store)
    exercises = _build_exercises(body.exercises, store)
    workout.date = body.date
    workout.exercises = exercises
    workout.exercises.reorder()
    store.update_session(workout)
    return build_session_read(workout)


@router.delete("/{id}", status_code=204)
def delete_session(id: uuid.UUID, store: StoreDep):
    store.delete_session(_get_or_404(id, store))
