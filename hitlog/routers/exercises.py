import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import SQLModel

from hitlog.database import get_store
from hitlog.models import LibraryExercise
from hitlog.routers.sessions import ExerciseEntryRead, build_exercise_read
from hitlog.services.progress import exercise_history, previous_exercise
from hitlog.store import WorkoutStore

router = APIRouter()

StoreDep = Annotated[WorkoutStore, Depends(get_store)]


class ExerciseRead(SQLModel):
    id: uuid.UUID
    name: str
    notes: str


class ExerciseCreate(SQLModel):
    name: str
    notes: str = ""


class ExerciseUpdate(SQLModel):
    name: str


class NotesBody(SQLModel):
    notes: str


class HistoryEntryRead(SQLModel):
    session_id: uuid.UUID
    template_id: uuid.UUID
    date: datetime
    exercise: ExerciseEntryRead


def _get_or_404(exercise_id: uuid.UUID, store: WorkoutStore) -> LibraryExercise:
    item = store.get_exercise(exercise_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return item


def _verify_name_free(name: str, store: WorkoutStore, exercise_id: uuid.UUID | None = None) -> None:
    existing = store.find_exercise_by_name(name)
    if existing is not None and existing.id != exercise_id:
        raise HTTPException(status_code=400, detail="Name already exists")


@router.get("/", response_model=list[ExerciseRead])
def list_exercises(store: StoreDep):
    return store.list_exercises()


@router.post("/", response_model=ExerciseRead, status_code=201)
def create_exercise(body: ExerciseCreate, store: StoreDep):
    _verify_name_free(body.name, store)
    return store.create_exercise(body.name, body.notes)


@router.get("/{id}", response_model=ExerciseRead)
def get_exercise(id: uuid.UUID, store: StoreDep):
    return _get_or_404(id, store)


@router.patch("/{id}", response_model=ExerciseRead)
def rename_exercise(id: uuid.UUID, body: ExerciseUpdate, store: StoreDep):
    _get_or_404(id, store)
    _verify_name_free(body.name, store, exercise_id=id)
    return store.rename_exercise(id, body.name)


@router.delete("/{id}", status_code=204)
def delete_exercise(id: uuid.UUID, store: StoreDep):
    _get_or_404(id, store)
    store.delete_exercise(id)


@router.get("/{id}/notes", response_model=NotesBody)
def get_notes(id: uuid.UUID, store: StoreDep):
    _get_or_404(id, store)
    return NotesBody(notes=store.get_exercise_notes(id))


@router.put("/{id}/notes", response_model=NotesBody)
def update_notes(id: uuid.UUID, body: NotesBody, store: StoreDep):
    _get_or_404(id, store)
    store.update_exercise_notes(id, body.notes)
    return NotesBody(notes=store.get_exercise_notes(id))


@router.get("/{id}/history", response_model=list[HistoryEntryRead])
def get_history(id: uuid.UUID, store: StoreDep):
    """Every logged instance of the exercise across all templates, newest first."""
    _get_or_404(id, store)
    return [
        HistoryEntryRead(
            session_id=workout.id,
            template_id=workout.template_id,
            date=workout.date,
            exercise=build_exercise_read(exercise),
        )
        for workout, exercise in exercise_history(store, id)
    ]


@router.get("/{id}/previous", response_model=ExerciseEntryRead | None)
def get_previous(id: uuid.UUID, store: StoreDep, before: datetime | None = None):
    """Sets from the last time this exercise was logged, for pre-filling a new workout."""
    _get_or_404(id, store)
    exercise = previous_exercise(store, id, before=before)
    if exercise is None:
        return None
    return build_exercise_read(exercise)
