import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import SQLModel

from hitlog.database import get_store
from hitlog.models import TemplateExercise, WorkoutTemplate
from hitlog.routers.sessions import SessionSummary, build_session_summary
from hitlog.store import WorkoutStore

router = APIRouter()

StoreDep = Annotated[WorkoutStore, Depends(get_store)]


class TemplateExerciseRead(SQLModel):
    id: uuid.UUID
    exercise_id: uuid.UUID
    name: str


class TemplateRead(SQLModel):
    id: uuid.UUID
    name: str
    exercises: list[TemplateExerciseRead]


class TemplateCreate(SQLModel):
    name: str
    exercise_names: list[str] = []


class TemplateUpdate(SQLModel):
    name: str | None = None
    exercise_ids: list[uuid.UUID] | None = None


def _build_template_read(template: WorkoutTemplate) -> TemplateRead:
    return TemplateRead(
        id=template.id,
        name=template.name,
        exercises=[
            TemplateExerciseRead(id=e.id, exercise_id=e.exercise_id, name=e.name)
            for e in template.exercises
        ],
    )


def _get_or_404(template_id: uuid.UUID, store: WorkoutStore) -> WorkoutTemplate:
    template = store.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("/", response_model=list[TemplateRead])
def list_templates(store: StoreDep):
    return [_build_template_read(t) for t in store.list_templates()]


@router.post("/", response_model=TemplateRead, status_code=201)
def create_template(body: TemplateCreate, store: StoreDep):
    items = []
    for name in body.exercise_names:
        item = store.get_or_create_exercise_by_name(name)
        if item not in items:
            items.append(item)
    template = store.create_template(body.name, items)
    return _build_template_read(template)


@router.get("/{id}", response_model=TemplateRead)
def get_template(id: uuid.UUID, store: StoreDep):
    return _build_template_read(_get_or_404(id, store))


@router.patch("/{id}", response_model=TemplateRead)
def update_template(id: uuid.UUID, body: TemplateUpdate, store: StoreDep):
    template = _get_or_404(id, store)

    entries: list[TemplateExercise] | None = None
    if body.exercise_ids is not None:
        if len(set(body.exercise_ids)) != len(body.exercise_ids):
            raise HTTPException(status_code=400, detail="Exercise listed twice")
        current = {e.exercise_id: e for e in template.exercises}
        entries = []
        for exercise_id in body.exercise_ids:
            entry = current.get(exercise_id)
            if entry is None:
                item = store.get_exercise(exercise_id)
                if item is None:
                    raise HTTPException(
                        status_code=400,
                        detail=f"Exercise with id {exercise_id} does not exist",
                    )
                entry = TemplateExercise(exercise_id=item.id, name=item.name)
            entries.append(entry)

    if body.name is not None:
        template.name = body.name
    if entries is not None:
        template.exercises = entries
        template.exercises.reorder()

    store.update_template(template)
    return _build_template_read(template)


@router.delete("/{id}", status_code=204)
def delete_template(id: uuid.UUID, store: StoreDep):
    store.delete_template(_get_or_404(id, store))


@router.get("/{id}/sessions", response_model=list[SessionSummary])
def list_template_sessions(id: uuid.UUID, store: StoreDep):
    _get_or_404(id, store)
    return [build_session_summary(s) for s in store.sessions_for_template(id)]
