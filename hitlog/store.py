"""Repository over the workout tables.

``WorkoutStore`` is the only thing the import/export services talk to. Every
mutating method commits before returning, so the database always reflects the
last completed call.
"""

import uuid
from collections.abc import Iterable

from sqlmodel import Session, select

from hitlog.exceptions import ExerciseNotFoundError
from hitlog.models import (
    LibraryExercise,
    SessionExercise,
    TemplateExercise,
    WorkoutSession,
    WorkoutTemplate,
)


class WorkoutStore:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, *objects) -> None:
        for obj in objects:
            self.session.add(obj)
        self.session.commit()

    # ------------------------------------------------------------------
    # Exercise library
    # ------------------------------------------------------------------

    def list_exercises(self) -> list[LibraryExercise]:
        return list(self.session.exec(select(LibraryExercise).order_by(LibraryExercise.name)).all())

    def get_exercise(self, exercise_id: uuid.UUID) -> LibraryExercise | None:
        return self.session.get(LibraryExercise, exercise_id)

    def find_exercise_by_name(self, name: str) -> LibraryExercise | None:
        """Case-insensitive lookup."""
        wanted = name.lower()
        for item in self.session.exec(select(LibraryExercise)).all():
            if item.name.lower() == wanted:
                return item
        return None

    def exercise_exists(self, name: str) -> bool:
        return self.find_exercise_by_name(name) is not None

    def create_exercise(self, name: str, notes: str = "") -> LibraryExercise:
        item = LibraryExercise(name=name, notes=notes)
        self._save(item)
        self.session.refresh(item)
        return item

    def get_or_create_exercise_by_name(self, name: str) -> LibraryExercise:
        existing = self.find_exercise_by_name(name)
        if existing is not None:
            return existing
        return self.create_exercise(name)

    def _require_exercise(self, exercise_id: uuid.UUID) -> LibraryExercise:
        item = self.get_exercise(exercise_id)
        if item is None:
            raise ExerciseNotFoundError(f"Exercise {exercise_id} not found")
        return item

    def rename_exercise(self, exercise_id: uuid.UUID, name: str) -> LibraryExercise:
        """Rename the library item. Cached names in templates and sessions are left as they are."""
        item = self._require_exercise(exercise_id)
        item.name = name
        self._save(item)
        self.session.refresh(item)
        return item

    def update_exercise_notes(self, exercise_id: uuid.UUID, notes: str) -> None:
        item = self._require_exercise(exercise_id)
        item.notes = notes
        self._save(item)

    def get_exercise_notes(self, exercise_id: uuid.UUID) -> str:
        item = self.get_exercise(exercise_id)
        return item.notes if item else ""

    def delete_exercise(self, exercise_id: uuid.UUID) -> None:
        """Delete a library item and every template/session entry that references it."""
        item = self._require_exercise(exercise_id)

        template_entries = self.session.exec(
            select(TemplateExercise).where(TemplateExercise.exercise_id == exercise_id)
        ).all()
        for entry in template_entries:
            template = entry.template
            template.exercises.remove(entry)
            template.exercises.reorder()

        session_entries = self.session.exec(
            select(SessionExercise).where(SessionExercise.exercise_id == exercise_id)
        ).all()
        for entry in session_entries:
            workout = entry.session
            workout.exercises.remove(entry)
            workout.exercises.reorder()

        self.session.delete(item)
        self.session.commit()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self) -> list[WorkoutTemplate]:
        return list(self.session.exec(select(WorkoutTemplate)).all())

    def get_template(self, template_id: uuid.UUID) -> WorkoutTemplate | None:
        return self.session.get(WorkoutTemplate, template_id)

    def find_template_by_name(self, name: str) -> WorkoutTemplate | None:
        """Exact-name lookup. Names are not unique; the first match wins."""
        return self.session.exec(select(WorkoutTemplate).where(WorkoutTemplate.name == name)).first()

    def create_template(
        self, name: str, exercises: Iterable[LibraryExercise] = ()
    ) -> WorkoutTemplate:
        template = WorkoutTemplate(name=name)
        for item in exercises:
            template.exercises.append(TemplateExercise(exercise_id=item.id, name=item.name))
        self._save(template)
        self.session.refresh(template)
        return template

    def update_template(self, template: WorkoutTemplate) -> None:
        self._save(template)

    def delete_template(self, template: WorkoutTemplate) -> None:
        """Delete a template together with the sessions logged against it."""
        for workout in self.sessions_for_template(template.id):
            self.session.delete(workout)
        self.session.delete(template)
        self.session.commit()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def list_sessions(self) -> list[WorkoutSession]:
        return list(self.session.exec(select(WorkoutSession)).all())

    def get_session(self, session_id: uuid.UUID) -> WorkoutSession | None:
        return self.session.get(WorkoutSession, session_id)

    def sessions_for_template(self, template_id: uuid.UUID) -> list[WorkoutSession]:
        """Sessions logged against a template, newest first."""
        return list(
            self.session.exec(
                select(WorkoutSession)
                .where(WorkoutSession.template_id == template_id)
                .order_by(WorkoutSession.date.desc())
            ).all()
        )

    def sessions_for_exercise(
        self, exercise_id: uuid.UUID
    ) -> list[tuple[WorkoutSession, SessionExercise]]:
        """Every session containing the library exercise, across all templates, newest first."""
        rows = self.session.exec(
            select(WorkoutSession, SessionExercise)
            .join(SessionExercise, SessionExercise.session_id == WorkoutSession.id)
            .where(SessionExercise.exercise_id == exercise_id)
            .order_by(WorkoutSession.date.desc())
        ).all()
        return [(workout, exercise) for workout, exercise in rows]

    def create_session(self, workout: WorkoutSession) -> WorkoutSession:
        self._save(workout)
        self.session.refresh(workout)
        return workout

    def update_session(self, workout: WorkoutSession) -> None:
        self._save(workout)

    def delete_session(self, workout: WorkoutSession) -> None:
        self.session.delete(workout)
        self.session.commit()
