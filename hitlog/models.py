import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy.ext.orderinglist import ordering_list
from sqlmodel import Field, Relationship, SQLModel


class ExerciseForm(str, Enum):
    MEH = "Meh"
    GOOD = "Good"
    PERFECT = "Perfect"

    @classmethod
    def parse(cls, value: str) -> "ExerciseForm":
        """Return the form named by ``value``, falling back to GOOD."""
        try:
            return cls(value)
        except ValueError:
            return cls.GOOD


class LibraryExercise(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    notes: str = ""


class WorkoutTemplate(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)

    exercises: list["TemplateExercise"] = Relationship(
        back_populates="template",
        sa_relationship_kwargs={
            "order_by": "TemplateExercise.position",
            "collection_class": ordering_list("position"),
            "cascade": "all, delete-orphan",
        },
    )


class TemplateExercise(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    template_id: uuid.UUID | None = Field(default=None, foreign_key="workouttemplate.id")
    exercise_id: uuid.UUID = Field(foreign_key="libraryexercise.id")
    name: str  # display copy of the library name when added
    position: int = 0

    template: WorkoutTemplate | None = Relationship(back_populates="exercises")


class WorkoutSession(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    template_id: uuid.UUID = Field(foreign_key="workouttemplate.id", index=True)
    date: datetime

    exercises: list["SessionExercise"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={
            "order_by": "SessionExercise.position",
            "collection_class": ordering_list("position"),
            "cascade": "all, delete-orphan",
        },
    )

    def exercise_for(self, exercise_id: uuid.UUID) -> "SessionExercise | None":
        for exercise in self.exercises:
            if exercise.exercise_id == exercise_id:
                return exercise
        return None


class SessionExercise(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    session_id: uuid.UUID | None = Field(default=None, foreign_key="workoutsession.id")
    exercise_id: uuid.UUID = Field(foreign_key="libraryexercise.id", index=True)
    name: str  # display copy of the library name when added
    form: ExerciseForm = ExerciseForm.GOOD
    position: int = 0

    session: WorkoutSession | None = Relationship(back_populates="exercises")
    sets: list["ExerciseSet"] = Relationship(
        back_populates="exercise",
        sa_relationship_kwargs={
            "order_by": "ExerciseSet.position",
            "collection_class": ordering_list("position"),
            "cascade": "all, delete-orphan",
        },
    )


class ExerciseSet(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    session_exercise_id: uuid.UUID | None = Field(default=None, foreign_key="sessionexercise.id")
    position: int = 0  # set number - 1
    reps: int = 0
    weight: float = 0.0  # stored in kg

    exercise: SessionExercise | None = Relationship(back_populates="sets")
