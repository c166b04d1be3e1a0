import uuid
from dataclasses import dataclass
from datetime import datetime

from hitlog.models import SessionExercise, WorkoutSession
from hitlog.store import WorkoutStore

DEFAULT_Y_RANGE = (0.0, 100.0)


@dataclass
class ProgressPoint:
    index: int  # 1-based workout number
    date: datetime
    max_weight: float


def exercise_history(
    store: WorkoutStore, exercise_id: uuid.UUID
) -> list[tuple[WorkoutSession, SessionExercise]]:
    """Every logged instance of a library exercise, newest first."""
    return store.sessions_for_exercise(exercise_id)


def previous_exercise(
    store: WorkoutStore, exercise_id: uuid.UUID, before: datetime | None = None
) -> SessionExercise | None:
    """The most recent logged instance of an exercise, optionally strictly before ``before``.

    Used to show last time's sets while logging a new workout.
    """
    for workout, exercise in exercise_history(store, exercise_id):
        if before is None or workout.date < before:
            return exercise
    return None


def max_weight_series(store: WorkoutStore, exercise_id: uuid.UUID) -> list[ProgressPoint]:
    """Heaviest set per session, oldest first. Sessions without sets are left out."""
    points: list[ProgressPoint] = []
    for workout, exercise in reversed(exercise_history(store, exercise_id)):
        if not exercise.sets:
            continue
        points.append(
            ProgressPoint(
                index=len(points) + 1,
                date=workout.date,
                max_weight=max(s.weight for s in exercise.sets),
            )
        )
    return points


def chart_y_range(weights: list[float]) -> tuple[float, float]:
    """Y axis bounds with 10% padding (5 kg when all weights are equal), never below zero."""
    if not weights:
        return DEFAULT_Y_RANGE
    low, high = min(weights), max(weights)
    span = high - low
    padding = span * 0.1 if span > 0 else 5.0
    lower = max(0.0, low - padding)
    upper = high + padding
    if upper <= lower:
        return DEFAULT_Y_RANGE
    return lower, upper
