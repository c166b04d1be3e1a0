"""Merge a CSV export into the workout store.

Re-importing a file, or an export that overlaps data already in the store, only
adds rows that are not there yet. A row is "already there" when its
:func:`identity_key` matches a logged set in the store or an earlier row of the
same file.
"""

import logging
import math
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import TypeVar

from hitlog.exceptions import ImportReadError
from hitlog.models import (
    ExerciseForm,
    ExerciseSet,
    SessionExercise,
    TemplateExercise,
    WorkoutSession,
    WorkoutTemplate,
)
from hitlog.services.csv_rows import CsvRow, parse_csv
from hitlog.store import WorkoutStore

logger = logging.getLogger(__name__)

# Sessions of the same template closer than this are treated as one workout.
SESSION_MERGE_WINDOW = timedelta(seconds=60)

IdentityKey = tuple[datetime, str, str, int, int, int, str]

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass
class ImportStats:
    rows_imported: int = 0
    rows_skipped: int = 0
    sessions_affected: int = 0
    cancelled: bool = False


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def weight_key(weight: float) -> int:
    """Weight in tenths of a kg, rounded half up. Avoids comparing floats for equality."""
    return math.floor(weight * 10 + 0.5)


def identity_key(
    date: datetime,
    template_name: str,
    exercise_name: str,
    set_number: int,
    reps: int,
    weight: float,
    form: str,
) -> IdentityKey:
    """The fields that make two logged sets the same set. Notes and exercise order are not part of it."""
    return (
        truncate_to_minute(date),
        template_name,
        exercise_name,
        set_number,
        reps,
        weight_key(weight),
        form,
    )


def row_identity(row: CsvRow) -> IdentityKey:
    return identity_key(
        row.date,
        row.template_name,
        row.exercise_name,
        row.set_number,
        row.reps,
        row.weight,
        row.form,
    )


def existing_identities(store: WorkoutStore) -> set[IdentityKey]:
    """Identity keys of every set already logged in the store."""
    template_names = {t.id: t.name for t in store.list_templates()}
    keys: set[IdentityKey] = set()
    for workout in store.list_sessions():
        template_name = template_names.get(workout.template_id)
        if template_name is None:
            continue
        for exercise in workout.exercises:
            for index, exercise_set in enumerate(exercise.sets):
                keys.add(
                    identity_key(
                        workout.date,
                        template_name,
                        exercise.name,
                        index + 1,
                        exercise_set.reps,
                        exercise_set.weight,
                        exercise.form.value,
                    )
                )
    return keys


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Group items by key. Groups and their members keep first-occurrence order."""
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def session_key(row: CsvRow) -> tuple[datetime, str]:
    return truncate_to_minute(row.date), row.template_name


def exercise_processing_order(rows: list[CsvRow]) -> list[tuple[str, list[CsvRow]]]:
    """Exercise groups of one session, sorted by exercise order.

    Groups sharing an order value (e.g. all zero in legacy files) stay in the
    order they first appear in the file.
    """
    groups = group_by(rows, lambda r: r.exercise_name)
    return sorted(groups.items(), key=lambda item: item[1][0].exercise_order)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def _find_session_near(
    store: WorkoutStore, template: WorkoutTemplate, when: datetime
) -> WorkoutSession | None:
    for workout in store.sessions_for_template(template.id):
        if abs(workout.date - when) < SESSION_MERGE_WINDOW:
            return workout
    return None


def _new_sets(rows: list[CsvRow]) -> list[ExerciseSet]:
    return [
        ExerciseSet(reps=row.reps, weight=row.weight)
        for row in sorted(rows, key=lambda r: r.set_number)
    ]


def _merge_session_group(
    store: WorkoutStore, when: datetime, template_name: str, rows: list[CsvRow]
) -> None:
    template = store.find_template_by_name(template_name)
    if template is None:
        template = store.create_template(template_name)
        logger.info("Created template %r from import", template_name)

    workout = _find_session_near(store, template, when)
    is_new = workout is None
    if workout is None:
        workout = WorkoutSession(template_id=template.id, date=when)

    for exercise_name, exercise_rows in exercise_processing_order(rows):
        item = store.get_or_create_exercise_by_name(exercise_name)

        if not any(entry.exercise_id == item.id for entry in template.exercises):
            template.exercises.append(TemplateExercise(exercise_id=item.id, name=item.name))
            store.update_template(template)

        exercise = workout.exercise_for(item.id)
        if exercise is None:
            exercise = SessionExercise(
                exercise_id=item.id,
                name=exercise_name,
                form=ExerciseForm.parse(exercise_rows[0].form),
            )
            workout.exercises.append(exercise)
        for exercise_set in _new_sets(exercise_rows):
            exercise.sets.append(exercise_set)

    if is_new:
        store.create_session(workout)
    else:
        store.update_session(workout)


def _apply_notes(store: WorkoutStore, notes_by_exercise: dict[str, str]) -> None:
    for exercise_name, notes in notes_by_exercise.items():
        item = store.find_exercise_by_name(exercise_name)
        if item is not None:
            store.update_exercise_notes(item.id, notes)


def import_csv(
    text: str, store: WorkoutStore, cancel: Callable[[], bool] | None = None
) -> ImportStats:
    """Import the rows of a CSV export that are not in ``store`` yet.

    ``cancel`` is polled between sessions; once it returns true the remaining
    sessions are left alone and the partial statistics are returned.
    """
    stats = ImportStats()
    if len(text.splitlines()) <= 1:
        return stats

    seen = existing_identities(store)
    to_import: list[CsvRow] = []
    notes_by_exercise: dict[str, str] = {}

    for row in parse_csv(text):
        if row.notes:
            notes_by_exercise[row.exercise_name] = row.notes

        key = row_identity(row)
        if key in seen:
            stats.rows_skipped += 1
        else:
            to_import.append(row)
            seen.add(key)

    for (when, template_name), rows in group_by(to_import, session_key).items():
        if cancel is not None and cancel():
            stats.cancelled = True
            logger.info("Import cancelled after %d session(s)", stats.sessions_affected)
            break
        _merge_session_group(store, when, template_name, rows)
        stats.rows_imported += len(rows)
        stats.sessions_affected += 1

    if not stats.cancelled:
        _apply_notes(store, notes_by_exercise)

    logger.info(
        "Imported %d row(s), skipped %d duplicate(s), %d session(s) affected",
        stats.rows_imported,
        stats.rows_skipped,
        stats.sessions_affected,
    )
    return stats


def import_csv_file(path: str | Path, store: WorkoutStore, **kwargs) -> ImportStats:
    """Read ``path`` as UTF-8 and import it. Read failures raise ImportReadError before the store is touched."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImportReadError(f"Could not read {path}: {exc}") from exc
    return import_csv(text, store, **kwargs)
