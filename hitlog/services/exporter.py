from datetime import datetime

from hitlog.store import WorkoutStore

HEADER = [
    "Date",
    "Time",
    "Workout Template",
    "Exercise",
    "Exercise Order",
    "Set Number",
    "Reps",
    "Weight (kg)",
    "Form",
    "Notes",
]
LEGACY_HEADER = [column for column in HEADER if column != "Exercise Order"]

UNKNOWN_TEMPLATE = "Unknown"


def escape_field(value: str) -> str:
    """Quote a field containing a comma, line break or double quote; double any inner quotes."""
    if any(c in value for c in (",", "\n", "\r", '"')):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_weight(weight: float) -> str:
    text = f"{weight:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def export_filename(now: datetime) -> str:
    return f"HITLog Export {now:%Y%m%d_%H%M}.csv"


def export_csv(store: WorkoutStore, legacy: bool = False) -> str:
    """Flatten every logged set into CSV text, newest session first."""
    template_names = {t.id: t.name for t in store.list_templates()}
    lines = [",".join(LEGACY_HEADER if legacy else HEADER)]

    sessions = sorted(store.list_sessions(), key=lambda s: s.date, reverse=True)
    for workout in sessions:
        template_name = template_names.get(workout.template_id, UNKNOWN_TEMPLATE)
        date = f"{workout.date:%Y-%m-%d}"
        time = f"{workout.date:%H:%M}"

        for order, exercise in enumerate(workout.exercises, start=1):
            notes = store.get_exercise_notes(exercise.exercise_id)
            for set_number, exercise_set in enumerate(exercise.sets, start=1):
                fields = [date, time, template_name, exercise.name]
                if not legacy:
                    fields.append(str(order))
                fields += [
                    str(set_number),
                    str(exercise_set.reps),
                    format_weight(exercise_set.weight),
                    exercise.form.value,
                    notes,
                ]
                lines.append(",".join(escape_field(f) for f in fields))

    return "\n".join(lines) + "\n"
