"""Parse HITLog CSV exports into structured rows.

Two header layouts are accepted. The legacy one has no exercise order column:

    Date,Time,Workout Template,Exercise,Set Number,Reps,Weight (kg),Form[,Notes]

The ordered one is recognised by an "Exercise Order" header:

    Date,Time,Workout Template,Exercise,Exercise Order,Set Number,Reps,Weight (kg),Form[,Notes]

Malformed lines are dropped rather than reported; malformed numbers become zero.
"""

import csv
import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)

DATE_TIME_FORMAT = "%Y-%m-%d %H:%M"
ORDER_HEADER_MARKER = "exercise order"

LEGACY_MIN_COLUMNS = 8
ORDERED_MIN_COLUMNS = 9


@dataclass(frozen=True)
class CsvRow:
    date: datetime
    template_name: str
    exercise_name: str
    exercise_order: int  # 0 means "use file order"
    set_number: int
    reps: int
    weight: float
    form: str
    notes: str = ""


def _parse_int(value: str, default: int = 0) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str) -> float:
    try:
        result = float(value.replace(",", "."))
    except ValueError:
        return 0.0
    # float() accepts "nan" and "inf"
    return result if math.isfinite(result) else 0.0


def _parse_date(date_str: str, time_str: str) -> datetime | None:
    try:
        return datetime.strptime(f"{date_str} {time_str}", DATE_TIME_FORMAT)
    except ValueError:
        return None


def has_exercise_order(header: str) -> bool:
    return ORDER_HEADER_MARKER in header.lower()


def _row_from_fields(fields: list[str], ordered: bool) -> CsvRow | None:
    min_columns = ORDERED_MIN_COLUMNS if ordered else LEGACY_MIN_COLUMNS
    if len(fields) < min_columns:
        return None

    date = _parse_date(fields[0], fields[1])
    if date is None:
        return None

    if ordered:
        exercise_order = _parse_int(fields[4], default=1)
        rest = fields[5:]
    else:
        exercise_order = 0
        rest = fields[4:]

    return CsvRow(
        date=date,
        template_name=fields[2],
        exercise_name=fields[3],
        exercise_order=exercise_order,
        set_number=_parse_int(rest[0]),
        reps=max(0, _parse_int(rest[1])),
        weight=max(0.0, _parse_float(rest[2])),
        form=rest[3],
        notes=rest[4] if len(rest) > 4 else "",
    )


def _records(lines: list[str]) -> Iterator[tuple[int, list[str]]]:
    """Yield ``(index into lines, fields)`` for every CSV record.

    Quoted fields may span lines. A record whose quoting is broken (typically a
    quote that never closes) is read from its first line alone, and reading
    resumes on the line after it.
    """
    start = 0
    while start < len(lines):
        reader = csv.reader(lines[start:], skipinitialspace=True, strict=True)
        consumed = 0
        try:
            for fields in reader:
                yield start + consumed, fields
                consumed = reader.line_num
            return
        except csv.Error as exc:
            bad = start + consumed
            logger.debug("Broken quoting on CSV line %d (%s), reading it alone", bad + 2, exc)
            try:
                fields = next(csv.reader([lines[bad]], skipinitialspace=True), [])
            except csv.Error:
                fields = []
            yield bad, fields
            start = bad + 1


class CsvRows:
    """Lazily parsed rows of a CSV export. Each iteration starts over from the first row."""

    def __init__(self, text: str):
        self.text = text.lstrip("\ufeff")
        self.lines = self.text.splitlines(keepends=True)

    @property
    def header(self) -> str:
        return self.lines[0].strip() if self.lines else ""

    @property
    def ordered(self) -> bool:
        return has_exercise_order(self.header)

    def __iter__(self) -> Iterator[CsvRow]:
        ordered = self.ordered
        for index, fields in _records(self.lines[1:]):
            if not fields:
                continue
            row = _row_from_fields([f.strip() for f in fields], ordered)
            if row is None:
                # header is line 1
                logger.debug("Dropping malformed CSV line %d: %r", index + 2, fields)
                continue
            yield row


def parse_csv(text: str) -> CsvRows:
    return CsvRows(text)
