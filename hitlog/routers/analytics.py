import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import SQLModel

from hitlog.database import get_store
from hitlog.services.progress import chart_y_range, max_weight_series
from hitlog.store import WorkoutStore

router = APIRouter()

StoreDep = Annotated[WorkoutStore, Depends(get_store)]


class ProgressPointRead(SQLModel):
    index: int
    date: datetime
    max_weight: float


class MaxWeightChartRead(SQLModel):
    exercise_id: uuid.UUID
    points: list[ProgressPointRead]
    y_min: float
    y_max: float


@router.get("/exercises/{exercise_id}/max-weight", response_model=MaxWeightChartRead)
def get_max_weight_chart(exercise_id: uuid.UUID, store: StoreDep):
    if store.get_exercise(exercise_id) is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    points = max_weight_series(store, exercise_id)
    y_min, y_max = chart_y_range([p.max_weight for p in points])
    return MaxWeightChartRead(
        exercise_id=exercise_id,
        points=[
            ProgressPointRead(index=p.index, date=p.date, max_weight=p.max_weight)
            for p in points
        ],
        y_min=y_min,
        y_max=y_max,
    )
