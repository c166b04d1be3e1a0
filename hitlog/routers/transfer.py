import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, UploadFile
from fastapi.responses import Response
from sqlmodel import SQLModel

from hitlog.database import get_store
from hitlog.services.exporter import export_csv, export_filename
from hitlog.services.importer import import_csv
from hitlog.store import WorkoutStore

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[WorkoutStore, Depends(get_store)]


class ImportStatsRead(SQLModel):
    rows_imported: int
    rows_skipped: int
    sessions_affected: int


@router.post("/import", response_model=ImportStatsRead)
def import_file(file: UploadFile, store: StoreDep):
    """Import a HITLog CSV export. Only rows not already logged are added."""
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Rejected import of %r: not UTF-8", file.filename)
        raise HTTPException(status_code=400, detail="Could not read file: not valid UTF-8 text")

    stats = import_csv(text, store)
    return ImportStatsRead(
        rows_imported=stats.rows_imported,
        rows_skipped=stats.rows_skipped,
        sessions_affected=stats.sessions_affected,
    )


@router.get("/export")
def export_file(store: StoreDep, legacy: bool = False):
    filename = export_filename(datetime.now())
    return Response(
        content=export_csv(store, legacy=legacy),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
