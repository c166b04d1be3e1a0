import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

import hitlog.models as _models  # noqa: F401 (registers tables with SQLModel metadata)
from hitlog.database import create_db_and_tables
from hitlog.routers import analytics, exercises, sessions, templates, transfer
from hitlog.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_db_and_tables()
    logger.info("Database ready")
    yield


app = FastAPI(title="HITLog", lifespan=lifespan)

app.include_router(templates.router, prefix="/api/templates", tags=["templates"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(exercises.router, prefix="/api/exercises", tags=["exercises"])
app.include_router(transfer.router, prefix="/api/transfer", tags=["transfer"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
