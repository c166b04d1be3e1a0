from typing import Annotated

from fastapi import Depends
from sqlmodel import Session, SQLModel, create_engine

from hitlog.settings import get_settings
from hitlog.store import WorkoutStore

DATABASE_URL = get_settings().database_url

_is_sqlite = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL, connect_args={"check_same_thread": False} if _is_sqlite else {}
)

# Enable WAL mode for better read performance
if _is_sqlite:
    with engine.connect() as _conn:
        _conn.exec_driver_sql("PRAGMA journal_mode=WAL")


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session


def get_store(session: Annotated[Session, Depends(get_session)]) -> WorkoutStore:
    return WorkoutStore(session)
