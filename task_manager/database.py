import logging
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from .config import Settings
from .errors import StorageError

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> Engine:
    # SQLite connections are shared across the threadpool FastAPI runs sync routes in
    connect_args = {"check_same_thread": False} if settings.is_sqlite else {}
    return create_engine(settings.database_url, connect_args=connect_args)


def create_db_and_tables(engine: Engine):
    # Import registers the tables on SQLModel.metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Tables ready on %s", engine.url.render_as_string(hide_password=True))


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session


@contextmanager
def storage_errors(session: Session):
    """Roll back and re-raise any engine failure as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Storage operation failed")
        raise StorageError(f"Storage error: {e.__class__.__name__}") from e
