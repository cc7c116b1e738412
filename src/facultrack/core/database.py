"""Database session and metadata configuration."""

import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings
from .errors import ConflictError, DependencyError, PortalError

logger = logging.getLogger(__name__)

settings = get_settings()

_connect_args = {}
if settings.database_url.startswith("sqlite"):
    # Writers queue on the database lock instead of failing fast.
    _connect_args = {"check_same_thread": False, "timeout": 30}

engine = create_engine(settings.database_url, future=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db() -> Generator:
    """Yield a database session for request lifetime."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def store_error(exc: SQLAlchemyError, *, record_id: Any = None) -> PortalError:
    """Map a data-store failure onto the portal error it surfaces as."""

    if isinstance(exc, IntegrityError):
        return ConflictError("Concurrent update detected; refetch and retry.", record_id=record_id)
    logger.error("data store failure: %s", exc)
    return DependencyError("Data store unavailable.", record_id=record_id)


def commit_or_raise(db: Session) -> None:
    """Commit the unit of work, translating store failures into portal errors."""

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise store_error(exc) from exc


def init_db() -> None:
    """Create all tables and seed the department catalog."""

    from .. import models  # noqa: F401
    from ..services.department_service import seed_departments

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_departments(session)
        session.commit()
    finally:
        session.close()
