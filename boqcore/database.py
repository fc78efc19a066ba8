"""Database connection, session factory, and transaction boundary.

unit_of_work() is the only place a session commits for multi-statement
writes: cascades and the submission-approve compound write either land
in one commit or roll back entirely.
"""

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .exceptions import BoqError, Conflict, StoreUnavailable


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {"connect_timeout": settings.db_connect_timeout},
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@event.listens_for(engine, "connect")
def _on_connect(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    if settings.is_sqlite:
        cursor.execute("PRAGMA foreign_keys=ON")
    else:
        cursor.execute("SET timezone = 'UTC'")
    cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """Run a block of writes as one transaction.

    Commits when the block exits cleanly. Any exception rolls back the whole
    transaction; integrity errors surface as Conflict, other driver errors as
    StoreUnavailable, domain errors unchanged.
    """
    try:
        yield db
        db.commit()
    except BoqError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error, transaction rolled back: {}", e.orig)
        raise Conflict("Conflicts with an existing record") from e
    except (DBAPIError, SQLAlchemyError) as e:
        db.rollback()
        logger.error("Store error, transaction rolled back: {}", e)
        raise StoreUnavailable("Database unavailable, transaction rolled back") from e
    except Exception:
        db.rollback()
        raise
