from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.logging_config import get_logger
from core.settings import settings

logger = get_logger(__name__)


def create_db_engine(url: str, **kwargs) -> Engine:
    """Engine for `url`. SQLite connections are shared across the request threadpool."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_size", settings.DATABASE_POOL_SIZE)
    return create_engine(url, **kwargs)


# Connections are opened lazily; importing this module never touches the database
engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error, session rolled back")
        raise
    finally:
        db.close()


@contextmanager
def db_context() -> Generator[Session, None, None]:
    """Session scope for the CLI: commit on success, roll back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
