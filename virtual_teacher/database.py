import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from virtual_teacher.core import config


engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite enforces foreign keys only when asked to, once per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(bind=None) -> None:
    # Table modules register themselves on Base.metadata when imported.
    from virtual_teacher.models import course, lecture, role, topic, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run one use case as a single transaction on ``db``.

    Commits when the block finishes and rolls back everything the block
    flushed when it raises, then re-raises the original error.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError:
        logger.exception('Transaction failed and was rolled back.')
        db.rollback()
        raise
    except Exception:
        db.rollback()
        raise
