# barbershop/db.py

import logging
from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, create_engine, Session

from .config import settings

logger = logging.getLogger(__name__)


def make_engine(url: str, **kwargs):
    """
    Engine factory. For SQLite every transaction starts with BEGIN IMMEDIATE
    so that concurrent booking transactions are serialized by the database
    write lock.
    """
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False})

    new_engine = create_engine(url, echo=False, **kwargs)

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def _sqlite_connect(dbapi_connection, _):
            # let SQLAlchemy emit BEGIN itself
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(new_engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return new_engine


engine = make_engine(settings.database_url)


def create_db_and_tables(target_engine=None):
    # tables are registered on SQLModel.metadata by importing the models
    from . import models  # noqa: F401

    target_engine = target_engine or engine
    SQLModel.metadata.create_all(target_engine)
    logger.info("Database tables ready on %s", target_engine.url.render_as_string(hide_password=True))


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session


def is_uniqueness_violation(exc: IntegrityError) -> bool:
    """True for unique-constraint failures, False for foreign keys, NOT NULL etc."""
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


@contextmanager
def transaction(session: Session):
    """
    Unit of work: everything done through `session` inside the block is
    committed together, or rolled back if anything raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
