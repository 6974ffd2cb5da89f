import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Engine plus session factory. One per process, created before serving."""

    def __init__(self, url: str, **engine_kwargs) -> None:
        self.url = url
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine: Engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _sqlite_pragmas)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def _sqlite_pragmas(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


_database: Database | None = None


def init_db(url: str) -> Database:
    global _database
    if _database is not None:
        _database.dispose()
    _database = Database(url)
    logger.info("database initialised (%s)", _database.engine.url.render_as_string(hide_password=True))
    return _database


def get_database() -> Database:
    if _database is None:
        raise RuntimeError("database not initialised; call init_db() first")
    return _database


def close_db() -> None:
    global _database
    if _database is not None:
        _database.dispose()
        logger.info("database disposed")
    _database = None


def get_db(request: Request) -> Iterator[Session]:
    """Request-scoped session from the database the app was started with."""
    database = getattr(request.app.state, "database", None) or get_database()
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, isolation_level: str | None = None) -> Iterator[Session]:
    """Run a unit of work on ``db``: commit on success, roll back on any exit by exception.

    ``isolation_level`` must be set before the session touches the database,
    so pass a fresh session.
    """
    if isolation_level:
        db.connection(execution_options={"isolation_level": isolation_level})
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
