"""
Database Session Management
===========================

Explicitly constructed storage client. The application creates one
`Database` per process, opens it on startup, hands sessions to request
handlers through a FastAPI dependency and closes it on shutdown.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign key enforcement off, per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine_for_url(database_url: str, echo: bool = False, connect_timeout: int = 5) -> Engine:
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout},
        echo=echo,
    )


class Database:
    """
    Storage client wrapping an engine and a session factory.

    Usage:
        database = Database("sqlite:///./istanfix.db")
        database.open()
        database.create_schema()
        with database.session_scope() as db:
            db.query(User).all()
        database.close()
    """

    def __init__(self, url: str, echo: bool = False, connect_timeout: int = 5):
        self.url = url
        self.echo = echo
        self.connect_timeout = connect_timeout
        self._engine: Optional[Engine] = None
        self._sessionmaker = sessionmaker(autocommit=False, autoflush=False)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "Database":
        if self._engine is None:
            self._engine = _create_engine_for_url(self.url, echo=self.echo, connect_timeout=self.connect_timeout)
            self._sessionmaker.configure(bind=self._engine)
            logger.info("Database opened (%s)", self._engine.dialect.name)
        return self

    def create_schema(self):
        """Create tables, constraints and triggers if they don't exist"""
        Base.metadata.create_all(bind=self.engine)

    def drop_schema(self):
        """Drop all tables (use with caution!)"""
        Base.metadata.drop_all(bind=self.engine)

    def close(self):
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessionmaker.configure(bind=None)
            logger.info("Database closed")

    def session(self) -> Session:
        """New session bound to this database; caller closes it"""
        return self._sessionmaker(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for a unit of work.

        Commits on success, rolls back on any exception.
        """
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
