"""Database configuration and session management.

The engine and session factory live on a ``Database`` handle that the
application opens at startup and disposes at shutdown. Nothing here opens a
connection at import time.
"""

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Create base class for models
Base = declarative_base()


class Database:
    """Owns the SQLAlchemy engine and session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url

        if database_url.startswith("sqlite"):
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
            )

            # SQLite defaults foreign_keys to OFF; CASCADE constraints are silently
            # ignored unless we enable them on every connection.
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        else:
            self.engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def create_all(self) -> None:
        """Create any missing tables for the registered models."""
        # Importing the models registers them on Base.metadata.
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for FastAPI routes to get database session.

    Rolls back the transaction on unhandled exceptions so that the
    connection is returned to the pool in a clean state.
    """
    db = request.app.state.database.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
