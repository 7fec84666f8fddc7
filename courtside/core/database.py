"""Database configuration and session management for SQLite.

This module configures the SQLite database engine with settings suited to
a web application: WAL mode for concurrent access and foreign key
enforcement so participant rows cannot outlive a hard-deleted game.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      Two players joining the same game at once, and the background
      reconcile sweep, all write while other requests read listings.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled so that
      ``participant.game_id`` always references an existing game.

    - **check_same_thread=False**: Required for FastAPI, whose dependency
      injection may hand a session to a different thread than the one that
      opened the connection.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from courtside.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Register table metadata before create_all
    import courtside.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
