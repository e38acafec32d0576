"""
Database session management using SQLModel.
Provides the engine, table creation and the session dependency for routes.
"""

from typing import Generator

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from realty.core.config import settings

if settings.is_sqlite:
    _sqlite_kwargs = {}
    if ":memory:" in settings.SQLALCHEMY_DATABASE_URI or settings.SQLALCHEMY_DATABASE_URI == "sqlite://":
        # One shared connection, otherwise every checkout sees an empty database
        _sqlite_kwargs["poolclass"] = StaticPool
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},  # Sync routes run on a thread pool
        **_sqlite_kwargs,
    )
else:
    # pool_pre_ping ensures connections are alive before using them
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_db_and_tables() -> None:
    """Create every table registered on the SQLModel metadata."""
    # Imported for their side effect of registering tables
    from realty.models import activity, blog_post, listing, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session


def new_session() -> Session:
    """Open a session outside the request cycle (background tasks, scripts)."""
    return Session(engine)
