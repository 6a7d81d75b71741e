"""SQLModel session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from dspforms.core.config import settings


def _engine_kwargs(url: str) -> dict[str, Any]:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    # An in-memory database only exists for the life of its connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(
    settings.database_url, echo=settings.database_echo, **_engine_kwargs(settings.database_url)
)


if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db() -> None:
    # Table classes must be registered on the metadata before create_all
    import dspforms.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a database session as a context manager (for use with 'with' statement).

    For FastAPI dependency injection, use get_session_dep() instead.
    """
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


def get_session_dep() -> Iterator[Session]:
    """Get a database session for FastAPI dependency injection.

    This is a plain generator function (not decorated with @contextmanager)
    because FastAPI's Depends() handles the context management.
    """
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()
