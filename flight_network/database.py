"""SQLite plumbing behind the reservation book."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config
from .models import Base


def create_session_factory(
    db_url: Optional[str] = None, *, echo: bool = False
) -> Tuple[Engine, sessionmaker[Session]]:
    """Return an engine/session factory pair for the reservation database.

    An in-memory URL is pinned to a single connection so that every session
    sees the same reservations for the life of the engine.
    """

    db_url = db_url or config.DB_URL
    options: dict = {"echo": echo, "connect_args": {"check_same_thread": False}}
    if db_url.endswith(":memory:"):
        options["poolclass"] = StaticPool
    engine = create_engine(db_url, **options)
    return engine, sessionmaker(bind=engine, expire_on_commit=False)


def ensure_schema(session_factory: sessionmaker[Session]) -> None:
    """Create the reservation tables on the engine ``session_factory`` is bound to."""

    engine = session_factory.kw.get("bind")
    if engine is None:
        raise ValueError("Session factory is not bound to an engine.")
    Base.metadata.create_all(engine)


def init_db(db_url: Optional[str] = None, *, echo: bool = False) -> sessionmaker[Session]:
    """Create the reservation tables and return a session factory."""

    _, session_factory = create_session_factory(db_url, echo=echo)
    ensure_schema(session_factory)
    return session_factory


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """One transaction: committed when the block exits cleanly, rolled back otherwise."""

    with session_factory.begin() as session:
        yield session
