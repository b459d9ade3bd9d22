"""Database engine and session management."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import Engine
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from formsync.models.base import Base

if TYPE_CHECKING:
    from formsync.config import Settings


def create_engine(
    settings: Settings,
) -> tuple[
    Engine,
    sessionmaker[Session],
]:
    """Create engine and session factory, creating tables if needed.

    Returns (engine, session_factory) tuple.
    """
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = sa_create_engine(
        settings.database_url,
        echo=settings.debug,
    )
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
    )
    return engine, session_factory
