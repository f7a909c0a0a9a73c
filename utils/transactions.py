"""Transaction helpers around the Flask-SQLAlchemy session."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import scoped_session

from models import db


@contextmanager
def atomic() -> Iterator[scoped_session]:
    """Run a block as one unit of work.

    Commits when the block finishes and rolls back on any exception,
    including HTTP errors raised half-way through a transition.
    """

    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
