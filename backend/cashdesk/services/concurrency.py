# Overview: Transaction helpers shared by the cash session store.

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..validation import PersistenceError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """
    One unit of work: commit on success, roll back on any failure.

    Raw SQLAlchemy failures surface as PersistenceError; typed domain errors
    raised inside the block propagate unchanged (after the rollback). No
    retry happens here, callers resubmit explicitly.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise PersistenceError(f"Cash session transaction failed: {exc.__class__.__name__}") from exc
    except BaseException:
        session.rollback()
        raise
