# Overview: Durable storage for cash sessions and their count detail rows.

"""
Cash Session Store

Every operation takes the SQLAlchemy Session to work in; nothing here
reaches for a request-global handle. The two compound writes
(create_session, close_session) are single atomic units of work: either
the session row and all of its detail rows become visible together, or
nothing does.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..models import (
    CashSession,
    CashSessionDetail,
    SESSION_OPEN,
    SESSION_CLOSED,
    DETAIL_START,
    DETAIL_END,
    SINGLE_OPEN_INDEX,
)
from ..time_utils import utcnow
from ..validation import ConflictError, NotFoundError, SessionNotOpenError
from .cash_count_service import CashCountResult
from .concurrency import atomic, lock_for_update


@dataclass(frozen=True)
class ClosingFields:
    """Everything written onto a session row when it is closed."""
    ending_cash: Decimal
    total_cash_sales: Decimal
    total_card_sales: Decimal
    total_expenses: Decimal
    total_tips: Decimal
    loan_amount: Decimal
    loan_reason: str | None
    calculated_difference: Decimal


def find_active_session(session: Session) -> CashSession | None:
    """
    The open session, if any.

    Ordered by start time so that, should more than one ever be open, the
    most recently started wins.
    """
    return (
        session.query(CashSession)
        .filter_by(status=SESSION_OPEN)
        .order_by(CashSession.start_time.desc(), CashSession.id.desc())
        .first()
    )


def get_session(session: Session, session_id: int) -> CashSession:
    cash_session = session.get(CashSession, session_id)
    if cash_session is None:
        raise NotFoundError(f"Cash session {session_id} not found")
    return cash_session


def list_sessions(session: Session, *, status: str | None = None, limit: int = 50) -> list[CashSession]:
    query = session.query(CashSession)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(CashSession.start_time.desc(), CashSession.id.desc()).limit(limit).all()


def get_session_details(session: Session, session_id: int, detail_type: str | None = None) -> list[CashSessionDetail]:
    get_session(session, session_id)
    query = session.query(CashSessionDetail).filter_by(cash_session_id=session_id)
    if detail_type:
        query = query.filter_by(type=detail_type)
    return query.order_by(CashSessionDetail.id).all()


def _violates_single_open(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite reports the indexed column
    message = str(exc.orig)
    return SINGLE_OPEN_INDEX in message or "UNIQUE constraint failed: cash_sessions.status" in message


def _detail_rows(cash_session_id: int, count: CashCountResult, detail_type: str) -> list[CashSessionDetail]:
    return [
        CashSessionDetail(
            cash_session_id=cash_session_id,
            type=detail_type,
            denomination_value=line.denomination_value,
            quantity=line.quantity,
            subtotal=line.subtotal,
        )
        for line in count.lines()
    ]


def create_session(session: Session, *, user_id: str | None, starting_count: CashCountResult) -> CashSession:
    """
    Insert an open session plus one start detail row per counted denomination.

    Raises:
        ConflictError: another session is open (seen by the pre-check, or by
            the single-open unique index when two opens race)
        PersistenceError: any other database failure, including other
            constraint violations on the insert; nothing is kept
    """
    with atomic(session):
        existing = lock_for_update(session.query(CashSession).filter_by(status=SESSION_OPEN)).first()
        if existing:
            raise ConflictError(f"A cash session is already open (session {existing.id})")

        cash_session = CashSession(
            user_id=user_id,
            start_time=utcnow(),
            starting_cash=starting_count.total,
            status=SESSION_OPEN,
        )
        session.add(cash_session)
        try:
            session.flush()
        except IntegrityError as exc:
            if not _violates_single_open(exc):
                raise
            raise ConflictError("A cash session is already open") from exc

        session.add_all(_detail_rows(cash_session.id, starting_count, DETAIL_START))
        session.flush()

    return cash_session


def close_session(
    session: Session,
    session_id: int,
    closing: ClosingFields,
    ending_count: CashCountResult | None = None,
) -> CashSession:
    """
    Transition an open session to closed, re-reading it inside the same
    transaction that writes the update.

    Raises:
        NotFoundError: no such session
        SessionNotOpenError: already closed (including by a concurrent close)
        PersistenceError: any other database failure; nothing is kept
    """
    with atomic(session):
        cash_session = (
            lock_for_update(session.query(CashSession).filter_by(id=session_id))
            .populate_existing()
            .first()
        )
        if cash_session is None:
            raise NotFoundError(f"Cash session {session_id} not found")
        if not cash_session.is_open:
            raise SessionNotOpenError(f"Cash session {session_id} is not open")

        cash_session.status = SESSION_CLOSED
        cash_session.end_time = utcnow()
        cash_session.ending_cash = closing.ending_cash
        cash_session.total_cash_sales = closing.total_cash_sales
        cash_session.total_card_sales = closing.total_card_sales
        cash_session.total_expenses = closing.total_expenses
        cash_session.total_tips = closing.total_tips
        cash_session.loans_withdrawals_amount = closing.loan_amount
        cash_session.loans_withdrawals_reason = closing.loan_reason
        cash_session.calculated_difference = closing.calculated_difference

        if ending_count is not None:
            session.add_all(_detail_rows(cash_session.id, ending_count, DETAIL_END))

        try:
            session.flush()
        except StaleDataError as exc:
            raise SessionNotOpenError(f"Cash session {session_id} was closed concurrently") from exc

    return cash_session
