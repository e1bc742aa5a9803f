# Overview: Cash-drawer session lifecycle: open with a float count, close with reconciliation.

"""
Cash Session Lifecycle

State machine: open --close()--> closed. Closed is terminal; nothing
reopens a session.

DESIGN PRINCIPLES:
- At most one open session per register (enforced by the store/database)
- starting_cash is fixed by the opening count and never edited
- Close computes expected cash and the signed variance, then persists
  everything in one transaction
- Errors are typed and forwarded to the caller; nothing is retried here
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from sqlalchemy.orm import Session

from ..models import CashSession
from ..validation import SessionNotOpenError, ValidationError, parse_amount, parse_text
from . import reconciliation, session_store
from .cash_count_service import aggregate
from .session_store import ClosingFields


@dataclass(frozen=True)
class ClosedSessionReport:
    """Result of a close, ready for immediate display or the report generator."""
    session: CashSession
    expected_cash: Decimal
    difference: Decimal
    variance: str  # surplus | shortage | balanced
    summary: str

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(include_details=True),
            "expected_cash": str(self.expected_cash),
            "difference": str(self.difference),
            "variance": self.variance,
            "summary": self.summary,
        }


def get_active_session(session: Session) -> CashSession | None:
    """Used by the UI to decide whether to prompt for an opening count."""
    return session_store.find_active_session(session)


def open_session(
    session: Session,
    *,
    user_id: str | None,
    counts: Mapping | None,
    require_positive_total: bool = False,
) -> CashSession:
    """
    Open a new session from an opening denomination count.

    Args:
        user_id: Opaque operator identifier (may be None)
        counts: {denomination value: quantity}, already validated
        require_positive_total: Reject an empty drawer (off by default)

    Raises:
        ValidationError: opening total is not positive and the policy requires it
        ConflictError: a session is already open
    """
    starting_count = aggregate(counts)
    if require_positive_total and starting_count.total <= 0:
        raise ValidationError("Opening cash count must be greater than zero")

    return session_store.create_session(session, user_id=user_id, starting_count=starting_count)


def close_session(
    session: Session,
    session_id: int,
    *,
    ending_counts: Mapping | None = None,
    ending_cash=None,
    cash_sales=None,
    card_sales=None,
    expenses=None,
    tips=None,
    loan_amount=None,
    loan_reason: str | None = None,
    require_end_count: bool = False,
    currency_symbol: str = "$",
) -> ClosedSessionReport:
    """
    Close an open session and reconcile the drawer.

    Exactly one of `ending_counts` (itemized closing count, persisted as end
    detail rows) or `ending_cash` (bare total) must be supplied.

        expected   = starting + cash_sales - expenses - loan_amount + tips
        difference = ending - expected   (positive surplus, negative shortage)

    Card sales are recorded on the session but never enter the expectation.

    Raises:
        ValidationError: bad amounts, missing loan reason, count/total misuse
        NotFoundError: no such session
        SessionNotOpenError: the session is already closed
    """
    if ending_counts is not None and ending_cash is not None:
        raise ValidationError("Provide either a closing count or an ending cash total, not both")
    if ending_counts is None and ending_cash is None:
        raise ValidationError("A closing count or an ending cash total is required")
    if require_end_count and ending_counts is None:
        raise ValidationError("An itemized closing count is required")

    cash_sales = parse_amount(cash_sales, "total_cash_sales")
    card_sales = parse_amount(card_sales, "total_card_sales")
    expenses = parse_amount(expenses, "total_expenses")
    tips = parse_amount(tips, "total_tips")
    loan_amount = parse_amount(loan_amount, "loan_amount")
    loan_reason = parse_text(loan_reason, "loan_reason", max_length=255)
    if loan_amount > 0 and not loan_reason:
        raise ValidationError("loan_reason is required when loan_amount is greater than zero")

    ending_count = None
    if ending_counts is not None:
        ending_count = aggregate(ending_counts)
        ending_total = ending_count.total
    else:
        ending_total = parse_amount(ending_cash, "ending_cash")

    cash_session = session_store.get_session(session, session_id)
    if not cash_session.is_open:
        raise SessionNotOpenError(f"Cash session {session_id} is not open")

    expected = reconciliation.expected_cash(
        cash_session.starting_cash, cash_sales, expenses, loan_amount, tips
    )
    diff = reconciliation.difference(ending_total, expected)

    closed = session_store.close_session(
        session,
        session_id,
        ClosingFields(
            ending_cash=ending_total,
            total_cash_sales=cash_sales,
            total_card_sales=card_sales,
            total_expenses=expenses,
            total_tips=tips,
            loan_amount=loan_amount,
            loan_reason=loan_reason,
            calculated_difference=diff,
        ),
        ending_count,
    )

    return ClosedSessionReport(
        session=closed,
        expected_cash=expected,
        difference=diff,
        variance=reconciliation.variance_label(diff),
        summary=reconciliation.describe_variance(diff, currency_symbol),
    )


def describe_closed_session(cash_session: CashSession, *, currency_symbol: str = "$") -> ClosedSessionReport:
    """
    Rebuild the reconciliation view of an already-closed session from its
    stored close-out fields (for reprints and end-of-day reports).
    """
    if cash_session.is_open:
        raise ValidationError(f"Cash session {cash_session.id} is still open")

    zero = Decimal("0.00")
    expected = reconciliation.expected_cash(
        cash_session.starting_cash,
        cash_session.total_cash_sales or zero,
        cash_session.total_expenses or zero,
        cash_session.loans_withdrawals_amount or zero,
        cash_session.total_tips or zero,
    )
    diff = cash_session.calculated_difference
    return ClosedSessionReport(
        session=cash_session,
        expected_cash=expected,
        difference=diff,
        variance=reconciliation.variance_label(diff),
        summary=reconciliation.describe_variance(diff, currency_symbol),
    )
