# Overview: Sales totals from order history and the end-of-day report payload.

"""
End-of-day reporting helpers.

summarize_sales() adapts the order history into the cash/card totals the
close operation consumes. build_end_of_day_report() packages an
already-reconciled session into the plain dict handed to the PDF
renderer; no arithmetic beyond sums of order totals happens here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping

from ..time_utils import to_naive_utc, to_utc_z, utcnow
from ..validation import ValidationError, parse_amount
from .cash_session_service import ClosedSessionReport

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
ORDER_COMPLETED = "completed"


@dataclass
class SalesSummary:
    total_sales: Decimal = Decimal("0.00")
    cash_sales: Decimal = Decimal("0.00")
    card_sales: Decimal = Decimal("0.00")
    orders: list[dict] = field(default_factory=list)


def _payment_method(order: Mapping) -> str:
    # Anything that is not explicitly cash is settled outside the drawer
    method = str(order.get("payment_method") or "").lower()
    return PAYMENT_CASH if method == PAYMENT_CASH else PAYMENT_CARD


def summarize_sales(orders: Iterable[Mapping], since: datetime | str | None = None) -> SalesSummary:
    """
    Sum completed orders by payment method.

    Orders created before `since` (normally the session start time) are
    ignored; orders without a timestamp are only counted when no `since`
    is given.
    """
    cutoff = to_naive_utc(since)
    summary = SalesSummary()

    for order in orders:
        if order.get("status", ORDER_COMPLETED) != ORDER_COMPLETED:
            continue
        if cutoff is not None:
            try:
                created_at = to_naive_utc(order.get("created_at"))
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid created_at on order {order.get('id')!r}")
            if created_at is None or created_at < cutoff:
                continue

        total = parse_amount(order.get("total"), "order total")
        method = _payment_method(order)
        summary.total_sales += total
        if method == PAYMENT_CASH:
            summary.cash_sales += total
        else:
            summary.card_sales += total
        summary.orders.append(
            {
                "order_number": str(order.get("order_number") or ""),
                "order_id": order.get("id"),
                "customer": order.get("customer"),
                "subtotal": str(parse_amount(order.get("subtotal"), "order subtotal", default=total)),
                "total": str(total),
                "payment_method": method,
                "status": ORDER_COMPLETED,
            }
        )

    return summary


def build_end_of_day_report(
    report: ClosedSessionReport,
    *,
    orders: Iterable[Mapping] = (),
    business_name: str = "Cashdesk POS",
    operator: str | None = None,
    generated_at: datetime | None = None,
) -> dict:
    """
    Report payload for a closed session.

    Reconciliation numbers come from the session as persisted at close;
    `orders` only feeds the sales history listing and the total sales line.
    """
    cash_session = report.session
    sales = summarize_sales(orders, since=cash_session.start_time)

    return {
        "business_name": business_name,
        "report_date": to_utc_z(generated_at or utcnow()),
        "user": operator or cash_session.user_id or "Unknown user",
        "session_id": cash_session.id,
        "start_time": to_utc_z(cash_session.start_time),
        "end_time": to_utc_z(cash_session.end_time),
        "starting_cash": str(cash_session.starting_cash),
        "total_sales": str(sales.total_sales),
        "cash_sales": str(cash_session.total_cash_sales),
        "card_sales": str(cash_session.total_card_sales),
        "total_expenses": str(cash_session.total_expenses),
        "total_tips": str(cash_session.total_tips),
        "loans_withdrawals_amount": str(cash_session.loans_withdrawals_amount),
        "loans_withdrawals_reason": cash_session.loans_withdrawals_reason or "",
        "ending_cash": str(cash_session.ending_cash),
        "expected_cash_in_register": str(report.expected_cash),
        "calculated_difference": str(report.difference),
        "variance": report.variance,
        "variance_summary": report.summary,
        "sales_history": sales.orders,
    }
