# Overview: Pure end-of-day arithmetic: expected drawer cash and the counted variance.

"""
Only cash-affecting movements enter the expectation. Card sales never touch
the drawer and are deliberately absent from these formulas.

Sign convention for the difference (counted - expected):
- positive: surplus (more cash than expected)
- negative: shortage
- zero: balanced
"""

from __future__ import annotations

from decimal import Decimal

SURPLUS = "surplus"
SHORTAGE = "shortage"
BALANCED = "balanced"


def expected_cash(
    starting: Decimal,
    cash_sales: Decimal,
    expenses: Decimal,
    loan_amount: Decimal,
    tips: Decimal,
) -> Decimal:
    return starting + cash_sales - expenses - loan_amount + tips


def difference(ending_cash: Decimal, expected: Decimal) -> Decimal:
    return ending_cash - expected


def variance_label(diff: Decimal) -> str:
    if diff > 0:
        return SURPLUS
    if diff < 0:
        return SHORTAGE
    return BALANCED


def describe_variance(diff: Decimal, currency_symbol: str = "$") -> str:
    """Human summary for receipts/reports, e.g. "Shortage of $40.00"."""
    label = variance_label(diff)
    if label == BALANCED:
        return "Balanced"
    return f"{label.capitalize()} of {currency_symbol}{abs(diff):,.2f}"
