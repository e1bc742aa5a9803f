# Overview: Turns a physical drawer count into per-denomination subtotals and a total.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Mapping

from ..denominations import DENOMINATIONS, get_denomination


@dataclass(frozen=True)
class CountLine:
    denomination_value: Decimal
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class CashCountResult:
    """
    Aggregated drawer count.

    `quantities` and `subtotals` cover every catalog denomination (zero
    where nothing was counted); `total` is the authoritative amount of cash
    the count represents.
    """
    quantities: dict[Decimal, int]
    subtotals: dict[Decimal, Decimal]
    total: Decimal

    def lines(self) -> Iterator[CountLine]:
        """Non-zero lines in catalog order; these become detail rows."""
        for denomination in DENOMINATIONS:
            quantity = self.quantities[denomination.value]
            if quantity:
                yield CountLine(denomination.value, quantity, self.subtotals[denomination.value])

    def to_dict(self) -> dict:
        return {
            "lines": [
                {
                    "denomination_value": str(line.denomination_value),
                    "quantity": line.quantity,
                    "subtotal": str(line.subtotal),
                }
                for line in self.lines()
            ],
            "total": str(self.total),
        }


def aggregate(counts: Mapping | None) -> CashCountResult:
    """
    Compute subtotal = value x quantity for every catalog denomination.

    Input is assumed validated (see validation.parse_cash_count); a missing
    denomination counts as 0, quantities are coerced to non-negative ints and
    values outside the catalog do not contribute.
    """
    by_value: dict[Decimal, int] = {}
    for raw_value, raw_quantity in (counts or {}).items():
        denomination = get_denomination(raw_value)
        if denomination is None:
            continue
        key = denomination.value
        by_value[key] = by_value.get(key, 0) + max(int(raw_quantity or 0), 0)

    quantities: dict[Decimal, int] = {}
    subtotals: dict[Decimal, Decimal] = {}
    total = Decimal("0.00")
    for denomination in DENOMINATIONS:
        quantity = by_value.get(denomination.value, 0)
        subtotal = denomination.value * quantity
        quantities[denomination.value] = quantity
        subtotals[denomination.value] = subtotal
        total += subtotal

    return CashCountResult(quantities=quantities, subtotals=subtotals, total=total)
