# Overview: Static catalog of bills and coins used to structure a physical cash count.

"""
Denomination Catalog

Every drawer count (opening float, closing count) is expressed as a
quantity per catalog entry. The catalog is immutable and defined at import
time. It is kept sorted by value, largest first, purely for display; totals
never depend on the order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

BILL = "bill"
COIN = "coin"

CENT = Decimal("0.01")

DenominationValue = Union[Decimal, int, float, str]


def normalize_value(value: DenominationValue) -> Decimal:
    """
    Canonical Decimal key for a denomination value.

    Floats go through str() so 0.5 becomes Decimal("0.50") rather than the
    binary approximation. Raises ValueError for non-numeric
    input and for values finer than a cent.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid denomination value: {value!r}")
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not dec.is_finite():
            raise ValueError(f"Invalid denomination value: {value!r}")
        quantized = dec.quantize(CENT)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid denomination value: {value!r}") from exc
    if quantized != dec:
        raise ValueError(f"Denomination value has sub-cent digits: {value!r}")
    return quantized


@dataclass(frozen=True)
class Denomination:
    value: Decimal
    label: str
    kind: str  # bill | coin

    def to_dict(self) -> dict:
        return {
            "value": str(self.value),
            "label": self.label,
            "kind": self.kind,
        }


def _entry(value: str, kind: str) -> Denomination:
    amount = normalize_value(value)
    label = f"${amount:.2f}" if amount != amount.to_integral_value() else f"${int(amount)}"
    return Denomination(value=amount, label=label, kind=kind)


DENOMINATIONS: tuple[Denomination, ...] = tuple(
    sorted(
        (
            _entry("500", BILL),
            _entry("200", BILL),
            _entry("100", BILL),
            _entry("50", BILL),
            _entry("20", BILL),
            _entry("10", COIN),
            _entry("5", COIN),
            _entry("2", COIN),
            _entry("1", COIN),
            _entry("0.50", COIN),
        ),
        key=lambda d: d.value,
        reverse=True,
    )
)

_BY_VALUE = {d.value: d for d in DENOMINATIONS}


def get_denomination(value: DenominationValue) -> Denomination | None:
    """Catalog entry for a value, or None if the value is not a known bill/coin."""
    try:
        return _BY_VALUE.get(normalize_value(value))
    except ValueError:
        return None
