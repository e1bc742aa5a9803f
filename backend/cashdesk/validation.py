# Overview: Typed error kinds and input parsing for cash counts and close-out amounts.

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .denominations import CENT, get_denomination

# Maximum accepted amount: 9,999,999,999.99 (fits Numeric(12, 2))
MAX_AMOUNT = Decimal("9999999999.99")

# A single denomination line above this is almost certainly a typo
MAX_QUANTITY = 1_000_000

_PLAIN_INTEGER = re.compile(r"[+-]?[0-9]+")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (a cash session is already open)."""


class NotFoundError(LookupError):
    """404-level: the referenced session does not exist in the required state."""


class SessionNotOpenError(NotFoundError):
    """The session exists but has already been closed."""


class PersistenceError(RuntimeError):
    """The enclosing transaction failed and was rolled back."""


def parse_quantity(raw: Any, field: str) -> int:
    """
    Strict non-negative integer parsing for a counted quantity.

    Missing/blank means "none counted" (0). Floats, booleans and scientific
    notation are rejected so a mistyped count never silently truncates.
    """
    if raw is None:
        return 0

    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be an integer")

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        stripped = raw.strip()
        if not stripped:
            return 0
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        if not _PLAIN_INTEGER.fullmatch(stripped):
            raise ValidationError(f"{field} must be a plain integer")
        value = int(stripped)
    elif isinstance(raw, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if value < 0:
        raise ValidationError(f"{field} cannot be negative")
    if value > MAX_QUANTITY:
        raise ValidationError(f"{field} cannot exceed {MAX_QUANTITY}")
    return value


def parse_cash_count(payload: Any) -> dict[Decimal, int]:
    """
    Validate a {denomination value: quantity} mapping from a count form.

    Keys may be numbers or strings ("500", "0.50", 0.5). Unknown
    denominations are rejected; denominations left out are simply absent
    (the aggregator treats them as 0).
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("counts must be an object mapping denomination value to quantity")

    counts: dict[Decimal, int] = {}
    for key, raw in payload.items():
        denomination = get_denomination(key)
        if denomination is None:
            raise ValidationError(f"Unknown denomination: {key}")
        quantity = parse_quantity(raw, f"quantity for {denomination.label}")
        counts[denomination.value] = counts.get(denomination.value, 0) + quantity
    return counts


def parse_amount(raw: Any, field: str, *, default: Decimal | None = Decimal("0.00")) -> Decimal | None:
    """Parse a non-negative money amount; None/blank returns `default`."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default

    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a number")

    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")

    if not value.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if value < 0:
        raise ValidationError(f"{field} cannot be negative")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT:,}")
    return value.quantize(CENT)


def parse_text(raw: Any, field: str, *, max_length: int) -> str | None:
    """Optional free text; blank collapses to None."""
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"{field} must be a string")
    text = raw.strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text
