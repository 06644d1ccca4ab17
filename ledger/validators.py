"""Validation helpers shared by the record store and the ledger forms."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from .exceptions import ValidationError

# Amounts may carry at most this many digits on either side of the decimal point.
AMOUNT_DIGITS = 64


def is_blank(value: object) -> bool:
    """True for the values an empty form field produces."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a positive, finite Decimal."""
    if isinstance(raw, Decimal):
        amount = raw
    else:
        try:
            amount = Decimal(str(raw).strip())
        except (InvalidOperation, TypeError) as exc:
            raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount.adjusted() >= AMOUNT_DIGITS or amount.as_tuple().exponent < -AMOUNT_DIGITS:
        raise ValidationError(f"{field} must have at most {AMOUNT_DIGITS} digits on either side of the decimal point")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def parse_date(raw: object, field: str = "date") -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string."""
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise ValidationError(f"{field} must be a date or YYYY-MM-DD string")
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid {field} '{raw}'. Expected format YYYY-MM-DD.") from exc


def parse_optional_date(raw: object, field: str = "date") -> Optional[date]:
    if is_blank(raw):
        return None
    return parse_date(raw, field)
