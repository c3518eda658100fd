"""Money parsing shared by project budgets and bid amounts."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from marketplace.errors import ValidationError


def positive_amount(value: Any, field_name: str) -> Decimal:
    """Coerce value to a positive, finite Decimal.

    Raises ValidationError for booleans, non-numeric input, NaN,
    infinities, zero and negatives.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be numeric, got {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be > 0, got {value!r}")
    return amount
