"""
Small shared helpers: decimal coercion and UTC timestamps.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .faults import ValidationFault


def as_decimal(value: Any, *, field: str = "amount") -> Decimal:
    """
    Coerce *value* to Decimal without going through binary floats.

    Floats are converted via ``str()`` so ``19.99`` stays ``Decimal("19.99")``.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValidationFault(f"'{field}' must be a number", field=field)
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValidationFault(f"'{field}' must be a number", field=field) from None
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValidationFault(f"'{field}' must be a number", field=field)

    if not result.is_finite():
        raise ValidationFault(f"'{field}' must be finite", field=field)
    return result


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
