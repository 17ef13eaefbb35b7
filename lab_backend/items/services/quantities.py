# items/services/quantities.py

"""
Quantity normalizers.

HARD RULE: quantities are whole integer units in this system.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError


def to_int_qty(value, *, field: str = "quantity") -> int:
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise ValidationError({field: f"{field} must be a whole integer unit"})

    if isinstance(value, int):
        return value

    if isinstance(value, float) and value.is_integer():
        return int(value)

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)

    raise ValidationError({field: f"{field} must be a whole integer unit"})


def require_positive_qty(value, *, field: str = "quantity") -> int:
    qty = to_int_qty(value, field=field)
    if qty <= 0:
        raise ValidationError({field: f"{field} must be greater than zero"})
    return qty


def clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()
