"""Price parsing and inversion helpers.

Upstream feeds send prices as JSON numbers, numeric strings, empty strings or
null. Everything is read into ``Decimal`` so values never pass through binary
floating point. Inverted prices are computed to ``INVERSION_PRECISION``
significant digits with banker's rounding, which keeps repeated runs on the
same input byte-identical.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Any

from exrates.errors import InvalidPriceError

INVERSION_PRECISION = 16


def parse_price(value: Any) -> Decimal | None:
    """Read a loosely typed price field.

    Returns:
        None when the field is absent (null, empty or blank string),
        otherwise the value as a finite Decimal.

    Raises:
        InvalidPriceError: If the value is present but not a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidPriceError(f"Invalid price: {value!r}")

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation as e:
            raise InvalidPriceError(f"Invalid price: {value!r}") from e
    else:
        raise InvalidPriceError(f"Invalid price: {value!r}")

    if not parsed.is_finite():
        raise InvalidPriceError(f"Invalid price: {value!r}")
    return parsed


def format_decimal(value: Decimal) -> str:
    """Format a Decimal in plain notation with trailing zeros stripped."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def invert_and_format(price: Any) -> str:
    """Convert a base-per-unit price into a unit-per-base price string.

    An absent price stays absent (``""``) and zero stays ``"0"``.
    """
    value = parse_price(price)
    if value is None:
        return ""
    if value == 0:
        return "0"

    with localcontext() as ctx:
        ctx.prec = INVERSION_PRECISION
        ctx.rounding = ROUND_HALF_EVEN
        inverted = Decimal(1) / value

    return format_decimal(inverted)
