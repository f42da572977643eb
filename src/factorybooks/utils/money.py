"""Currency rounding helpers."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Coerce ``value`` to Decimal without going through float.

    Raises:
        ValueError: If value is not numeric (bools, NaN and infinities included)
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Amount must be numeric (got {value!r})")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"Amount must be numeric (got {value!r})") from e
    if not result.is_finite():
        raise ValueError(f"Amount must be finite (got {value!r})")
    return result


def round_currency(value) -> Decimal:
    """Round to cents, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
