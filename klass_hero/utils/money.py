"""
Money helpers.

Amounts are Decimal end to end; floats are converted through their string
form and results are rounded half-up to cents.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from klass_hero.core.exceptions import ValidationError

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest amount a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce a money-like value to Decimal without passing through float."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", field_errors={field: ["must be a number"]})
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(
                f"{field} must be a number",
                field_errors={field: ["must be a number"]},
            ) from e

    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field_errors={field: ["must be finite"]})
    if abs(result) > MAX_AMOUNT:
        raise ValidationError(
            f"{field} must not exceed {MAX_AMOUNT}",
            field_errors={field: [f"must not exceed {MAX_AMOUNT}"]},
        )
    return result


def round2(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Render an amount with exactly two fractional digits."""
    return str(round2(value))
