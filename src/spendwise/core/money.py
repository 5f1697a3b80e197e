"""Conversion between API decimal amounts and stored minor units.

Amounts are persisted as integers in the currency's minor unit (cents for
USD) so balances add up exactly. The API exchanges ``Decimal`` values.
"""

from decimal import Decimal, InvalidOperation

from spendwise.config import settings
from spendwise.core.exceptions import InvalidSpecError

# Amounts and balances live in signed 64-bit columns.
MAX_MINOR_UNITS = 2**63 - 1


def to_minor_units(amount: Decimal | int | str, minor_unit: int | None = None) -> int:
    """Convert a decimal amount into integer minor units.

    Args:
        amount: Amount in major units (e.g. Decimal("42.50"))
        minor_unit: Decimal places of the currency (defaults to settings)

    Returns:
        Amount in minor units (e.g. 4250)

    Raises:
        InvalidSpecError: If the amount is not a finite number or carries more
            decimal places than the currency allows, or does not fit
            the storage range
    """
    places = settings.currency_minor_unit if minor_unit is None else minor_unit
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise InvalidSpecError(details={"field": "amount", "value": str(amount)}) from e

    if not value.is_finite():
        raise InvalidSpecError(details={"field": "amount", "value": str(amount)})

    scaled = value.scaleb(places)
    if scaled != scaled.to_integral_value():
        raise InvalidSpecError(
            details={"field": "amount", "reason": f"more than {places} decimal places"}
        )
    minor = int(scaled)
    if abs(minor) > MAX_MINOR_UNITS:
        raise InvalidSpecError(details={"field": "amount", "reason": "out of range"})
    return minor


def from_minor_units(amount: int, minor_unit: int | None = None) -> Decimal:
    """Convert integer minor units back into a Decimal amount."""
    places = settings.currency_minor_unit if minor_unit is None else minor_unit
    return Decimal(amount).scaleb(-places).quantize(Decimal(1).scaleb(-places))
