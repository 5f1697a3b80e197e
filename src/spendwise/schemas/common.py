"""Shared schema pieces: money representation and pagination."""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

from spendwise.core.money import from_minor_units


def _minor_to_decimal(value):
    # Stored amounts are integer minor units; anything else is already major units.
    if isinstance(value, int) and not isinstance(value, bool):
        return from_minor_units(value)
    return value


# Amount read from the database (minor units) and exposed as a decimal.
StoredAmount = Annotated[Decimal, BeforeValidator(_minor_to_decimal)]


class MoneyMeta(BaseModel):
    """Metadata describing how monetary amounts are represented."""

    currency: str = Field(description="ISO currency code (e.g., USD)")
    minor_unit: int = Field(
        description="Number of decimal places for the currency (e.g., 2 for cents)"
    )


class PaginationMeta(BaseModel):
    """Offset pagination metadata for list responses."""

    limit: int = Field(description="Maximum number of items returned")
    offset: int = Field(description="Number of items skipped")
    count: int = Field(description="Number of items in this page")
