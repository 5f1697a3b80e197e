"""Unit tests for decimal <-> minor unit conversion."""

from decimal import Decimal

import pytest

from spendwise.core.exceptions import InvalidSpecError
from spendwise.core.money import MAX_MINOR_UNITS, from_minor_units, to_minor_units


class TestToMinorUnits:
    def test_decimal_amount(self):
        assert to_minor_units(Decimal("42.50")) == 4250

    def test_integer_and_string_amounts(self):
        assert to_minor_units(100) == 10000
        assert to_minor_units("0.01") == 1

    def test_negative_amount_keeps_sign(self):
        assert to_minor_units(Decimal("-5")) == -500

    def test_custom_minor_unit(self):
        assert to_minor_units(Decimal("12"), minor_unit=0) == 12
        with pytest.raises(InvalidSpecError):
            to_minor_units(Decimal("1.5"), minor_unit=0)

    def test_too_many_decimal_places_rejected(self):
        with pytest.raises(InvalidSpecError):
            to_minor_units(Decimal("1.005"))

    def test_storage_range_boundary(self):
        assert to_minor_units(Decimal("92233720368547758.07")) == MAX_MINOR_UNITS
        with pytest.raises(InvalidSpecError):
            to_minor_units(Decimal("92233720368547758.08"))
        with pytest.raises(InvalidSpecError):
            to_minor_units("100000000000000000000")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(InvalidSpecError):
            to_minor_units(value)


class TestFromMinorUnits:
    def test_round_trip_value(self):
        assert from_minor_units(5750) == Decimal("57.50")

    def test_negative_balance(self):
        assert from_minor_units(-4250) == Decimal("-42.50")

    def test_keeps_currency_precision(self):
        assert str(from_minor_units(100)) == "1.00"
