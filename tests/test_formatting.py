# tests/test_formatting.py
import pytest

from racikpc.formatting import format_price, to_rupiah


def test_format_price_groups_thousands_with_dots():
    assert format_price(12000000) == "Rp12.000.000"


def test_format_price_zero():
    assert format_price(0) == "Rp0"


def test_format_price_small_amount_has_no_separator():
    assert format_price(950) == "Rp950"


def test_format_price_rounds_fraction():
    assert format_price(1499.6) == "Rp1.500"


def test_format_price_rounds_half_up():
    assert format_price(2.5) == "Rp3"
    assert format_price("1499.5") == "Rp1.500"


def test_format_price_accepts_numeric_string():
    assert format_price("11500000") == "Rp11.500.000"


def test_format_price_non_numeric_returned_as_is():
    assert format_price("N/A") == "N/A"


def test_to_rupiah_half_up_instead_of_bankers_rounding():
    assert to_rupiah(0.5) == 1
    assert to_rupiah(3.5) == 4
    assert to_rupiah("-2.5") == -3


def test_to_rupiah_rejects_non_numeric():
    with pytest.raises(ValueError):
        to_rupiah("abc")
