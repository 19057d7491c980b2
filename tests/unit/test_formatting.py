from __future__ import annotations

import pytest

from pmm_positions.positions import format_units, parse_units


@pytest.mark.parametrize(
    ("value", "decimals", "expected"),
    [
        (1_500_000, 6, "1.500000"),
        (-1500, 3, "-1.500"),
        (42, 18, "0.000000000000000042"),
        (7, 0, "7"),
        (0, 2, "0.00"),
        (2**255 - 1, 18, "57896044618658097711785492504343953926634992332820282019728.792003956564819967"),
    ],
)
def test_format_units(value, decimals, expected):
    assert format_units(value, decimals) == expected


def test_format_units_is_exact_for_wide_decimals():
    assert format_units(10**40 + 1, 36) == "10000.000000000000000000000000000000000001"


def test_format_units_rejects_non_int_value():
    with pytest.raises(TypeError):
        format_units(1.5, 6)  # type: ignore[arg-type]


def test_format_units_rejects_negative_decimals():
    with pytest.raises(ValueError):
        format_units(1, -1)


def test_parse_units_inverts_format_units():
    for value, decimals in ((1_500_000, 6), (-1500, 3), (42, 18), (7, 0)):
        assert parse_units(format_units(value, decimals), decimals) == value


def test_parse_units_pads_short_fraction():
    assert parse_units("1.5", 6) == 1_500_000


@pytest.mark.parametrize("text", ["", "abc", "1.", ".5", "1.0000001"])
def test_parse_units_rejects_invalid_text(text):
    with pytest.raises(ValueError):
        parse_units(text, 6)


@pytest.mark.parametrize(
    ("text", "decimals"),
    [("-1.500", 3), ("0.000042", 6), ("123456789012345678901234567890.5", 1), ("9", 0)],
)
def test_format_units_inverts_parse_units(text, decimals):
    assert format_units(parse_units(text, decimals), decimals) == text
