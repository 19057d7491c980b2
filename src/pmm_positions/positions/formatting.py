"""Fixed-point conversion between raw integer amounts and decimal strings."""

from __future__ import annotations

import re

_DECIMAL_RE = re.compile(r"^(-)?(\d+)(?:\.(\d+))?$")


def format_units(value: int, decimals: int) -> str:
    """Render ``value / 10**decimals`` with exactly ``decimals`` fractional digits.

    Integer arithmetic only, so amounts beyond 64 bits and large ``decimals``
    stay exact. ``format_units(-1500, 3) == "-1.500"``.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("value must be an int")
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ValueError("decimals must be a non-negative int")

    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{fraction:0{decimals}d}"


def parse_units(text: str, decimals: int) -> int:
    """Inverse of ``format_units``; rejects precision beyond ``decimals``."""

    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ValueError("decimals must be a non-negative int")
    match = _DECIMAL_RE.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"not a decimal number: {text!r}")
    negative, whole, fraction = match.groups()
    fraction = fraction or ""
    if len(fraction) > decimals:
        raise ValueError(f"{text!r} has more than {decimals} fractional digits")
    raw = int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    return -raw if negative else raw


__all__ = [
    "format_units",
    "parse_units",
]
