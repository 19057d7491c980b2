"""Position service package."""

from .formatting import format_units, parse_units
from .models import (
    LpTokenMetadata,
    NetworkInfo,
    PositionEntry,
    PositionReport,
    PositionResult,
    PositionSummary,
)

__all__ = [
    "LpTokenMetadata",
    "NetworkInfo",
    "PositionEntry",
    "PositionReport",
    "PositionResult",
    "PositionSummary",
    "format_units",
    "parse_units",
]
