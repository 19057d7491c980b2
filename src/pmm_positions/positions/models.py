"""Position domain and report models."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import NativeCurrency


@dataclass(slots=True, frozen=True)
class LpTokenMetadata:
    """Resolved view of one LP token.

    When resolution fails or the LP token reports no underlying, ``underlying``
    is the LP token itself and ``is_lp_token`` is False.
    """

    lp_token: str
    underlying: str
    decimals: int
    symbol: str
    is_lp_token: bool


@dataclass(slots=True, frozen=True)
class PositionResult:
    token: str
    position: int
    success: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class PositionEntry:
    token_address: str
    token_symbol: str
    lp_token_address: str | None
    position: int
    position_formatted: str
    decimals: int

    def to_dict(self) -> dict[str, object]:
        return {
            "tokenAddress": self.token_address,
            "tokenSymbol": self.token_symbol,
            "lpTokenAddress": self.lp_token_address,
            "position": str(self.position),
            "positionFormatted": self.position_formatted,
            "decimals": self.decimals,
        }


@dataclass(slots=True, frozen=True)
class PositionSummary:
    total_tokens: int
    tokens_with_positions: int
    elapsed_seconds: float

    def to_dict(self) -> dict[str, object]:
        return {
            "totalTokens": self.total_tokens,
            "tokensWithPositions": self.tokens_with_positions,
            "fetchTime": int(round(self.elapsed_seconds * 1000)),
        }


@dataclass(slots=True, frozen=True)
class PositionReport:
    chain_id: int
    chain_name: str
    owner: str
    block: int | None
    positions: tuple[PositionEntry, ...] | list[PositionEntry]
    summary: PositionSummary

    def __post_init__(self) -> None:
        if isinstance(self.positions, tuple):
            return
        object.__setattr__(self, "positions", tuple(self.positions))

    def to_dict(self) -> dict[str, object]:
        return {
            "chainId": self.chain_id,
            "chainName": self.chain_name,
            "pmmAddress": self.owner,
            "targetBlock": "latest" if self.block is None else self.block,
            "positions": [entry.to_dict() for entry in self.positions],
            "summary": self.summary.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class NetworkInfo:
    chain_id: int
    name: str
    block_number: int
    rpc_url: str
    native_currency: NativeCurrency
    explorer_url: str | None = None


__all__ = [
    "LpTokenMetadata",
    "PositionResult",
    "PositionEntry",
    "PositionSummary",
    "PositionReport",
    "NetworkInfo",
]
