"""Input validation for position queries."""

from __future__ import annotations

from eth_utils import is_address, to_checksum_address

from ..config import PositionsClientConfig
from ..core.errors import PmmValidationError


def normalize_owner(owner: object) -> str:
    if not isinstance(owner, str) or not is_address(owner.strip()):
        raise PmmValidationError(f"Invalid PMM address: {owner}")
    return to_checksum_address(owner.strip())


def validate_chain_id(chain_id: object, config: PositionsClientConfig) -> int:
    if isinstance(chain_id, bool) or not isinstance(chain_id, int):
        raise PmmValidationError(f"Unsupported chain ID: {chain_id}")
    if chain_id not in config.networks:
        supported = ", ".join(str(cid) for cid in config.supported_chain_ids)
        raise PmmValidationError(
            f"Unsupported chain ID: {chain_id}. Supported chains: {supported}"
        )
    return chain_id


def validate_block(block: object) -> int | None:
    if block is None:
        return None
    if isinstance(block, bool) or not isinstance(block, int) or block < 0:
        raise PmmValidationError(f"block must be a non-negative integer or None, got {block!r}")
    return block


__all__ = [
    "normalize_owner",
    "validate_chain_id",
    "validate_block",
]
