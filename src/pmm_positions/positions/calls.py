"""Call builders for the metadata and position stages."""

from __future__ import annotations

from collections.abc import Sequence

from eth_utils import to_checksum_address

from ..core.abi import NATIVE_LP_TOKEN_ABI
from ..core.codec import ContractInterface, encode_call
from ..core.models import Call
from ..core.scanner import CREDIT_VAULT

NATIVE_LP_TOKEN = ContractInterface(NATIVE_LP_TOKEN_ABI)

# underlying(), decimals(), symbol() per LP token, in this order.
METADATA_FUNCTIONS: tuple[str, ...] = ("underlying", "decimals", "symbol")
CALLS_PER_LP_TOKEN = len(METADATA_FUNCTIONS)


def build_metadata_calls(lp_tokens: Sequence[str]) -> list[Call]:
    calls: list[Call] = []
    for lp_token in lp_tokens:
        target = to_checksum_address(lp_token)
        for fn_name in METADATA_FUNCTIONS:
            calls.append(Call(target=target, data=encode_call(NATIVE_LP_TOKEN, fn_name)))
    return calls


def build_position_calls(
    credit_vault: str,
    owner: str,
    tokens: Sequence[str],
) -> list[Call]:
    vault = to_checksum_address(credit_vault)
    trader = to_checksum_address(owner)
    return [
        Call(
            target=vault,
            data=encode_call(CREDIT_VAULT, "positions", [trader, to_checksum_address(token)]),
        )
        for token in tokens
    ]


__all__ = [
    "NATIVE_LP_TOKEN",
    "METADATA_FUNCTIONS",
    "CALLS_PER_LP_TOKEN",
    "build_metadata_calls",
    "build_position_calls",
]
