from __future__ import annotations

import pytest
from eth_abi import encode as abi_encode

from pmm_positions.config import ZERO_ADDRESS, BatchConfig
from pmm_positions.core.models import CallResult
from pmm_positions.positions.async_pipeline import join_positions, metadata_from_results
from pmm_positions.positions.models import LpTokenMetadata, PositionResult
from tests.shared.fake_chain import addr

LP = addr(0x1000)
UNDERLYING = addr(0x2000)


def _ok(types: list[str], values: list[object]) -> CallResult:
    return CallResult(success=True, data=abi_encode(types, values))


def _metadata_results(underlying: str = UNDERLYING) -> list[CallResult]:
    return [
        _ok(["address"], [underlying]),
        _ok(["uint8"], [6]),
        _ok(["string"], ["USDC"]),
    ]


def test_metadata_from_successful_results():
    metadata = metadata_from_results(LP, _metadata_results(), BatchConfig())
    assert metadata == LpTokenMetadata(
        lp_token=LP,
        underlying=UNDERLYING,
        decimals=6,
        symbol="USDC",
        is_lp_token=True,
    )


@pytest.mark.parametrize("failed_index", [0, 1, 2])
def test_any_failed_metadata_call_falls_back_to_lp_token(failed_index):
    results = _metadata_results()
    results[failed_index] = CallResult.failed()
    metadata = metadata_from_results(LP, results, BatchConfig())
    assert metadata.underlying == LP
    assert (metadata.decimals, metadata.symbol, metadata.is_lp_token) == (18, "LP", False)


def test_undecodable_metadata_falls_back():
    results = _metadata_results()
    results[2] = CallResult(success=True, data=b"\x00")
    metadata = metadata_from_results(LP, results, BatchConfig())
    assert metadata.is_lp_token is False


def test_zero_underlying_falls_back():
    metadata = metadata_from_results(LP, _metadata_results(ZERO_ADDRESS), BatchConfig())
    assert metadata.underlying == LP
    assert metadata.is_lp_token is False


def test_fallback_uses_configured_defaults():
    batch = BatchConfig(fallback_decimals=8, fallback_symbol="???")
    metadata = metadata_from_results(LP, [CallResult.failed()] * 3, batch)
    assert (metadata.decimals, metadata.symbol) == (8, "???")


def test_join_positions_keeps_only_successful_non_zero_entries():
    metadata = [
        LpTokenMetadata(addr(0x1000), addr(0x2000), 6, "A", True),
        LpTokenMetadata(addr(0x1001), addr(0x1001), 18, "LP", False),
        LpTokenMetadata(addr(0x1002), addr(0x2002), 18, "C", True),
        LpTokenMetadata(addr(0x1003), addr(0x2003), 2, "D", True),
    ]
    results = [
        PositionResult(addr(0x2000), 1_500_000, True),
        PositionResult(addr(0x1001), -3 * 10**18, True),
        PositionResult(addr(0x2002), 0, True),
        PositionResult(addr(0x2003), 0, False, error="call failed"),
    ]
    entries = join_positions(metadata, results)
    assert [entry.token_address for entry in entries] == [addr(0x2000), addr(0x1001)]
    assert entries[0].position_formatted == "1.500000"
    assert entries[0].lp_token_address == addr(0x1000)
    assert entries[1].lp_token_address is None
    assert entries[1].position_formatted == "-3.000000000000000000"


def test_join_positions_rejects_misaligned_inputs():
    metadata = [LpTokenMetadata(LP, UNDERLYING, 6, "A", True)]
    with pytest.raises(RuntimeError, match="misaligned"):
        join_positions(metadata, [])
