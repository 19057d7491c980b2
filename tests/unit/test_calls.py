from __future__ import annotations

import pytest

from pmm_positions.core.batch import chunk_calls
from pmm_positions.core.codec import decode_arguments
from pmm_positions.core.models import Call
from pmm_positions.core.scanner import CREDIT_VAULT
from pmm_positions.positions.calls import (
    CALLS_PER_LP_TOKEN,
    NATIVE_LP_TOKEN,
    build_metadata_calls,
    build_position_calls,
)
from tests.shared.fake_chain import OWNER, VAULT, addr


def test_metadata_calls_are_grouped_per_lp_token_in_fixed_order():
    lp_tokens = [addr(0x1000), addr(0x1001)]
    calls = build_metadata_calls([token.lower() for token in lp_tokens])
    assert len(calls) == len(lp_tokens) * CALLS_PER_LP_TOKEN
    assert [call.target for call in calls] == [lp_tokens[0]] * 3 + [lp_tokens[1]] * 3
    names = [decode_arguments(NATIVE_LP_TOKEN, call.data)[0].name for call in calls]
    assert names == ["underlying", "decimals", "symbol"] * 2


def test_position_calls_target_the_registry_with_owner_and_token():
    tokens = [addr(0x2000), addr(0x2001)]
    calls = build_position_calls(VAULT.lower(), OWNER, tokens)
    assert all(call.target == VAULT for call in calls)
    assert [decode_arguments(CREDIT_VAULT, call.data)[1] for call in calls] == [
        (OWNER, tokens[0]),
        (OWNER, tokens[1]),
    ]


def test_chunk_calls_splits_into_bounded_groups():
    calls = [Call(target=addr(i), data=b"") for i in range(7)]
    chunks = chunk_calls(calls, chunk_size=3)
    assert [len(chunk) for chunk in chunks] == [3, 3, 1]
    assert [call for chunk in chunks for call in chunk] == calls


def test_chunk_calls_of_empty_input_is_empty():
    assert chunk_calls([], chunk_size=5) == ()


def test_chunk_calls_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunk_calls([], chunk_size=0)
