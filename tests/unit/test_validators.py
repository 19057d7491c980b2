from __future__ import annotations

import pytest

from pmm_positions.core.errors import PmmValidationError
from pmm_positions.positions.validators import normalize_owner, validate_block, validate_chain_id
from tests.shared.fake_chain import OWNER
from tests.shared.transport import build_config


def test_normalize_owner_checksums_lowercase_input():
    assert normalize_owner(f"  {OWNER.lower()} ") == OWNER


@pytest.mark.parametrize("owner", ["", "0x1234", "not-an-address", None, 12345])
def test_normalize_owner_rejects_invalid_input(owner):
    with pytest.raises(PmmValidationError, match="Invalid PMM address"):
        normalize_owner(owner)


def test_validate_chain_id_accepts_configured_chain():
    assert validate_chain_id(1, build_config()) == 1


@pytest.mark.parametrize("chain_id", [10, True, "1", None])
def test_validate_chain_id_rejects_unsupported_chain(chain_id):
    with pytest.raises(PmmValidationError, match="Unsupported chain ID"):
        validate_chain_id(chain_id, build_config())


def test_validate_block_accepts_latest_and_numbers():
    assert validate_block(None) is None
    assert validate_block(0) == 0
    assert validate_block(19_000_000) == 19_000_000


@pytest.mark.parametrize("block", [-1, 1.5, "latest", False])
def test_validate_block_rejects_invalid_values(block):
    with pytest.raises(PmmValidationError):
        validate_block(block)
