"""Sequential enumeration of the CreditVault ``allLPTokens`` array."""

from __future__ import annotations

import logging

from eth_utils import to_checksum_address

from ..config import ZERO_ADDRESS
from .abi import CREDIT_VAULT_ABI
from .codec import ContractInterface, decode_output, encode_call
from .connection import AsyncConnection
from .errors import PmmConnectivityError, PmmDiscoveryError, PmmError, PmmRpcError

logger = logging.getLogger("pmm_positions")

CREDIT_VAULT = ContractInterface(CREDIT_VAULT_ABI)

DEFAULT_SAFETY_CAP = 1000


async def scan_lp_tokens(
    connection: AsyncConnection,
    registry: str,
    *,
    block: int | None = None,
    safety_cap: int = DEFAULT_SAFETY_CAP,
) -> list[str]:
    """Read ``allLPTokens(i)`` for i = 0, 1, ... until the array ends.

    The array has no length accessor, so the end is detected one index at a
    time: a zero address or a reverted read ends the scan. Reaching
    ``safety_cap`` ends it too. Connectivity errors propagate; any other
    failure raises ``PmmDiscoveryError``.
    """

    if safety_cap < 1:
        raise ValueError("safety_cap must be >= 1")

    registry = to_checksum_address(registry)
    tokens: list[str] = []
    seen: set[str] = set()
    index = 0

    while True:
        if index >= safety_cap:
            logger.warning(
                "lp token scan reached safety cap registry=%s cap=%s",
                registry,
                safety_cap,
            )
            break

        try:
            raw = await connection.call(
                registry,
                encode_call(CREDIT_VAULT, "allLPTokens", [index]),
                block,
            )
            address = decode_output(CREDIT_VAULT, "allLPTokens", raw)
        except PmmConnectivityError:
            raise
        except PmmRpcError as exc:
            if exc.is_revert:
                logger.debug("lp token scan reached end of array index=%s", index)
                break
            raise PmmDiscoveryError(
                f"LP token lookup failed at index {index}: {exc}",
                code=exc.code,
                cause=exc.cause,
            ) from exc
        except PmmError as exc:
            raise PmmDiscoveryError(
                f"LP token lookup failed at index {index}: {exc}",
                cause=exc.cause,
            ) from exc

        if str(address).lower() == ZERO_ADDRESS:
            logger.debug("lp token scan hit zero address index=%s", index)
            break

        if address in seen:
            logger.warning("lp token listed twice index=%s address=%s", index, address)
        else:
            seen.add(str(address))
            tokens.append(str(address))
            logger.debug("lp token discovered index=%s address=%s", index, address)
        index += 1

    logger.info("lp token scan completed registry=%s tokens=%s", registry, len(tokens))
    return tokens


__all__ = [
    "CREDIT_VAULT",
    "DEFAULT_SAFETY_CAP",
    "scan_lp_tokens",
]
