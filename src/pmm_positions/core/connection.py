"""Per-chain connections and their process-scoped pool."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from eth_utils import decode_hex, encode_hex

from ..config import NetworkConfig, PositionsClientConfig
from .async_transport import AsyncRpcTransport
from .errors import PmmConnectivityError, PmmError, PmmProtocolError

logger = logging.getLogger("pmm_positions")

TransportFactory = Callable[[NetworkConfig], AsyncRpcTransport]


def block_tag(block: int | None) -> str:
    return "latest" if block is None else hex(block)


def _parse_quantity(value: object, *, name: str) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise PmmProtocolError(f"{name} result must be a 0x-prefixed hex quantity")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise PmmProtocolError(f"{name} result is not valid hex") from exc


class AsyncConnection:
    """One logical, read-only connection to a chain's RPC endpoint."""

    def __init__(self, network: NetworkConfig, transport: AsyncRpcTransport) -> None:
        self.network = network
        self._transport = transport

    @property
    def chain_id(self) -> int:
        return self.network.chain_id

    async def block_number(self) -> int:
        result = await self._transport.request("eth_blockNumber", [])
        return _parse_quantity(result, name="eth_blockNumber")

    async def remote_chain_id(self) -> int:
        result = await self._transport.request("eth_chainId", [])
        return _parse_quantity(result, name="eth_chainId")

    async def call(self, target: str, data: bytes, block: int | None = None) -> bytes:
        """Run one ``eth_call`` against ``block`` (or latest) and return raw bytes."""

        result = await self._transport.request(
            "eth_call",
            [{"to": target, "data": encode_hex(data)}, block_tag(block)],
        )
        if not isinstance(result, str) or not result.startswith("0x"):
            raise PmmProtocolError("eth_call result must be 0x-prefixed hex")
        try:
            return decode_hex(result)
        except ValueError as exc:
            raise PmmProtocolError("eth_call result is not valid hex") from exc

    async def close(self) -> None:
        await self._transport.close()


class AsyncConnectionPool:
    """Memoizes one connection per chain id, probing liveness on first use.

    Connections live until ``close()``; a failed probe memoizes nothing so the
    next ``connect`` call tries again.
    """

    def __init__(
        self,
        config: PositionsClientConfig,
        *,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        self._config = config
        self._transport_factory = transport_factory or self._default_transport
        self._connections: dict[int, AsyncConnection] = {}
        self._lock = asyncio.Lock()

    def _default_transport(self, network: NetworkConfig) -> AsyncRpcTransport:
        return AsyncRpcTransport(network.rpc_url, self._config)

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._connections

    async def connect(self, chain_id: int) -> AsyncConnection:
        cached = self._connections.get(chain_id)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._connections.get(chain_id)
            if cached is not None:
                return cached

            network = self._config.network(chain_id)
            connection = AsyncConnection(network, self._transport_factory(network))
            try:
                block = await asyncio.wait_for(
                    connection.block_number(),
                    timeout=self._config.probe_timeout_seconds,
                )
            except (asyncio.TimeoutError, PmmError) as exc:
                await connection.close()
                logger.error(
                    "connect failed chain_id=%s name=%s error=%s",
                    chain_id,
                    network.name,
                    exc.__class__.__name__,
                )
                raise PmmConnectivityError(
                    f"Failed to connect to {network.name} (chain {chain_id})",
                    cause="probe_timeout" if isinstance(exc, asyncio.TimeoutError) else "probe",
                ) from exc
            except BaseException:
                # Not pooled yet, so nothing else will ever close it.
                await connection.close()
                raise

            logger.info(
                "connected chain_id=%s name=%s block=%s",
                chain_id,
                network.name,
                block,
            )
            self._connections[chain_id] = connection
            return connection

    async def close(self) -> None:
        async with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            await connection.close()


__all__ = [
    "TransportFactory",
    "block_tag",
    "AsyncConnection",
    "AsyncConnectionPool",
]
