"""Client configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from eth_utils import is_hex_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")


@dataclass(slots=True, frozen=True)
class RetryConfig:
    """Retry-related settings for single RPC requests."""

    max_attempts: int = 3
    max_backoff_seconds: float = 8.0
    total_retry_budget_seconds: float = 60.0

    def validate(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("retry.max_attempts must be >= 1")
        if self.max_backoff_seconds < 0:
            raise ValueError("retry.max_backoff_seconds must be >= 0")
        if self.total_retry_budget_seconds < 0:
            raise ValueError("retry.total_retry_budget_seconds must be >= 0")


@dataclass(slots=True, frozen=True)
class ThrottlingConfig:
    """Throttling-related settings."""

    min_wait_interval_seconds: float = 0.0

    def validate(self) -> None:
        if self.min_wait_interval_seconds < 0:
            raise ValueError("throttling.min_wait_interval_seconds must be >= 0")


@dataclass(slots=True, frozen=True)
class BatchConfig:
    """Multicall batching and fallback settings.

    Batch sizes are counted in LP tokens, not calls: metadata resolution issues
    three calls per token, position lookup one.
    """

    metadata_batch_size: int = 10
    position_batch_size: int = 20
    max_call_retries: int = 1
    scan_safety_cap: int = 1000
    fallback_decimals: int = 18
    fallback_symbol: str = "LP"

    def validate(self) -> None:
        if self.metadata_batch_size < 1:
            raise ValueError("batch.metadata_batch_size must be >= 1")
        if self.position_batch_size < 1:
            raise ValueError("batch.position_batch_size must be >= 1")
        if self.max_call_retries < 0:
            raise ValueError("batch.max_call_retries must be >= 0")
        if self.scan_safety_cap < 1:
            raise ValueError("batch.scan_safety_cap must be >= 1")
        if not 0 <= self.fallback_decimals <= 255:
            raise ValueError("batch.fallback_decimals must be within 0..255")


@dataclass(slots=True, frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(slots=True, frozen=True)
class NetworkConfig:
    """Per-chain endpoint and contract addresses."""

    chain_id: int
    name: str
    rpc_url: str
    credit_vault_address: str
    multicall3_address: str = MULTICALL3_ADDRESS
    explorer_url: str | None = None
    native_currency: NativeCurrency = field(
        default_factory=lambda: NativeCurrency(name="Ether", symbol="ETH")
    )

    def validate(self) -> None:
        prefix = f"networks[{self.chain_id}]"
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int) or self.chain_id < 1:
            raise ValueError(f"{prefix}.chain_id must be a positive integer")
        if not self.rpc_url:
            raise ValueError(f"{prefix}.rpc_url must not be empty")
        for field_name in ("credit_vault_address", "multicall3_address"):
            value = getattr(self, field_name)
            if not is_hex_address(value):
                raise ValueError(f"{prefix}.{field_name} is not a valid address")
            if value.lower() == ZERO_ADDRESS:
                raise ValueError(f"{prefix}.{field_name} is not configured")


DEFAULT_NETWORKS: Mapping[int, NetworkConfig] = {
    1: NetworkConfig(
        chain_id=1,
        name="Ethereum",
        rpc_url="https://eth.llamarpc.com",
        credit_vault_address="0xe3D41d19564922C9952f692C5Dd0563030f5f2EF",
        explorer_url="https://etherscan.io",
    ),
    56: NetworkConfig(
        chain_id=56,
        name="BSC",
        rpc_url="https://bsc.llamarpc.com",
        credit_vault_address="0xBA8dB0CAf781cAc69b6acf6C848aC148264Cc05d",
        explorer_url="https://bscscan.com",
        native_currency=NativeCurrency(name="BNB", symbol="BNB"),
    ),
    42161: NetworkConfig(
        chain_id=42161,
        name="Arbitrum",
        rpc_url="https://arbitrum.gateway.tenderly.co",
        credit_vault_address="0xbA1cf8A63227b46575AF823BEB4d83D1025eff09",
        explorer_url="https://arbiscan.io",
    ),
    8453: NetworkConfig(
        chain_id=8453,
        name="Base",
        rpc_url="https://base.llamarpc.com",
        credit_vault_address="0x74a4Cd023e5AfB88369E3f22b02440F2614a1367",
        explorer_url="https://basescan.org",
    ),
}

# Environment variable prefix per chain for endpoint/vault overrides.
ENV_PREFIXES: Mapping[int, str] = {
    1: "ETH",
    56: "BSC",
    42161: "ARB",
    8453: "BASE",
}


def networks_from_env(
    environ: Mapping[str, str],
    *,
    base: Mapping[int, NetworkConfig] = DEFAULT_NETWORKS,
) -> dict[int, NetworkConfig]:
    """Apply ``<PREFIX>_RPC_URL`` / ``<PREFIX>_CREDIT_VAULT_ADDRESS`` overrides."""

    networks: dict[int, NetworkConfig] = {}
    for chain_id, network in base.items():
        prefix = ENV_PREFIXES.get(chain_id)
        if prefix is None:
            networks[chain_id] = network
            continue
        rpc_url = environ.get(f"{prefix}_RPC_URL") or network.rpc_url
        vault = environ.get(f"{prefix}_CREDIT_VAULT_ADDRESS") or network.credit_vault_address
        networks[chain_id] = replace(network, rpc_url=rpc_url, credit_vault_address=vault)
    return networks


@dataclass(slots=True, frozen=True)
class PositionsClientConfig:
    """Runtime configuration for the positions client."""

    networks: Mapping[int, NetworkConfig] = field(default_factory=lambda: dict(DEFAULT_NETWORKS))
    user_agent: str = "pmm-positions/0.1.0"
    probe_timeout_seconds: float = 10.0
    request_deadline_seconds: float | None = None

    transport: TransportConfig = field(default_factory=TransportConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    throttling: ThrottlingConfig = field(default_factory=ThrottlingConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    @property
    def supported_chain_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self.networks))

    def network(self, chain_id: int) -> NetworkConfig:
        try:
            return self.networks[chain_id]
        except KeyError:
            supported = ", ".join(str(cid) for cid in self.supported_chain_ids)
            raise KeyError(
                f"Unsupported chain ID: {chain_id}. Supported chains: {supported}"
            ) from None

    def validate(self) -> None:
        if not self.networks:
            raise ValueError("networks must not be empty")
        for chain_id, network in self.networks.items():
            if network.chain_id != chain_id:
                raise ValueError(f"networks[{chain_id}] holds chain_id={network.chain_id}")
            network.validate()
        if self.probe_timeout_seconds <= 0:
            raise ValueError("probe_timeout_seconds must be > 0")
        if self.request_deadline_seconds is not None and self.request_deadline_seconds <= 0:
            raise ValueError("request_deadline_seconds must be > 0")
        self.transport.validate()
        self.retry.validate()
        self.throttling.validate()
        self.batch.validate()


__all__ = [
    "ZERO_ADDRESS",
    "MULTICALL3_ADDRESS",
    "TransportConfig",
    "RetryConfig",
    "ThrottlingConfig",
    "BatchConfig",
    "NativeCurrency",
    "NetworkConfig",
    "DEFAULT_NETWORKS",
    "ENV_PREFIXES",
    "networks_from_env",
    "PositionsClientConfig",
]
