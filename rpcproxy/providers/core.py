"""Provider kinds, priorities, weights and the interface every provider implements."""

from __future__ import annotations

import abc
import enum
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import ClassVar

from ..errors import RpcError

MAX_PRIORITY = 100


class ProviderKind(enum.Enum):
    """Upstream services the proxy can route to."""

    INFURA = "Infura"
    POKT = "Pokt"
    BINANCE = "Binance"
    ZKSYNC = "zkSync"
    PUBLICNODE = "Publicnode"
    OMNIATECH = "Omniatech"
    BASE = "Base"
    ZORA = "Zora"
    ZERION = "Zerion"
    COINBASE = "Coinbase"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, value: str) -> ProviderKind | None:
        """The kind with this display name, or None."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class PriorityValue:
    """A priority level between zero and MAX_PRIORITY."""

    value: int

    def __post_init__(self) -> None:
        if self.value > MAX_PRIORITY:
            raise RpcError(f"Priority value cannot be greater than {MAX_PRIORITY}")
        if self.value < 0:
            raise RpcError("Priority value cannot be negative")


@dataclass(frozen=True)
class Priority:
    """A named or custom priority; checked when turned into a value."""

    level: int

    @classmethod
    def custom(cls, value: int) -> Priority:
        return cls(value)

    def to_value(self) -> PriorityValue:
        return PriorityValue(self.level)


Priority.MAX = Priority(MAX_PRIORITY)
Priority.HIGH = Priority(MAX_PRIORITY // 4 + MAX_PRIORITY // 2)
Priority.NORMAL = Priority(MAX_PRIORITY // 2)
Priority.LOW = Priority(MAX_PRIORITY // 4)
Priority.DISABLED = Priority(0)


class Weight:
    """A provider's current routing weight for one chain, scaled by its priority."""

    def __init__(self, priority: Priority) -> None:
        self._priority = priority.to_value()
        self._value = self._priority.value
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Weight(value={self.value()}, priority={self._priority.value})"

    @property
    def priority(self) -> PriorityValue:
        return self._priority

    def value(self) -> int:
        with self._lock:
            return self._value

    def update_value(self, value: int) -> None:
        """Store value scaled so that normal priority leaves it unchanged."""
        scaled = (value * self._priority.value) // (MAX_PRIORITY // 2)
        with self._lock:
            self._value = scaled


@dataclass
class SupportedChain:
    chain_id: str
    weight: Weight


@dataclass
class ProviderConfig:
    """Chains a provider serves, each with its endpoint and weight."""

    provider_kind: ProviderKind
    supported_chains: dict[str, tuple[str, Weight]] = field(default_factory=dict)
    supported_ws_chains: dict[str, tuple[str, Weight]] = field(default_factory=dict)
    project_id: str = ""

    def endpoints(self) -> dict[str, str]:
        """Chain id to endpoint for HTTP requests."""
        return {chain: endpoint for chain, (endpoint, _) in self.supported_chains.items()}

    def ws_endpoints(self) -> dict[str, str]:
        """Chain id to endpoint for websocket connections."""
        return {
            chain: endpoint for chain, (endpoint, _) in self.supported_ws_chains.items()
        }


@dataclass
class ProviderResponse:
    """A response relayed from a provider."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


class Provider(abc.ABC):
    """An upstream JSON-RPC service serving a set of chains."""

    kind: ClassVar[ProviderKind]

    def __init__(self, supported_chains: Mapping[str, str]) -> None:
        self.supported_chains = dict(supported_chains)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(chains={sorted(self.supported_chains)})"

    def provider_kind(self) -> ProviderKind:
        return self.kind

    def supports_caip_chainid(self, chain_id: str) -> bool:
        return chain_id in self.supported_chains

    def supported_caip_chains(self) -> list[str]:
        return list(self.supported_chains)

    def is_rate_limited(self, response: ProviderResponse) -> bool:
        """Whether the provider refused the call for exceeding its limits."""
        return response.status == HTTPStatus.TOO_MANY_REQUESTS

    @abc.abstractmethod
    async def proxy(self, chain_id: str, body: bytes) -> ProviderResponse:
        """Forward a JSON-RPC request body for chain_id and return the reply."""