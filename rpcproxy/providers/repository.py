"""Registry of providers and weighted choice among them."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import InvalidConfigurationError
from .core import Provider, ProviderConfig, ProviderKind
from .weights import WeightResolver, parse_weights, record_values, update_values

logger = logging.getLogger(__name__)

DEFAULT_PROMETHEUS_QUERY_URL = "http://localhost:8080/"
DEFAULT_PROMETHEUS_WORKSPACE_HEADER = "localhost:9090"
WEIGHTS_QUERY = "round(increase(provider_status_code_counter_total[3h]))"

_rng = random.SystemRandom()


@dataclass(frozen=True)
class ProvidersConfig:
    infura_project_id: str
    pokt_project_id: str
    prometheus_query_url: str | None = None
    prometheus_workspace_header: str | None = None


def _valid_header_value(value: str) -> bool:
    return all(c == "\t" or (ord(c) >= 32 and ord(c) != 127) for c in value)


def _query_url(base: str) -> str:
    try:
        url = httpx.URL(base)
    except httpx.InvalidURL as exc:
        raise InvalidConfigurationError(f"invalid prometheus url: {base}") from exc
    if not url.scheme or not url.host:
        raise InvalidConfigurationError(f"invalid prometheus url: {base}")
    return str(url).rstrip("/") + "/api/v1/query"


class ProviderRepository:
    """Providers keyed by kind, with per-chain weights for routing."""

    def __init__(self, config: ProvidersConfig) -> None:
        base = (
            DEFAULT_PROMETHEUS_QUERY_URL
            if config.prometheus_query_url is None
            else config.prometheus_query_url
        )
        self._query_url = _query_url(base)
        self.prometheus_workspace_header = (
            DEFAULT_PROMETHEUS_WORKSPACE_HEADER
            if config.prometheus_workspace_header is None
            else config.prometheus_workspace_header
        )
        self._providers: dict[ProviderKind, Provider] = {}
        self.weight_resolver: WeightResolver = {}

    def get_provider_for_chain_id(self, chain_id: str) -> Provider | None:
        """Pick a provider for the chain at random, in proportion to the weights."""
        weights = self.weight_resolver.get(chain_id)
        if not weights:
            return None
        kinds = list(weights)
        values = [weights[kind].value() for kind in kinds]
        if sum(values) <= 0:
            logger.warning("Failed to create weighted index: all weights are zero")
            return None
        chosen = _rng.choices(kinds, weights=values)[0]
        return self._providers.get(chosen)

    def add_provider(self, provider_cls: Any, provider_config: ProviderConfig) -> Provider:
        """Build a provider from its config and register its chains."""
        provider = provider_cls.from_config(provider_config)
        kind = provider_config.provider_kind
        self._providers[kind] = provider
        for chain_id, (_, weight) in provider_config.supported_chains.items():
            self.weight_resolver.setdefault(chain_id, {})[kind] = weight
        logger.info("Added provider: %s", kind)
        return provider

    async def update_weights(self, metrics: Any) -> None:
        """Recompute weights from Prometheus; failures leave them unchanged."""
        logger.info("Updating weights")
        header = self.prometheus_workspace_header
        if not _valid_header_value(header):
            logger.warning("Failed to parse prometheus workspace header from %s", header)
            return

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self._query_url,
                    params={"query": WEIGHTS_QUERY},
                    headers={"host": header},
                )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to update weights from prometheus: %s", exc)
            return

        if not isinstance(payload, dict) or payload.get("status") != "success":
            logger.warning("Failed to update weights from prometheus: %r", payload)
            return

        parsed = parse_weights(payload)
        update_values(self.weight_resolver, parsed)
        record_values(self.weight_resolver, metrics)