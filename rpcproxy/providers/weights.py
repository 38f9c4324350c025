"""Provider weights derived from observed status codes."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .core import ProviderKind, Weight

logger = logging.getLogger(__name__)

PERFECT_RATIO = 1.0
_U64_MAX = 2**64 - 1

WeightResolver = dict[str, dict[ProviderKind, Weight]]


@dataclass
class Availability:
    """Counts of successful and failed calls."""

    success: int = 0
    failure: int = 0


ParsedWeights = dict[str, tuple[dict[str, Availability], Availability]]


def _results(prometheus_data: Any) -> list[Any]:
    data = prometheus_data
    if isinstance(data, Mapping) and "data" in data:
        data = data["data"]
    if isinstance(data, Mapping):
        if data.get("resultType") != "vector":
            return []
        return list(data.get("result") or [])
    return list(data)


def _amount(sample: Mapping[str, Any]) -> int | None:
    try:
        raw = float(sample["value"][1])
    except (KeyError, IndexError, TypeError, ValueError):
        return None
    if math.isnan(raw) or raw <= 0:
        return 0
    if raw >= _U64_MAX:
        return _U64_MAX
    return int(raw)


def parse_weights(prometheus_data: Any) -> ParsedWeights:
    """Sum successes and failures per provider and per chain from a vector query result."""
    weights_data: ParsedWeights = {}
    samples: Iterable[Any] = _results(prometheus_data)
    for sample in samples:
        if not isinstance(sample, Mapping):
            logger.warning("Malformed sample: %r", sample)
            continue
        metric = dict(sample.get("metric") or {})
        chain_id = metric.pop("chain_id", None)
        if chain_id is None:
            logger.warning("No chain_id found in metric: %r", metric)
            continue
        status_code = metric.pop("status_code", None)
        if status_code is None:
            logger.warning("No status_code found in metric: %r", metric)
            continue
        provider = metric.pop("provider", None)
        if provider is None:
            logger.warning("No provider found in metric: %r", metric)
            continue
        amount = _amount(sample)
        if amount is None:
            logger.warning("No value found in sample: %r", sample)
            continue

        chain_map, provider_availability = weights_data.setdefault(
            provider, ({}, Availability())
        )
        chain_availability = chain_map.setdefault(chain_id, Availability())

        if status_code.startswith("2") or status_code in ("404", "400"):
            provider_availability.success += amount
            chain_availability.success += amount
        else:
            provider_availability.failure += amount
            chain_availability.failure += amount
    return weights_data


def calculate_chain_weight(
    provider_availability: Availability, chain_availability: Availability
) -> int:
    """Weight in hundredths of a percent; failures count squared."""
    provider_failures_squared = provider_availability.failure**2
    if provider_failures_squared > _U64_MAX:
        return 0
    provider_total = provider_availability.success + provider_failures_squared

    chain_failures_squared = chain_availability.failure**2
    if chain_failures_squared > _U64_MAX:
        return 0
    chain_total = chain_availability.success + chain_failures_squared

    provider_rate = (
        PERFECT_RATIO
        if provider_total == 0
        else provider_availability.success / provider_total
    )
    chain_rate = (
        PERFECT_RATIO if chain_total == 0 else chain_availability.success / chain_total
    )
    return int(provider_rate * chain_rate * 10000.0)


def update_values(weight_resolver: WeightResolver, parsed_weights: ParsedWeights) -> None:
    """Set every known provider/chain weight from the parsed availabilities."""
    for provider, (chain_availabilities, provider_availability) in parsed_weights.items():
        for chain_id, chain_availability in chain_availabilities.items():
            chain_weight = calculate_chain_weight(chain_availability, provider_availability)

            provider_chain_weight = weight_resolver.get(chain_id)
            if provider_chain_weight is None:
                logger.warning("Chain %s not found in weight resolver", chain_id)
                continue

            kind = ProviderKind.from_str(provider)
            if kind is None:
                raise ValueError(f"unknown provider: {provider}")
            weight = provider_chain_weight.get(kind)
            if weight is None:
                logger.warning(
                    "Weight for %s not found in weight map: %r",
                    provider,
                    provider_chain_weight,
                )
                continue

            weight.update_value(chain_weight)


def record_values(weight_resolver: WeightResolver, metrics: Any) -> None:
    """Report every current weight to the metrics."""
    for chain_id, provider_chain_weight in weight_resolver.items():
        for provider_kind, weight in provider_chain_weight.items():
            metrics.record_provider_weight(provider_kind, chain_id, weight.value())