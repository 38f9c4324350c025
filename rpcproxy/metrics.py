"""In-process metric instruments and the service's metric set."""

from __future__ import annotations

import enum
import threading
import time
from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta
from typing import Any, Union

AttributeValue = Union[str, int]
Attributes = Mapping[str, AttributeValue]
_Key = tuple[tuple[str, AttributeValue], ...]


def _key(attributes: Attributes | None) -> _Key:
    return tuple(sorted((attributes or {}).items()))


class _Instrument:
    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Counter(_Instrument):
    """A monotonically increasing sum, kept per attribute set."""

    def __init__(self, name: str, description: str = "") -> None:
        super().__init__(name, description)
        self._totals: dict[_Key, int] = {}

    def add(self, value: int, attributes: Attributes | None = None) -> None:
        """Increase the sum for the given attributes."""
        if value < 0:
            raise ValueError("counter increments must not be negative")
        key = _key(attributes)
        with self._lock:
            self._totals[key] = self._totals.get(key, 0) + value

    def total(self, attributes: Attributes | None = None) -> int:
        """Sum for exactly these attributes, or over all when None."""
        with self._lock:
            if attributes is None:
                return sum(self._totals.values())
            return self._totals.get(_key(attributes), 0)


class Histogram(_Instrument):
    """Recorded values, kept per attribute set."""

    def __init__(self, name: str, description: str = "") -> None:
        super().__init__(name, description)
        self._samples: dict[_Key, list[float]] = {}

    def record(self, value: float, attributes: Attributes | None = None) -> None:
        key = _key(attributes)
        with self._lock:
            self._samples.setdefault(key, []).append(value)

    def samples(self, attributes: Attributes | None = None) -> list[float]:
        """Values for exactly these attributes, or all of them when None."""
        with self._lock:
            if attributes is None:
                return [v for values in self._samples.values() for v in values]
            return list(self._samples.get(_key(attributes), []))


class Meter:
    """Creates instruments and keeps them by name."""

    def __init__(self) -> None:
        self._instruments: dict[str, _Instrument] = {}
        self._lock = threading.Lock()

    def _instrument(self, kind: type, name: str, description: str) -> Any:
        with self._lock:
            existing = self._instruments.get(name)
            if existing is None:
                existing = kind(name, description)
                self._instruments[name] = existing
            elif not isinstance(existing, kind):
                raise ValueError(f"instrument {name!r} already exists with another kind")
            return existing

    def counter(self, name: str, description: str = "") -> Counter:
        return self._instrument(Counter, name, description)

    def histogram(self, name: str, description: str = "") -> Histogram:
        return self._instrument(Histogram, name, description)

    def __getitem__(self, name: str) -> _Instrument:
        return self._instruments[name]

    def __contains__(self, name: object) -> bool:
        return name in self._instruments

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._instruments))


def _seconds(latency: timedelta | float) -> float:
    if isinstance(latency, timedelta):
        return latency.total_seconds()
    return float(latency)


def _elapsed_since(start: datetime | float) -> float:
    if isinstance(start, datetime):
        elapsed = (datetime.now(start.tzinfo) - start).total_seconds()
    else:
        elapsed = time.time() - float(start)
    return max(elapsed, 0.0)


def _provider_name(provider: Any) -> str:
    kind = getattr(provider, "provider_kind", provider)
    if callable(kind):
        kind = kind()
    return str(kind)


def _source_label(source: Any) -> str:
    as_str = getattr(source, "as_str", None)
    if callable(as_str):
        return str(as_str())
    if isinstance(source, enum.Enum):
        return str(source.value)
    return str(source)


class Metrics:
    """Every metric the proxy reports."""

    def __init__(self, meter: Meter | None = None) -> None:
        self.meter = meter if meter is not None else Meter()
        m = self.meter
        self.rpc_call_counter = m.counter(
            "rpc_call_counter", "The number of rpc calls served"
        )
        self.http_call_counter = m.counter(
            "http_call_counter", "The number of http calls served"
        )
        self.http_latency_tracker = m.histogram(
            "http_latency_tracker", "The http call latency"
        )
        self.http_external_latency_tracker = m.histogram(
            "http_external_latency_tracker",
            "The http call latency for external providers",
        )
        self.rejected_project_counter = m.counter(
            "rejected_project_counter", "The number of calls for invalid project ids"
        )
        self.quota_limited_project_counter = m.counter(
            "quota_limited_project_counter",
            "The number of calls for quota limited project ids",
        )
        self.rate_limited_call_counter = m.counter(
            "rate_limited_counter", "The number of calls that got rate limited"
        )
        self.provider_finished_call_counter = m.counter(
            "provider_finished_call_counter",
            "The number of calls to provider that finished successfully",
        )
        self.provider_failed_call_counter = m.counter(
            "provider_failed_call_counter", "The number of calls to provider that failed"
        )
        self.provider_status_code_counter = m.counter(
            "provider_status_code_counter",
            "The count of status codes returned by providers",
        )
        self.weights_value_recorder = m.histogram(
            "provider_weights", "The weights of the providers"
        )
        self.identity_lookup_counter = m.counter(
            "identity_lookup_counter", "The number of identity lookups served"
        )
        self.identity_lookup_success_counter = m.counter(
            "identity_lookup_success_counter",
            "The number of identity lookups that were successful",
        )
        self.identity_lookup_latency_tracker = m.histogram(
            "identity_lookup_latency_tracker", "The latency to serve identity lookups"
        )
        self.identity_lookup_cache_latency_tracker = m.histogram(
            "identity_lookup_cache_latency_tracker",
            "The latency to lookup identity in the cache",
        )
        self.identity_lookup_name_counter = m.counter(
            "identity_lookup_name_counter", "The number of name lookups"
        )
        self.identity_lookup_name_success_counter = m.counter(
            "identity_lookup_name_success_counter",
            "The number of name lookups that were successfull",
        )
        self.identity_lookup_name_latency_tracker = m.histogram(
            "identity_lookup_name_latency_tracker",
            "The latency of performing the name lookup",
        )
        self.identity_lookup_avatar_counter = m.counter(
            "identity_lookup_avatar_counter", "The number of avatar lookups"
        )
        self.identity_lookup_avatar_success_counter = m.counter(
            "identity_lookup_avatar_success_counter",
            "The number of avatar lookups that were successfull",
        )
        self.identity_lookup_avatar_latency_tracker = m.histogram(
            "identity_lookup_avatar_latency_tracker",
            "The latency of performing the avatar lookup",
        )
        self.identity_lookup_name_present_counter = m.counter(
            "identity_lookup_name_present_counter",
            "The number of identity lookups that returned a name",
        )
        self.identity_lookup_avatar_present_counter = m.counter(
            "identity_lookup_avatar_present_counter",
            "The number of identity lookups that returned an avatar",
        )
        self.websocket_connection_counter = m.counter(
            "websocket_connection_counter", "The number of websocket connections"
        )
        self.history_lookup_counter = m.counter(
            "history_lookup_counter", "The number of transaction history lookups"
        )
        self.history_lookup_success_counter = m.counter(
            "history_lookup_success_counter",
            "The number of transaction history that were successfull",
        )
        self.history_lookup_latency_tracker = m.histogram(
            "history_lookup_latency_tracker",
            "The latency to serve transactions history lookups",
        )

    def add_rpc_call(self, chain_id: str) -> None:
        self.rpc_call_counter.add(1, {"chain.id": chain_id})

    def add_http_call(self, code: int, route: str) -> None:
        self.http_call_counter.add(1, {"code": int(code), "route": route})

    def add_http_latency(self, code: int, route: str, latency: float) -> None:
        self.http_latency_tracker.record(latency, {"code": int(code), "route": route})

    def add_external_http_latency(self, provider_kind: Any, latency: float) -> None:
        self.http_external_latency_tracker.record(
            latency, {"provider": str(provider_kind)}
        )

    def add_rejected_project(self) -> None:
        self.rejected_project_counter.add(1)

    def add_quota_limited_project(self) -> None:
        self.quota_limited_project_counter.add(1)

    def add_rate_limited_call(self, provider: Any, project_id: str) -> None:
        self.rate_limited_call_counter.add(
            1, {"provider_kind": _provider_name(provider), "project_id": project_id}
        )

    def add_failed_provider_call(self, provider: Any) -> None:
        self.provider_failed_call_counter.add(1, {"provider": _provider_name(provider)})

    def add_finished_provider_call(self, provider: Any) -> None:
        self.provider_finished_call_counter.add(
            1, {"provider": _provider_name(provider)}
        )

    def add_status_code_for_provider(self, provider: Any, status: int, chain_id: str) -> None:
        self.provider_status_code_counter.add(
            1,
            {
                "provider": _provider_name(provider),
                "status_code": str(int(status)),
                "chain_id": chain_id,
            },
        )

    def record_provider_weight(self, provider: Any, chain_id: str, weight: int) -> None:
        self.weights_value_recorder.record(
            weight, {"provider": str(provider), "chain_id": chain_id}
        )

    def add_identity_lookup(self) -> None:
        self.identity_lookup_counter.add(1)

    def add_identity_lookup_success(self, source: Any) -> None:
        self.identity_lookup_success_counter.add(1, {"source": _source_label(source)})

    def add_identity_lookup_latency(self, latency: timedelta | float, source: Any) -> None:
        self.identity_lookup_latency_tracker.record(
            _seconds(latency), {"source": _source_label(source)}
        )

    def add_identity_lookup_cache_latency(self, start: datetime | float) -> None:
        self.identity_lookup_cache_latency_tracker.record(_elapsed_since(start))

    def add_identity_lookup_name(self) -> None:
        self.identity_lookup_name_counter.add(1)

    def add_identity_lookup_name_success(self) -> None:
        self.identity_lookup_name_success_counter.add(1)

    def add_identity_lookup_name_latency(self, start: datetime | float) -> None:
        self.identity_lookup_name_latency_tracker.record(_elapsed_since(start))

    def add_identity_lookup_avatar(self) -> None:
        self.identity_lookup_avatar_counter.add(1)

    def add_identity_lookup_avatar_success(self) -> None:
        self.identity_lookup_avatar_success_counter.add(1)

    def add_identity_lookup_avatar_latency(self, start: datetime | float) -> None:
        self.identity_lookup_avatar_latency_tracker.record(_elapsed_since(start))

    def add_identity_lookup_name_present(self) -> None:
        self.identity_lookup_name_present_counter.add(1)

    def add_identity_lookup_avatar_present(self) -> None:
        self.identity_lookup_avatar_present_counter.add(1)

    def add_websocket_connection(self, chain_id: str) -> None:
        self.websocket_connection_counter.add(1, {"chain_id": chain_id})

    def add_history_lookup(self, provider: Any) -> None:
        self.history_lookup_counter.add(1, {"provider": str(provider)})

    def add_history_lookup_success(self, provider: Any) -> None:
        self.history_lookup_success_counter.add(1, {"provider": str(provider)})

    def add_history_lookup_latency(self, provider: Any, latency: timedelta | float) -> None:
        self.history_lookup_latency_tracker.record(
            _seconds(latency), {"provider": str(provider)}
        )