"""Metrics of project data lookups."""

from __future__ import annotations

import enum
from datetime import timedelta

from .errors import ProjectDataError
from .metrics import Meter
from .project_data import ProjectDataResult

METRIC_NAMESPACE = "project_data"


class ResponseSource(enum.Enum):
    """Where a project lookup was answered from."""

    CACHE = "cache"
    REGISTRY = "registry"


def _name(name: str) -> str:
    return f"{METRIC_NAMESPACE}_{name}"


def _duration_ms(time: timedelta | float) -> float:
    seconds = time.total_seconds() if isinstance(time, timedelta) else float(time)
    return seconds * 1000.0


def _response_tag(resp: ProjectDataResult) -> str:
    if resp is ProjectDataError.NOT_FOUND:
        return "not_found"
    if resp is ProjectDataError.REGISTRY_CONFIG_ERROR:
        return "registry_config_error"
    return "ok"


class ProjectDataMetrics:
    """Counts project lookups and times them in milliseconds.

    Times are given as timedelta or as seconds.
    """

    def __init__(self, meter: Meter | None = None) -> None:
        meter = meter if meter is not None else Meter()
        self.requests_total = meter.counter(
            _name("requests_total"), "Total number of project data requests"
        )
        self.registry_api_time = meter.histogram(
            _name("registry_api_time"), "Average latency of the registry API fetching"
        )
        self.local_cache_time = meter.histogram(
            _name("local_cache_time"), "Average latency of the local cache fetching"
        )
        self.total_time = meter.histogram(
            _name("total_time"), "Average total latency for project data fetching"
        )

    def fetch_cache_time(self, time: timedelta | float) -> None:
        self.local_cache_time.record(_duration_ms(time))

    def fetch_registry_time(self, time: timedelta | float) -> None:
        self.registry_api_time.record(_duration_ms(time))

    def request(
        self, time: timedelta | float, source: ResponseSource, resp: ProjectDataResult
    ) -> None:
        self.requests_total.add(
            1, {"source": source.value, "response": _response_tag(resp)}
        )
        self.total_time.record(_duration_ms(time))