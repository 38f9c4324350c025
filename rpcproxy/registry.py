"""Project lookups through the registry, cached in front when configured."""

from __future__ import annotations

import abc
import time
from typing import Any

from .errors import (
    InvalidConfigurationError,
    RegistryConfigError,
    RegistryError,
    RpcError,
)
from .errors import ProjectDataError
from .metrics import Meter
from .project_data import ProjectData, ProjectDataResult
from .project_metrics import ProjectDataMetrics, ResponseSource
from .project_storage import ProjectStorage
from .storage import RedisStorage


class RegistryClient(abc.ABC):
    """Source of project records.

    Implementations raise RegistryConfigError when the registry rejects the
    request as misconfigured, and RegistryError for failures worth retrying.
    """

    @abc.abstractmethod
    async def project_data(self, project_id: str) -> ProjectData | None:
        """The project with this id, or None if the registry does not know it."""


def _raise_for(error: ProjectDataError) -> None:
    if error is ProjectDataError.REGISTRY_CONFIG_ERROR:
        raise RegistryConfigError(error.message())
    raise RpcError(error.message())


class Registry:
    """Looks projects up in the cache first, then in the registry.

    Without a client every project is treated as enabled with a valid key.
    """

    def __init__(
        self,
        client: RegistryClient | None = None,
        cache: ProjectStorage | None = None,
        metrics: ProjectDataMetrics | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.metrics = metrics if metrics is not None else ProjectDataMetrics()

    @classmethod
    def from_config(
        cls,
        cfg_registry: Any,
        cfg_storage: Any,
        client: RegistryClient | None = None,
        meter: Meter | None = None,
    ) -> Registry:
        """Build a registry; the client is used only when an API url is configured."""
        metrics = ProjectDataMetrics(meter if meter is not None else Meter())

        if cfg_registry.api_url is None:
            return cls(None, None, metrics)

        if cfg_registry.api_auth_token is None:
            raise InvalidConfigurationError("missing registry api_auth_token")
        if client is None:
            raise InvalidConfigurationError("missing registry client")

        cache = None
        cache_addr = cfg_storage.project_data_redis_addr()
        if cache_addr is not None:
            storage = RedisStorage(cache_addr, cfg_storage.redis_max_connections)
            cache = ProjectStorage(storage, cfg_registry.cache_ttl(), metrics)

        return cls(client, cache, metrics)

    async def project_data(self, project_id: str) -> ProjectData:
        """The project with this id; raises RpcError when it cannot be served."""
        start = time.perf_counter()
        source, data = await self._project_data_internal(project_id)
        self.metrics.request(time.perf_counter() - start, source, data)
        if isinstance(data, ProjectDataError):
            _raise_for(data)
        return data

    async def _project_data_internal(
        self, project_id: str
    ) -> tuple[ResponseSource, ProjectDataResult]:
        if self.cache is not None:
            start = time.perf_counter()
            cached = await self.cache.fetch(project_id)
            self.metrics.fetch_cache_time(time.perf_counter() - start)
            if cached is not None:
                return ResponseSource.CACHE, cached

        # Every outcome except a retryable failure is cached, errors included.
        data: ProjectDataResult
        try:
            found = await self._fetch_registry(project_id)
        except RegistryConfigError:
            data = ProjectDataError.REGISTRY_CONFIG_ERROR
        except RegistryError:
            raise
        else:
            data = ProjectDataError.NOT_FOUND if found is None else found

        if self.cache is not None:
            await self.cache.set(project_id, data)

        return ResponseSource.REGISTRY, data

    async def _fetch_registry(self, project_id: str) -> ProjectData | None:
        start = time.perf_counter()
        try:
            if self.client is None:
                return ProjectData.default_for(project_id)
            return await self.client.project_data(project_id)
        finally:
            self.metrics.fetch_registry_time(time.perf_counter() - start)