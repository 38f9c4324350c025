"""Cache of project lookup outcomes."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta

from .errors import DeserializeError, StorageError
from .project_data import ProjectDataResult, decode_result, encode_result
from .project_metrics import ProjectDataMetrics
from .storage import KeyValueStorage, serialize

logger = logging.getLogger(__name__)


def build_cache_key(project_id: str) -> str:
    return f"project-data/{project_id}"


class ProjectStorage:
    """Stores project lookup outcomes, errors included, in a key-value cache."""

    def __init__(
        self,
        cache: KeyValueStorage,
        cache_ttl: timedelta,
        metrics: ProjectDataMetrics,
    ) -> None:
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._metrics = metrics
        self._pending: set[asyncio.Task] = set()

    async def fetch(self, project_id: str) -> ProjectDataResult | None:
        """The cached outcome, or None if absent or unreadable."""
        start = time.perf_counter()
        key = build_cache_key(project_id)
        try:
            raw = await self._cache.get(key)
            data = None if raw is None else decode_result(raw)
        except DeserializeError:
            logger.warning("failed to deserialize cached ProjectData")
            data = None
        except StorageError as exc:
            logger.warning("error fetching data from project data cache: %s", exc)
            raise
        self._metrics.fetch_cache_time(time.perf_counter() - start)
        return data

    async def set(self, project_id: str, data: ProjectDataResult) -> asyncio.Task:
        """Start writing the outcome in the background and return that task."""
        key = build_cache_key(project_id)
        serialized = serialize(encode_result(data))
        task = asyncio.get_running_loop().create_task(self._write(key, serialized))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, key: str, serialized: bytes) -> None:
        try:
            await self._cache.set_serialized(key, serialized, self._cache_ttl)
        except StorageError as exc:
            logger.warning("failed to cache project data: %s", exc)