"""Key-value storage with MessagePack encoding and a Redis backend."""

from __future__ import annotations

import abc
import contextlib
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import msgpack
import redis.asyncio as aioredis
from redis import exceptions as redis_exceptions

from .errors import (
    DeserializeError,
    SerializeError,
    SetExpiryError,
    StorageConnectionError,
    StorageOtherError,
)

LOCAL_REDIS_ADDR = "redis://localhost:6379/0"


def serialize(data: Any) -> bytes:
    """Encode a value as MessagePack."""
    try:
        return msgpack.packb(data, use_bin_type=True)
    except Exception as exc:
        raise SerializeError() from exc


def deserialize(data: bytes) -> Any:
    """Decode a MessagePack value."""
    try:
        return msgpack.unpackb(data, raw=False)
    except Exception as exc:
        raise DeserializeError() from exc


class KeyValueStorage(abc.ABC):
    """Asynchronous key-value store of serializable values."""

    @abc.abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None."""

    async def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store value under key, optionally expiring after ttl."""
        await self.set_serialized(key, serialize(value), ttl)

    @abc.abstractmethod
    async def set_serialized(
        self, key: str, value: bytes, ttl: timedelta | None = None
    ) -> None:
        """Store already serialized bytes under key."""

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the value stored under key."""


@dataclass(frozen=True)
class RedisAddr:
    """Redis endpoints for reads and writes; equal when combined."""

    read_url: str = LOCAL_REDIS_ADDR
    write_url: str = LOCAL_REDIS_ADDR

    @classmethod
    def from_pair(cls, read: str | None, write: str | None) -> RedisAddr:
        """Build an address from optional read and write endpoints."""
        if read is not None and write is not None:
            return cls(read, write)
        single = read if read is not None else write
        if single is not None:
            return cls(single, single)
        return cls()

    @property
    def is_combined(self) -> bool:
        return self.read_url == self.write_url

    def read(self) -> str:
        return self.read_url

    def write(self) -> str:
        return self.write_url


@contextlib.contextmanager
def _redis_errors() -> Iterator[None]:
    try:
        yield
    except (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError) as exc:
        raise StorageConnectionError(str(exc)) from exc
    except redis_exceptions.RedisError as exc:
        raise StorageOtherError(str(exc)) from exc


def _open_client(url: str, pool_size: int) -> aioredis.Redis:
    try:
        pool = aioredis.ConnectionPool.from_url(url, max_connections=pool_size)
    except (ValueError, TypeError) as exc:
        raise StorageOtherError(str(exc)) from exc
    return aioredis.Redis(connection_pool=pool)


class RedisStorage(KeyValueStorage):
    """Key-value storage on Redis with separate read and write pools."""

    def __init__(self, addr: RedisAddr, pool_size: int) -> None:
        self._reader = _open_client(addr.read(), pool_size)
        self._writer = _open_client(addr.write(), pool_size)

    def __repr__(self) -> str:
        return "RedisStorage()"

    async def get(self, key: str) -> Any | None:
        with _redis_errors():
            raw = await self._reader.get(key)
        if raw is None:
            return None
        if isinstance(raw, (bytes, bytearray)):
            return deserialize(bytes(raw))
        raise DeserializeError()

    async def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        await self.set_serialized(key, serialize(value), ttl)

    async def set_serialized(
        self, key: str, value: bytes, ttl: timedelta | None = None
    ) -> None:
        expiry = None
        if ttl is not None:
            if ttl < timedelta(0):
                raise SetExpiryError()
            expiry = int(ttl.total_seconds())
        with _redis_errors():
            await self._writer.set(key, value, ex=expiry)

    async def delete(self, key: str) -> None:
        with _redis_errors():
            await self._writer.delete(key)