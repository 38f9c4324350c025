"""Configuration of the project registry and its caches."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import timedelta
from typing import Any

from .errors import InvalidConfigurationError
from .storage import RedisAddr

_DEFAULT_CACHE_TTL = 60 * 5
_DEFAULT_MAX_CONNECTIONS = 64


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidConfigurationError(f"{name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"{name} must be an integer") from exc
    if number < 0:
        raise InvalidConfigurationError(f"{name} must not be negative")
    return number


def _as_optional_str(name: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise InvalidConfigurationError(f"{name} must be a string")


def _known(cls: type, values: Mapping[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in values.items() if k in names}


@dataclass(frozen=True)
class RegistryConfig:
    """Where the project registry lives and how long its answers are cached."""

    api_url: str | None = None
    api_auth_token: str | None = None
    project_data_cache_ttl: int = _DEFAULT_CACHE_TTL

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> RegistryConfig:
        """Build from a mapping; missing keys keep their defaults."""
        given = _known(cls, values)
        for name in ("api_url", "api_auth_token"):
            if name in given:
                given[name] = _as_optional_str(name, given[name])
        if "project_data_cache_ttl" in given:
            given["project_data_cache_ttl"] = _as_int(
                "project_data_cache_ttl", given["project_data_cache_ttl"]
            )
        return cls(**given)

    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.project_data_cache_ttl)


@dataclass(frozen=True)
class StorageConfig:
    """Redis endpoints for project data and identity caches."""

    redis_max_connections: int = _DEFAULT_MAX_CONNECTIONS
    project_data_redis_addr_read: str | None = None
    project_data_redis_addr_write: str | None = None
    identity_cache_redis_addr_read: str | None = None
    identity_cache_redis_addr_write: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> StorageConfig:
        """Build from a mapping; missing keys keep their defaults."""
        given = _known(cls, values)
        for name, value in given.items():
            if name == "redis_max_connections":
                given[name] = _as_int(name, value)
            else:
                given[name] = _as_optional_str(name, value)
        return cls(**given)

    def project_data_redis_addr(self) -> RedisAddr | None:
        return _addr(self.project_data_redis_addr_read, self.project_data_redis_addr_write)

    def identity_cache_redis_addr(self) -> RedisAddr | None:
        return _addr(
            self.identity_cache_redis_addr_read, self.identity_cache_redis_addr_write
        )


def _addr(read: str | None, write: str | None) -> RedisAddr | None:
    if read is None and write is None:
        return None
    return RedisAddr.from_pair(read, write)