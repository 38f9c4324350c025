"""Exception types raised across the proxy."""

from __future__ import annotations

import enum


class RpcError(Exception):
    """Base class for every error the proxy reports."""

    default_message = "rpc error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class ChainNotFoundError(RpcError):
    """The requested chain is not served by the chosen provider."""

    default_message = "chain not found"


class QuotaLimitReachedError(RpcError):
    """The project has used up its quota."""

    default_message = "quota limit reached"


class InvalidConfigurationError(RpcError):
    """The service configuration is inconsistent or malformed."""

    default_message = "invalid configuration"


class ProviderError(RpcError):
    """An upstream provider could not be reached or answered badly."""

    default_message = "provider error"


class RegistryError(RpcError):
    """The project registry could not be queried; the call may be retried."""

    default_message = "registry error"


class RegistryConfigError(RegistryError):
    """The project registry rejected the request as misconfigured."""

    default_message = "registry configuration error"


class StorageError(RpcError):
    """Base class for key-value storage failures."""

    default_message = "storage error"


class SetExpiryError(StorageError):
    """The expiration could not be set for a key."""

    default_message = "couldn't set the expiry to the key"


class SerializeError(StorageError):
    """Data could not be serialized for storage."""

    default_message = "error on serialize data"


class DeserializeError(StorageError):
    """Stored data could not be deserialized."""

    default_message = "error on deserialize data"


class StorageConnectionError(StorageError):
    """A connection to the storage could not be established."""

    default_message = "error on open connection"

    def __init__(self, detail: str = "") -> None:
        super().__init__()
        self.detail = detail


class StorageOtherError(StorageError):
    """An unexpected storage failure."""

    def __init__(self, detail: str) -> None:
        escaped = detail.replace("\\", "\\\\").replace('"', '\\"')
        super().__init__(f'"{escaped}"')
        self.detail = detail


class ProjectStorageError(RpcError):
    """A project lookup failed in the registry or in the cache."""

    def __init__(self, cause: RegistryError | StorageError) -> None:
        if isinstance(cause, RegistryError):
            prefix = "registry error"
        elif isinstance(cause, StorageError):
            prefix = "cache error"
        else:
            raise TypeError(f"unsupported cause: {type(cause).__name__}")
        super().__init__(f"{prefix}: {cause}")
        self.cause = cause


class ProjectDataError(enum.Enum):
    """A cacheable negative outcome of a project lookup."""

    NOT_FOUND = "NotFound"
    REGISTRY_CONFIG_ERROR = "RegistryConfigError"

    def message(self) -> str:
        """Human-readable description of the outcome."""
        return _PROJECT_DATA_MESSAGES[self]

    def __str__(self) -> str:
        return self.message()


_PROJECT_DATA_MESSAGES = {
    ProjectDataError.NOT_FOUND: "Project not found in registry",
    ProjectDataError.REGISTRY_CONFIG_ERROR: "Registry configuration error",
}