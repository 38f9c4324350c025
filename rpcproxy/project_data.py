"""Project records returned by the registry and their cache encoding."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Union

from .errors import DeserializeError, ProjectDataError


@dataclass
class Quota:
    current: int = 0
    max: int = 0
    is_valid: bool = True


@dataclass
class ProjectKey:
    value: str
    is_valid: bool = True


@dataclass
class ProjectData:
    """A project as known to the registry."""

    uuid: str = ""
    creator: str = ""
    name: str = ""
    push_url: str | None = None
    keys: list[ProjectKey] = field(default_factory=list)
    is_enabled: bool = True
    is_verify_enabled: bool = False
    is_rate_limited: bool = False
    allowed_origins: list[str] = field(default_factory=list)
    verified_domains: list[str] = field(default_factory=list)
    quota: Quota = field(default_factory=Quota)

    @classmethod
    def default_for(cls, project_id: str) -> ProjectData:
        """An enabled project whose only key is the given id."""
        return cls(keys=[ProjectKey(value=project_id, is_valid=True)])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProjectData:
        """Build from a mapping as produced by to_dict; raises ValueError."""
        try:
            quota = data["quota"]
            return cls(
                uuid=_typed(data["uuid"], str, "uuid"),
                creator=_typed(data["creator"], str, "creator"),
                name=_typed(data["name"], str, "name"),
                push_url=_optional_str(data["push_url"], "push_url"),
                keys=[
                    ProjectKey(
                        value=_typed(key["value"], str, "keys.value"),
                        is_valid=_typed(key["is_valid"], bool, "keys.is_valid"),
                    )
                    for key in _typed(data["keys"], list, "keys")
                ],
                is_enabled=_typed(data["is_enabled"], bool, "is_enabled"),
                is_verify_enabled=_typed(
                    data["is_verify_enabled"], bool, "is_verify_enabled"
                ),
                is_rate_limited=_typed(data["is_rate_limited"], bool, "is_rate_limited"),
                allowed_origins=_str_list(data["allowed_origins"], "allowed_origins"),
                verified_domains=_str_list(data["verified_domains"], "verified_domains"),
                quota=Quota(
                    current=_int(quota["current"], "quota.current"),
                    max=_int(quota["max"], "quota.max"),
                    is_valid=_typed(quota["is_valid"], bool, "quota.is_valid"),
                ),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed project data: {exc}") from exc


ProjectDataResult = Union[ProjectData, ProjectDataError]


def _typed(value: Any, kind: type, name: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"{name} must be {kind.__name__}")
    return value


def _int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int")
    return value


def _optional_str(value: Any, name: str) -> str | None:
    return None if value is None else _typed(value, str, name)


def _str_list(value: Any, name: str) -> list[str]:
    return [_typed(item, str, name) for item in _typed(value, list, name)]


def encode_result(result: ProjectDataResult) -> dict[str, Any]:
    """Plain, serializable form of a lookup outcome, errors included."""
    if isinstance(result, ProjectDataError):
        return {"Err": result.value}
    if isinstance(result, ProjectData):
        return {"Ok": result.to_dict()}
    raise TypeError(f"cannot encode {type(result).__name__}")


def decode_result(data: Any) -> ProjectDataResult:
    """Inverse of encode_result; raises DeserializeError on malformed input."""
    if not isinstance(data, Mapping) or len(data) != 1:
        raise DeserializeError()
    ((tag, payload),) = data.items()
    try:
        if tag == "Ok" and isinstance(payload, Mapping):
            return ProjectData.from_dict(payload)
        if tag == "Err":
            return ProjectDataError(payload)
    except ValueError as exc:
        raise DeserializeError() from exc
    raise DeserializeError()