"""Gateway providers whose endpoints are built from a chain name and a project id."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import ClassVar

import httpx

from ..errors import ChainNotFoundError
from .core import ProviderConfig, ProviderKind, ProviderResponse
from .jsonrpc import JSON_CONTENT_TYPE, JsonRpcHttpProvider

logger = logging.getLogger(__name__)

RAW_CONTENT_TYPE = "application/octet-stream"

JSONRPC_INTERNAL_ERROR = -32603
POKT_RATE_LIMITED = -32004


def _error_code(body: bytes) -> tuple[bool, int | None]:
    """Whether the body is a JSON-RPC error response, and its error code."""
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return False, None
    if not isinstance(payload, dict):
        return False, None
    error = payload.get("error")
    if error is None:
        return False, None
    code = error.get("code") if isinstance(error, dict) else None
    if isinstance(code, bool) or not isinstance(code, int):
        code = None
    return True, code


class _GatewayProvider(JsonRpcHttpProvider):
    """Relays requests and maps selected JSON-RPC error codes to HTTP statuses."""

    error_statuses: ClassVar[dict[int, int]] = {}

    def __init__(
        self,
        project_id: str,
        supported_chains: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(supported_chains, client)
        self.project_id = project_id

    @classmethod
    def from_config(cls, config: ProviderConfig) -> _GatewayProvider:
        return cls(config.project_id, config.endpoints())

    def _chain(self, chain_id: str) -> str:
        try:
            return self.supported_chains[chain_id]
        except KeyError:
            raise ChainNotFoundError() from None

    async def proxy(self, chain_id: str, body: bytes) -> ProviderResponse:
        url = self.endpoint(chain_id)
        response = await self._post(url, body)
        status = response.status_code
        content = response.content

        has_error, code = _error_code(content)
        if has_error:
            if 200 <= status < 300:
                logger.info(
                    "Strange: provider returned JSON RPC error, but status %s is "
                    "success: %s: %s",
                    status,
                    self.provider_kind(),
                    content,
                )
            override = self.error_statuses.get(code) if code is not None else None
            if override is not None:
                return ProviderResponse(
                    status=override,
                    body=content,
                    headers={"Content-Type": RAW_CONTENT_TYPE},
                )

        return ProviderResponse(
            status=status,
            body=content,
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )


class PoktProvider(_GatewayProvider):
    """Pocket Network gateway."""

    kind = ProviderKind.POKT
    error_statuses = {
        POKT_RATE_LIMITED: HTTPStatus.TOO_MANY_REQUESTS,
        JSONRPC_INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
    }

    def __init__(
        self,
        project_id: str,
        supported_chains: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(project_id, supported_chains, client)

    @classmethod
    def from_config(cls, config: ProviderConfig) -> PoktProvider:
        return cls(config.project_id, config.endpoints())

    def endpoint(self, chain_id: str) -> str:
        chain = self._chain(chain_id)
        return f"https://{chain}.gateway.pokt.network/v1/lb/{self.project_id}"

    def is_rate_limited(self, response: ProviderResponse) -> bool:
        """Rate limiting is not detected for this provider."""
        return False

    async def proxy(self, chain_id: str, body: bytes) -> ProviderResponse:
        return await super().proxy(chain_id, body)


class InfuraProvider(_GatewayProvider):
    """Infura HTTP gateway."""

    kind = ProviderKind.INFURA
    error_statuses = {JSONRPC_INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR}

    def __init__(
        self,
        project_id: str,
        supported_chains: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(project_id, supported_chains, client)

    @classmethod
    def from_config(cls, config: ProviderConfig) -> InfuraProvider:
        return cls(config.project_id, config.endpoints())

    def endpoint(self, chain_id: str) -> str:
        chain = self._chain(chain_id)
        return f"https://{chain}.infura.io/v3/{self.project_id}"

    async def proxy(self, chain_id: str, body: bytes) -> ProviderResponse:
        return await super().proxy(chain_id, body)


class ZoraProvider(JsonRpcHttpProvider):
    """Zora network; each chain maps to a full endpoint URL."""

    kind = ProviderKind.ZORA

    @classmethod
    def from_config(cls, config: ProviderConfig) -> ZoraProvider:
        return cls(config.endpoints())