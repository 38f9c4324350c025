"""Providers that relay JSON-RPC requests over HTTP to a fixed endpoint per chain."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import ClassVar

import httpx

from ..errors import ChainNotFoundError, ProviderError
from .core import Provider, ProviderConfig, ProviderKind, ProviderResponse

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def _jsonrpc_error(body: bytes) -> object | None:
    """The error member of a JSON-RPC response body, if it has one."""
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(payload, dict):
        return payload.get("error")
    return None


class JsonRpcHttpProvider(Provider):
    """Forwards request bodies by POST to the endpoint configured for a chain."""

    url_template: ClassVar[str] = "{}"

    def __init__(
        self,
        supported_chains: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(supported_chains)
        self._client = client

    @classmethod
    def from_config(cls, config: ProviderConfig) -> JsonRpcHttpProvider:
        """Build a provider serving the HTTP chains of the config."""
        return cls(config.endpoints())

    def endpoint(self, chain_id: str) -> str:
        """The URL that requests for chain_id are sent to."""
        try:
            chain = self.supported_chains[chain_id]
        except KeyError:
            raise ChainNotFoundError() from None
        return self.url_template.format(chain)

    def is_rate_limited(self, response: ProviderResponse) -> bool:
        return response.status == HTTPStatus.TOO_MANY_REQUESTS

    async def _post(self, url: str, body: bytes) -> httpx.Response:
        headers = {"Content-Type": JSON_CONTENT_TYPE}
        try:
            if self._client is not None:
                return await self._client.post(url, content=body, headers=headers)
            async with httpx.AsyncClient() as client:
                return await client.post(url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(str(exc)) from exc

    async def proxy(self, chain_id: str, body: bytes) -> ProviderResponse:
        url = self.endpoint(chain_id)
        response = await self._post(url, body)
        status = response.status_code
        content = response.content

        error = _jsonrpc_error(content)
        if error is not None and 200 <= status < 300:
            logger.info(
                "Strange: provider returned JSON RPC error, but status %s is success: "
                "%s: %r",
                status,
                self.provider_kind(),
                error,
            )

        return ProviderResponse(
            status=status,
            body=content,
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )


class BaseProvider(JsonRpcHttpProvider):
    kind = ProviderKind.BASE


class BinanceProvider(JsonRpcHttpProvider):
    kind = ProviderKind.BINANCE

    def is_rate_limited(self, response: ProviderResponse) -> bool:
        return response.status == HTTPStatus.FORBIDDEN


class OmniatechProvider(JsonRpcHttpProvider):
    kind = ProviderKind.OMNIATECH
    url_template = "https://endpoints.omniatech.io/v1/{}/mainnet/public"


class PublicnodeProvider(JsonRpcHttpProvider):
    kind = ProviderKind.PUBLICNODE
    url_template = "https://{}.publicnode.com"


class ZKSyncProvider(JsonRpcHttpProvider):
    kind = ProviderKind.ZKSYNC