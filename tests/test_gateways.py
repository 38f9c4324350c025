from http import HTTPStatus

import httpx
import pytest
import respx

from rpcproxy.errors import ChainNotFoundError, ProviderError
from rpcproxy.providers.core import (
    Priority,
    ProviderConfig,
    ProviderKind,
    ProviderResponse,
    Weight,
)
from rpcproxy.providers.gateways import InfuraProvider, PoktProvider, ZoraProvider

REQUEST = b'{"jsonrpc":"2.0","method":"eth_chainId","params":[],"id":1}'
OK_BODY = b'{"jsonrpc":"2.0","result":"0x1","id":1}'


def _error_body(code):
    return (
        '{"jsonrpc":"2.0","error":{"code":%d,"message":"failure"},"id":1}' % code
    ).encode()


def _config(kind, chains, project_id="proj"):
    return ProviderConfig(
        provider_kind=kind,
        supported_chains={
            chain: (endpoint, Weight(Priority.NORMAL)) for chain, endpoint in chains.items()
        },
        project_id=project_id,
    )


def test_pokt_endpoint_uses_chain_and_project():
    provider = PoktProvider("proj", {"eip155:100": "poa-xdai"})
    assert provider.endpoint("eip155:100") == (
        "https://poa-xdai.gateway.pokt.network/v1/lb/proj"
    )


def test_infura_endpoint_uses_chain_and_project():
    provider = InfuraProvider("proj", {"eip155:1": "mainnet"})
    assert provider.endpoint("eip155:1") == "https://mainnet.infura.io/v3/proj"


def test_zora_endpoint_is_configured_url():
    provider = ZoraProvider({"eip155:999": "https://rpc.example.com/zora"})
    assert provider.endpoint("eip155:999") == "https://rpc.example.com/zora"


@pytest.mark.parametrize(
    "provider",
    [
        PoktProvider("proj", {"eip155:100": "poa-xdai"}),
        InfuraProvider("proj", {"eip155:1": "mainnet"}),
        ZoraProvider({"eip155:999": "https://rpc.example.com/zora"}),
    ],
)
def test_unknown_chain_raises(provider):
    with pytest.raises(ChainNotFoundError):
        provider.endpoint("eip155:424242")


@pytest.mark.asyncio
async def test_proxy_unknown_chain_raises():
    provider = InfuraProvider("proj", {"eip155:1": "mainnet"})
    with pytest.raises(ChainNotFoundError):
        await provider.proxy("eip155:5", REQUEST)


def test_provider_kinds():
    assert PoktProvider("p", {}).provider_kind() is ProviderKind.POKT
    assert InfuraProvider("p", {}).provider_kind() is ProviderKind.INFURA
    assert ZoraProvider({}).provider_kind() is ProviderKind.ZORA


def test_pokt_never_reports_rate_limit():
    provider = PoktProvider("proj", {})
    assert provider.is_rate_limited(ProviderResponse(HTTPStatus.TOO_MANY_REQUESTS)) is False
    assert provider.is_rate_limited(ProviderResponse(HTTPStatus.OK)) is False


@pytest.mark.parametrize("provider", [InfuraProvider("proj", {}), ZoraProvider({})])
def test_rate_limited_on_too_many_requests(provider):
    assert provider.is_rate_limited(ProviderResponse(HTTPStatus.TOO_MANY_REQUESTS)) is True
    assert provider.is_rate_limited(ProviderResponse(HTTPStatus.OK)) is False


def test_from_config_builds_providers():
    pokt = PoktProvider.from_config(
        _config(ProviderKind.POKT, {"eip155:100": "poa-xdai"}, project_id="abc")
    )
    assert pokt.project_id == "abc"
    assert pokt.supported_caip_chains() == ["eip155:100"]

    infura = InfuraProvider.from_config(
        _config(ProviderKind.INFURA, {"eip155:1": "mainnet"}, project_id="abc")
    )
    assert infura.endpoint("eip155:1") == "https://mainnet.infura.io/v3/abc"

    zora = ZoraProvider.from_config(
        _config(ProviderKind.ZORA, {"eip155:999": "https://rpc.example.com/zora"})
    )
    assert zora.supports_caip_chainid("eip155:999")
    assert not zora.supports_caip_chainid("eip155:1")


@pytest.mark.asyncio
async def test_pokt_success_is_relayed():
    provider_url = "https://poa-xdai.gateway.pokt.network/v1/lb/proj"
    async with httpx.AsyncClient() as client:
        provider = PoktProvider("proj", {"eip155:100": "poa-xdai"}, client)
        with respx.mock:
            route = respx.post(provider_url).mock(
                return_value=httpx.Response(HTTPStatus.OK, content=OK_BODY)
            )
            response = await provider.proxy("eip155:100", REQUEST)
    assert response.status == HTTPStatus.OK
    assert response.body == OK_BODY
    assert response.headers["Content-Type"] == "application/json"
    sent = route.calls.last.request
    assert sent.content == REQUEST
    assert sent.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code, expected",
    [(-32004, HTTPStatus.TOO_MANY_REQUESTS), (-32603, HTTPStatus.INTERNAL_SERVER_ERROR)],
)
async def test_pokt_maps_error_codes(code, expected):
    provider_url = "https://poa-xdai.gateway.pokt.network/v1/lb/proj"
    body = _error_body(code)
    async with httpx.AsyncClient() as client:
        provider = PoktProvider("proj", {"eip155:100": "poa-xdai"}, client)
        with respx.mock:
            respx.post(provider_url).mock(
                return_value=httpx.Response(HTTPStatus.OK, content=body)
            )
            response = await provider.proxy("eip155:100", REQUEST)
    assert response.status == expected
    assert response.body == body
    assert response.headers["Content-Type"] != "application/json"


@pytest.mark.asyncio
async def test_infura_maps_internal_error():
    provider_url = "https://mainnet.infura.io/v3/proj"
    body = _error_body(-32603)
    async with httpx.AsyncClient() as client:
        provider = InfuraProvider("proj", {"eip155:1": "mainnet"}, client)
        with respx.mock:
            respx.post(provider_url).mock(
                return_value=httpx.Response(HTTPStatus.OK, content=body)
            )
            response = await provider.proxy("eip155:1", REQUEST)
    assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.body == body


@pytest.mark.asyncio
async def test_infura_keeps_status_for_other_errors():
    provider_url = "https://mainnet.infura.io/v3/proj"
    body = _error_body(-32004)
    async with httpx.AsyncClient() as client:
        provider = InfuraProvider("proj", {"eip155:1": "mainnet"}, client)
        with respx.mock:
            respx.post(provider_url).mock(
                return_value=httpx.Response(HTTPStatus.OK, content=body)
            )
            response = await provider.proxy("eip155:1", REQUEST)
    assert response.status == HTTPStatus.OK
    assert response.body == body
    assert response.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_zora_relays_upstream_status():
    provider_url = "https://rpc.example.com/zora"
    async with httpx.AsyncClient() as client:
        provider = ZoraProvider({"eip155:999": provider_url}, client)
        with respx.mock:
            route = respx.post(provider_url).mock(
                return_value=httpx.Response(HTTPStatus.BAD_GATEWAY, content=b"down")
            )
            response = await provider.proxy("eip155:999", REQUEST)
    assert response.status == HTTPStatus.BAD_GATEWAY
    assert response.body == b"down"
    assert route.calls.last.request.content == REQUEST


@pytest.mark.asyncio
async def test_transport_failure_raises_provider_error():
    provider_url = "https://mainnet.infura.io/v3/proj"
    async with httpx.AsyncClient() as client:
        provider = InfuraProvider("proj", {"eip155:1": "mainnet"}, client)
        with respx.mock:
            respx.post(provider_url).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(ProviderError):
                await provider.proxy("eip155:1", REQUEST)