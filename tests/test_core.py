import pytest

from rpcproxy.errors import RpcError
from rpcproxy.providers.core import (
    MAX_PRIORITY,
    Priority,
    PriorityValue,
    Provider,
    ProviderConfig,
    ProviderKind,
    ProviderResponse,
    SupportedChain,
    Weight,
)


class StubProvider(Provider):
    kind = ProviderKind.BASE

    async def proxy(self, chain_id, body):
        return ProviderResponse(200, body)


def test_provider_kind_display_names():
    assert ProviderKind.from_str("zkSync") is ProviderKind.ZKSYNC
    assert ProviderKind.from_str("Infura") is ProviderKind.INFURA
    assert str(ProviderKind.ZKSYNC) == "zkSync"
    assert str(ProviderKind.INFURA) == "Infura"


@pytest.mark.parametrize("kind", list(ProviderKind))
def test_provider_kind_round_trip(kind):
    assert ProviderKind.from_str(str(kind)) is kind


def test_provider_kind_unknown():
    assert ProviderKind.from_str("ZKSync") is None
    assert ProviderKind.from_str("") is None


def test_priority_max_is_limit():
    assert Priority.MAX.to_value().value == MAX_PRIORITY


def test_priority_ordering():
    levels = [p.to_value().value for p in (
        Priority.MAX, Priority.HIGH, Priority.NORMAL, Priority.LOW, Priority.DISABLED
    )]
    assert levels == sorted(levels, reverse=True)
    assert len(set(levels)) == len(levels)


def test_custom_priority_out_of_range():
    too_high = Priority.custom(MAX_PRIORITY + 1)
    with pytest.raises(RpcError):
        too_high.to_value()
    with pytest.raises(RpcError):
        Weight(too_high)


def test_priority_value_rejects_negative():
    with pytest.raises(RpcError):
        PriorityValue(-1)


def test_weight_starts_at_priority():
    weight = Weight(Priority.custom(30))
    assert weight.value() == 30
    assert weight.priority.value == 30


def test_normal_weight_keeps_value():
    weight = Weight(Priority.NORMAL)
    weight.update_value(40)
    assert weight.value() == 40


def test_max_weight_doubles_value():
    weight = Weight(Priority.MAX)
    weight.update_value(40)
    assert weight.value() == 80


def test_disabled_weight_stays_zero():
    weight = Weight(Priority.DISABLED)
    weight.update_value(9999)
    assert weight.value() == 0


def test_supported_chain_holds_weight():
    weight = Weight(Priority.LOW)
    chain = SupportedChain("eip155:1", weight)
    assert chain.weight is weight
    assert chain.chain_id == "eip155:1"


def test_provider_config_endpoints():
    config = ProviderConfig(
        ProviderKind.BASE,
        supported_chains={"eip155:8453": ("https://base.example.com", Weight(Priority.NORMAL))},
        supported_ws_chains={"eip155:8453": ("wss://base.example.com", Weight(Priority.LOW))},
    )
    assert config.endpoints() == {"eip155:8453": "https://base.example.com"}
    assert config.ws_endpoints() == {"eip155:8453": "wss://base.example.com"}


def test_provider_chain_support():
    provider = StubProvider({"eip155:8453": "https://base.example.com"})
    assert Provider.supports_caip_chainid(provider, "eip155:8453") is True
    assert Provider.supports_caip_chainid(provider, "eip155:1") is False
    assert Provider.supported_caip_chains(provider) == ["eip155:8453"]
    assert Provider.provider_kind(provider) is ProviderKind.BASE


def test_provider_rate_limit_detection():
    provider = StubProvider({})
    assert Provider.is_rate_limited(provider, ProviderResponse(429)) is True
    assert Provider.is_rate_limited(provider, ProviderResponse(200)) is False
    assert Provider.is_rate_limited(provider, ProviderResponse(403)) is False


def test_provider_is_abstract():
    with pytest.raises(TypeError):
        Provider({})


def test_response_success_flag():
    assert ProviderResponse(204).is_success
    assert not ProviderResponse(502).is_success