# rpcproxy

Building blocks for a JSON-RPC proxy that sends requests on to upstream
blockchain node providers, picking one per chain by weight, and that checks
project access against a registry with a Redis cache in front.

## What is in it

- `rpcproxy.providers.core`: `ProviderKind`, `Priority` (`MAX`, `HIGH`,
  `NORMAL`, `LOW`, `DISABLED`, `Priority.custom(n)`), `Weight`,
  `ProviderConfig`, `ProviderResponse` and the abstract `Provider`.
- `rpcproxy.providers.jsonrpc`: providers that POST the request body to a
  per-chain endpoint: `BaseProvider`, `BinanceProvider`, `OmniatechProvider`,
  `PublicnodeProvider`, `ZKSyncProvider`.
- `rpcproxy.providers.gateways`: `PoktProvider` and `InfuraProvider`, whose
  URLs are built from a chain name and a project id and which turn selected
  JSON-RPC error codes into HTTP statuses (`-32603` to 500; for Pokt also
  `-32004` to 429), and `ZoraProvider`.
- `rpcproxy.providers.weights`: `Availability`, `parse_weights` (reads a
  Prometheus vector query result), `calculate_chain_weight`, `update_values`,
  `record_values`.
- `rpcproxy.providers.repository`: `ProviderRepository`, which registers
  providers, chooses one for a chain at random in proportion to the weights, and
  refreshes the weights from Prometheus with `update_weights`.
- `rpcproxy.registry`: `Registry` (cache first, then a `RegistryClient`;
  errors other than retryable ones are cached as well) and the abstract
  `RegistryClient`.
- `rpcproxy.project_storage`, `rpcproxy.project_data`: the cache of lookup
  outcomes under keys `project-data/<id>`, and the `ProjectData` records.
- `rpcproxy.storage`: MessagePack `serialize`/`deserialize`,
  `KeyValueStorage`, `RedisAddr` and `RedisStorage` with separate read and
  write pools.
- `rpcproxy.state`: `AppState` with `validate_project_access`,
  `validate_project_access_and_quota` and `update_provider_weights`.
- `rpcproxy.metrics`, `rpcproxy.project_metrics`: in-process `Counter`,
  `Histogram` and `Meter`, the service's `Metrics` and `ProjectDataMetrics`.
- `rpcproxy.project_config`: `RegistryConfig` and `StorageConfig`.
- `rpcproxy.network`: `find_public_ip_addr`, `is_public_ip_addr`,
  `get_forwarded_ip` (first address of `X-Forwarded-For`).
- `rpcproxy.build`: `CompileInfo`, `BuildInfo`, `GitInfo` read from
  environment variables.
- `rpcproxy.errors`: `RpcError` and its subclasses.

## Installation

```
pip install rpcproxy
```

With the test extra:

```
pip install "rpcproxy[test]"
pytest
```

## Examples

Weights:

```python
from rpcproxy.providers.core import Priority, Weight
from rpcproxy.providers.weights import Availability, calculate_chain_weight

# A chain at 75% success, on a provider at about 71% success.
print(calculate_chain_weight(Availability(75, 25), Availability(125, 50)))  # 51

weight = Weight(Priority.HIGH)   # starts at 75
weight.update_value(100)
print(weight.value())            # 150
```

A weight starts at its priority value (0 to 100). `update_value` stores the
given value scaled by priority, with `NORMAL` (50) leaving it unchanged.

Routing:

```python
from rpcproxy.providers.core import Priority, ProviderConfig, ProviderKind, Weight
from rpcproxy.providers.jsonrpc import PublicnodeProvider
from rpcproxy.providers.repository import ProviderRepository, ProvidersConfig

repo = ProviderRepository(
    ProvidersConfig(infura_project_id="infura-project", pokt_project_id="pokt-project")
)
repo.add_provider(
    PublicnodeProvider,
    ProviderConfig(
        ProviderKind.PUBLICNODE,
        supported_chains={"eip155:1": ("ethereum", Weight(Priority.NORMAL))},
    ),
)
provider = repo.get_provider_for_chain_id("eip155:1")
print(provider.endpoint("eip155:1"))  # https://ethereum.publicnode.com
# await provider.proxy("eip155:1", body) returns a ProviderResponse
```

Project checks:

```python
import asyncio

from rpcproxy.metrics import Metrics
from rpcproxy.providers.repository import ProviderRepository, ProvidersConfig
from rpcproxy.registry import Registry
from rpcproxy.state import AppState


async def main() -> None:
    state = AppState(
        providers=ProviderRepository(ProvidersConfig("infura-project", "pokt-project")),
        metrics=Metrics(),
        registry=Registry(),  # no client: every project is enabled with its id as key
    )
    await state.validate_project_access_and_quota("my-project")


asyncio.run(main())
```

## What it does not do

- There is no HTTP or websocket server, no request handlers and no command to
  start one; the package provides the parts such a server would call.
- Websocket relaying is not included. `ProviderConfig.supported_ws_chains` is
  carried but no provider uses it.
- There is no concrete registry client; `RegistryClient` must be implemented to
  talk to a real project registry.
- There are no transaction-history or portfolio providers, and no identity
  lookups beyond the metrics that count them.
- Metrics are kept in memory and are not exported.