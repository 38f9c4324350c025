"""JSON-RPC proxy core: providers, weighted routing, project registry, storage and metrics."""

__version__ = "0.1.0"