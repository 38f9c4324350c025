"""Upstream JSON-RPC providers, their weights and the repository that chooses among them."""