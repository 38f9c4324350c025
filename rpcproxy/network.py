"""Helpers for finding public addresses and client IPs."""

from __future__ import annotations

import ipaddress
import socket
from collections.abc import Iterable, Mapping

import psutil

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

# Special-purpose IPv4 blocks; ranges nested inside a listed block are implied.
_RESERVED_BLOCKS: tuple[tuple[str, int], ...] = (
    ("0.0.0.0", 8),
    ("100.64.0.0", 10),
    ("127.0.0.0", 8),
    ("169.254.0.0", 16),
    ("172.16.0.0", 12),
    ("192.0.0.0", 24),
    ("192.0.2.0", 24),
    ("192.31.196.0", 24),
    ("192.52.193.0", 24),
    ("192.88.99.0", 24),
    ("192.168.0.0", 16),
    ("192.175.48.0", 24),
    ("198.18.0.0", 15),
    ("198.51.100.0", 24),
    ("203.0.113.0", 24),
    ("240.0.0.0", 4),
    ("255.255.255.255", 32),
)

_RESERVED_NETWORKS = tuple(
    ipaddress.IPv4Network(block) for block in _RESERVED_BLOCKS
)


class NetworkInterfaceError(Exception):
    """The machine's public address could not be determined."""


class PublicAddressNotFoundError(NetworkInterfaceError):
    def __init__(self) -> None:
        super().__init__("machine has no public IP address")


class MultiplePublicAddressesError(NetworkInterfaceError):
    def __init__(self) -> None:
        super().__init__("machine has multiple public IP addresses")


def _interface_addresses() -> Iterable[str]:
    for snics in psutil.net_if_addrs().values():
        yield from (snic.address for snic in snics if snic.family == socket.AF_INET)


def is_public_ip_addr(addr: str | IpAddress) -> bool:
    """True unless the address lies in a reserved IPv4 range."""
    ip = ipaddress.ip_address(addr)
    return all(ip not in network for network in _RESERVED_NETWORKS)


def _public_ipv4(candidates: Iterable[str | IpAddress]) -> Iterable[ipaddress.IPv4Address]:
    for candidate in candidates:
        try:
            ip = ipaddress.ip_address(candidate)
        except ValueError:
            continue
        if ip.version == 4 and is_public_ip_addr(ip):
            yield ip


def find_public_ip_addr(
    addresses: Iterable[str | IpAddress] | None = None,
) -> ipaddress.IPv4Address:
    """Return the single public IPv4 address among the given or local addresses."""
    source = _interface_addresses() if addresses is None else addresses
    found = list(_public_ipv4(source))
    if not found:
        raise PublicAddressNotFoundError()
    if len(found) > 1:
        raise MultiplePublicAddressesError()
    return found[0]


def get_forwarded_ip(headers: Mapping[str, str]) -> IpAddress | None:
    """The first client address of an X-Forwarded-For header, if valid."""
    header = next(
        (value for name, value in headers.items() if name.lower() == "x-forwarded-for"),
        None,
    )
    if header is None:
        return None
    client, _, _ = header.partition(",")
    try:
        return ipaddress.ip_address(client.strip())
    except ValueError:
        return None