import ipaddress

import pytest

from rpcproxy.network import (
    MultiplePublicAddressesError,
    PublicAddressNotFoundError,
    find_public_ip_addr,
    get_forwarded_ip,
    is_public_ip_addr,
)


@pytest.mark.parametrize(
    "addr",
    ["0.0.0.0", "127.0.0.1", "169.254.1.1", "172.16.5.4", "192.168.1.1", "198.51.100.7", "255.255.255.255"],
)
def test_reserved_addresses_not_public(addr):
    assert is_public_ip_addr(addr) is False


@pytest.mark.parametrize("addr", ["8.8.8.8", "1.1.1.1", "10.1.2.3"])
def test_public_addresses(addr):
    assert is_public_ip_addr(addr) is True


def test_ipv6_counts_as_public():
    assert is_public_ip_addr("::1") is True


def test_find_single_public():
    result = find_public_ip_addr(["127.0.0.1", "8.8.8.8", "192.168.0.2", "2001:db8::1"])
    assert result == ipaddress.IPv4Address("8.8.8.8")


def test_find_none_public():
    with pytest.raises(PublicAddressNotFoundError):
        find_public_ip_addr(["127.0.0.1", "192.168.0.2", "::1"])


def test_find_multiple_public():
    with pytest.raises(MultiplePublicAddressesError) as info:
        find_public_ip_addr(["8.8.8.8", "1.1.1.1"])
    assert str(info.value) == "machine has multiple public IP addresses"


def test_forwarded_ip_first_entry():
    headers = {"X-Forwarded-For": " 1.2.3.4 , 5.6.7.8"}
    assert get_forwarded_ip(headers) == ipaddress.ip_address("1.2.3.4")


def test_forwarded_ip_case_insensitive():
    assert get_forwarded_ip({"x-forwarded-for": "::1"}) == ipaddress.ip_address("::1")


def test_forwarded_ip_missing_or_invalid():
    assert get_forwarded_ip({}) is None
    assert get_forwarded_ip({"X-Forwarded-For": "garbage"}) is None