"""
Tests for the router configuration values.
"""
import dataclasses
import ipaddress

import pytest

from router.config import SHUTDOWN_CONFIG, DNSConfig, NetfilterMode, RouterConfig


def test_from_dict():
    config = RouterConfig.from_dict({
        "local_addrs": ["100.64.0.2/32"],
        "routes": ["100.64.0.0/10", "0.0.0.0/0"],
        "subnet_routes": ["192.168.10.0/24"],
        "snat_subnet_routes": False,
        "netfilter_mode": "nodivert",
        "endpoints": ["203.0.113.10", "2001:db8::10"],
        "dns": {"nameservers": ["100.100.100.100"], "domains": ["corp.example"]},
    })

    assert config.local_addrs == (ipaddress.ip_interface("100.64.0.2/32"),)
    assert config.routes[1] == ipaddress.ip_network("0.0.0.0/0")
    assert config.subnet_routes == (ipaddress.ip_network("192.168.10.0/24"),)
    assert config.snat_subnet_routes is False
    assert config.netfilter_mode == NetfilterMode.NO_DIVERT
    assert config.endpoints[1] == ipaddress.ip_address("2001:db8::10")
    assert config.dns == DNSConfig(nameservers=["100.100.100.100"], domains=["corp.example"])


def test_empty_dict_is_shutdown_config():
    assert RouterConfig.from_dict({}) == SHUTDOWN_CONFIG
    assert SHUTDOWN_CONFIG == RouterConfig()
    assert SHUTDOWN_CONFIG.dns.is_empty()
    assert SHUTDOWN_CONFIG.netfilter_mode == NetfilterMode.OFF


@pytest.mark.parametrize("data", [
    {"routes": ["10.0.0.1/8"]},
    {"local_addrs": ["not-an-address"]},
    {"netfilter_mode": "maybe"},
    {"dns": {"nameservers": ["dns.example"]}},
])
def test_from_dict_rejects_malformed(data):
    with pytest.raises(ValueError):
        RouterConfig.from_dict(data)


def test_configs_are_immutable():
    config = RouterConfig(routes=["10.0.0.0/8"])

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.routes = ()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.dns.nameservers = ()


def test_equal_configs_are_interchangeable():
    a = DNSConfig(nameservers=["10.0.0.1"], domains=["a.example"])
    b = DNSConfig(nameservers=(ipaddress.ip_address("10.0.0.1"),), domains=("a.example",))

    assert a == b
    assert hash(a) == hash(b)


def test_dns_order_matters():
    assert DNSConfig(nameservers=["10.0.0.1", "10.0.0.2"]) != DNSConfig(nameservers=["10.0.0.2", "10.0.0.1"])
