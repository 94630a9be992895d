"""
Desired network configuration for the tunnel interface.
These values are produced by the control plane and are immutable once built.
"""
import enum
import ipaddress
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class NetfilterMode(enum.Enum):
    """How much of the host firewall the router is allowed to manage"""
    OFF = "off"
    NO_DIVERT = "nodivert"
    ON = "on"


def _freeze(values: Optional[Iterable[Any]], convert) -> Tuple[Any, ...]:
    if values is None:
        return ()
    return tuple(convert(value) for value in values)


@dataclass(frozen=True)
class DNSConfig:
    """
    Nameservers and search domains to install for the tunnel.

    Both sequences are ordered. Equal configs are interchangeable.
    """
    nameservers: Tuple[IPAddress, ...] = ()
    domains: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "nameservers", _freeze(self.nameservers, ipaddress.ip_address))
        object.__setattr__(self, "domains", _freeze(self.domains, str))

    def is_empty(self) -> bool:
        """True if there is nothing to install"""
        return not self.nameservers and not self.domains


@dataclass(frozen=True)
class RouterConfig:
    """
    Full interface configuration: addresses, routes, firewall mode and DNS.

    A None config passed to Router.set() means SHUTDOWN_CONFIG.
    """
    local_addrs: Tuple[IPInterface, ...] = ()
    routes: Tuple[IPNetwork, ...] = ()
    subnet_routes: Tuple[IPNetwork, ...] = ()
    snat_subnet_routes: bool = True
    netfilter_mode: NetfilterMode = NetfilterMode.OFF
    endpoints: Tuple[IPAddress, ...] = ()
    dns: DNSConfig = field(default_factory=DNSConfig)

    def __post_init__(self):
        object.__setattr__(self, "local_addrs", _freeze(self.local_addrs, ipaddress.ip_interface))
        object.__setattr__(self, "routes", _freeze(self.routes, ipaddress.ip_network))
        object.__setattr__(self, "subnet_routes", _freeze(self.subnet_routes, ipaddress.ip_network))
        object.__setattr__(self, "endpoints", _freeze(self.endpoints, ipaddress.ip_address))
        object.__setattr__(self, "netfilter_mode", NetfilterMode(self.netfilter_mode))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouterConfig":
        """
        Build a config from its JSON representation

        Args:
            data: Dictionary with optional keys local_addrs, routes,
                subnet_routes, snat_subnet_routes, netfilter_mode,
                endpoints and dns ({"nameservers": [...], "domains": [...]})

        Returns:
            RouterConfig instance

        Raises:
            ValueError: If an address, network or mode is malformed
        """
        dns = data.get("dns") or {}
        return cls(
            local_addrs=data.get("local_addrs", ()),
            routes=data.get("routes", ()),
            subnet_routes=data.get("subnet_routes", ()),
            snat_subnet_routes=bool(data.get("snat_subnet_routes", True)),
            netfilter_mode=data.get("netfilter_mode", NetfilterMode.OFF.value),
            endpoints=data.get("endpoints", ()),
            dns=DNSConfig(
                nameservers=dns.get("nameservers", ()),
                domains=dns.get("domains", ()),
            ),
        )


# Applied when the caller passes no config: no addresses, no routes,
# no firewall rules and no DNS.
SHUTDOWN_CONFIG = RouterConfig()
