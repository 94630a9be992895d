"""
Windows implementation of the Router.
Addresses, routes and DNS servers are bound to the tunnel interface with
netsh; search domains go to the global SearchList in the registry.
"""
import logging
import threading
import winreg
from typing import Optional, Set, Tuple

from router.base import Router
from router.command import run_command
from router.config import DNSConfig, IPAddress, IPInterface, IPNetwork, RouterConfig
from router.errors import BackendCallError
from router.monitor.base import POLL_INTERVAL
from router.monitor.windows import WindowsRouteMonitor
from router.windows_routes import EndpointRoutes

logger = logging.getLogger("router.windows")

TCPIP_PARAMETERS = r"SYSTEM\CurrentControlSet\Services\Tcpip\Parameters"


class WindowsRouter(Router):
    """
    Router for Windows hosts
    """

    def __init__(self, interface_name: str, poll_interval: float = POLL_INTERVAL):
        super().__init__(interface_name)
        self.poll_interval = poll_interval
        self.monitor: Optional[WindowsRouteMonitor] = None

        self._addrs: Set[IPInterface] = set()
        self._routes: Set[IPNetwork] = set()
        self._dns: Optional[DNSConfig] = None
        self._saved_search_list: Optional[str] = None

        # Guards interface state shared with the monitor thread
        self._lock = threading.Lock()
        self._endpoints: Tuple[IPAddress, ...] = ()
        self._exception_routes = EndpointRoutes()

    def _up(self) -> None:
        # Keeps our own transport traffic on the old default route rather
        # than recursively through the tunnel.
        self.monitor = WindowsRouteMonitor(self._reassert_exception_routes, self.poll_interval)
        self.monitor.register()

    def _set(self, config: RouterConfig) -> None:
        with self._lock:
            self._apply_addresses(set(config.local_addrs))
            self._endpoints = config.endpoints

        # Endpoints are pinned before any route can capture their traffic
        self._reassert_exception_routes()

        with self._lock:
            self._apply_routes(set(config.routes))

        if config.dns != self._dns:
            self._apply_dns(config.dns)
            self._dns = config.dns

    def _close(self) -> None:
        if self.monitor is not None:
            self.monitor.unregister()
            self.monitor = None

    def _netsh(self, *args: str) -> None:
        run_command(["netsh", "interface", *args])

    def _apply_addresses(self, wanted: Set[IPInterface]) -> None:
        name = self.interface_name
        for addr in sorted(self._addrs - wanted, key=str):
            logger.info(f"Removing address {addr} from {name}")
            family = "ipv4" if addr.version == 4 else "ipv6"
            self._netsh(family, "delete", "address", name, f"address={addr.ip}")
            self._addrs.discard(addr)

        for addr in sorted(wanted - self._addrs, key=str):
            logger.info(f"Adding address {addr} to {name}")
            if addr.version == 4:
                self._netsh("ipv4", "add", "address", name, f"address={addr.ip}",
                            f"mask={addr.netmask}", "store=active")
            else:
                self._netsh("ipv6", "add", "address", name, f"address={addr}", "store=active")
            self._addrs.add(addr)

    def _apply_routes(self, wanted: Set[IPNetwork]) -> None:
        name = self.interface_name
        for route in sorted(self._routes - wanted, key=str):
            logger.info(f"Removing route {route} via {name}")
            family = "ipv4" if route.version == 4 else "ipv6"
            self._netsh(family, "delete", "route", f"prefix={route}", f"interface={name}")
            self._routes.discard(route)

        for route in sorted(wanted - self._routes, key=str):
            logger.info(f"Adding route {route} via {name}")
            family = "ipv4" if route.version == 4 else "ipv6"
            self._netsh(family, "add", "route", f"prefix={route}", f"interface={name}",
                        "metric=1", "store=active")
            self._routes.add(route)

    def _apply_dns(self, config: DNSConfig) -> None:
        name = self.interface_name
        for family, version in (("ipv4", 4), ("ipv6", 6)):
            servers = [server for server in config.nameservers if server.version == version]
            self._netsh(family, "set", "dnsservers", f"name={name}", "source=static",
                        "address=none", "register=none", "validate=no")
            for position, server in enumerate(servers, start=1):
                self._netsh(family, "add", "dnsservers", f"name={name}",
                            f"address={server}", f"index={position}", "validate=no")

        self._set_search_list(config.domains)
        logger.info(f"Applied DNS for {name}: {len(config.nameservers)} nameserver(s)")

    def _set_search_list(self, domains: Tuple[str, ...]) -> None:
        """
        Install search domains in front of the system SearchList and put
        the original list back when there are none.
        """
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, TCPIP_PARAMETERS, 0,
                                winreg.KEY_READ | winreg.KEY_SET_VALUE) as key:
                if self._saved_search_list is None:
                    try:
                        self._saved_search_list = winreg.QueryValueEx(key, "SearchList")[0]
                    except FileNotFoundError:
                        self._saved_search_list = ""

                if domains:
                    existing = [d for d in self._saved_search_list.split(",") if d]
                    value = ",".join(list(domains) + [d for d in existing if d not in domains])
                else:
                    value = self._saved_search_list
                    self._saved_search_list = None

                winreg.SetValueEx(key, "SearchList", 0, winreg.REG_SZ, value)
        except OSError as e:
            raise BackendCallError(f"set {TCPIP_PARAMETERS}\\SearchList", cause=str(e)) from e

    def _reassert_exception_routes(self) -> None:
        with self._lock:
            local = {str(addr.ip) for addr in self._addrs}
            self._exception_routes.update(self._endpoints, local)


def cleanup(interface_name: str) -> None:
    """DNS is interface-bound on Windows, so nothing outlives the interface"""
