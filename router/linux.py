"""
Linux implementation of the Router: rtnetlink for addresses and routes,
iptables for the firewall and the DNS manager for name resolution.
"""
import errno
import logging
import socket
import threading
from typing import Dict, Iterable, Optional, Set, Tuple

from pyroute2 import IPRoute, NetlinkError

from router.base import Router
from router.config import DNSConfig, IPAddress, IPInterface, IPNetwork, RouterConfig
from router.dns import DNSManager
from router.errors import BackendCallError, InterfaceNotReadyError, RouterError
from router.interfaces import interface_index
from router.monitor.base import POLL_INTERVAL
from router.monitor.linux import LinuxRouteMonitor
from router.netfilter import Netfilter

logger = logging.getLogger("router.linux")

# Errors meaning "already in the requested state"
_ALREADY_PRESENT = (errno.EEXIST,)
_ALREADY_ABSENT = (errno.ESRCH, errno.EADDRNOTAVAIL, errno.ENODEV, errno.ENOENT)


def tunnel_routes(routes: Iterable[IPNetwork]) -> Set[IPNetwork]:
    """
    Routes to install through the tunnel for the requested routes

    A default route is split into its two halves. They win over the host's
    default by prefix length and leave that default in place, so exception
    routes can still be pinned to it.
    """
    result: Set[IPNetwork] = set()
    for route in routes:
        if route.prefixlen == 0:
            result.update(route.subnets(new_prefix=1))
        else:
            result.add(route)
    return result


def _netlink_call(description: str, func, *args, tolerate: Tuple[int, ...] = (), **kwargs) -> None:
    try:
        func(*args, **kwargs)
    except NetlinkError as e:
        if e.code in tolerate:
            return
        raise BackendCallError(description, cause=str(e)) from e


class LinuxRouter(Router):
    """
    Router for Linux hosts
    """

    def __init__(self, interface_name: str,
                 dns: Optional[DNSManager] = None,
                 netfilter: Optional[Netfilter] = None,
                 poll_interval: float = POLL_INTERVAL):
        """
        Initialize the router

        Args:
            interface_name: Name of the tunnel interface
            dns: DNS manager (one for interface_name by default)
            netfilter: Firewall manager (one for interface_name by default)
            poll_interval: Cancellation check interval of the route monitor
        """
        super().__init__(interface_name)
        self.dns = dns or DNSManager(interface_name)
        self.netfilter = netfilter or Netfilter(interface_name)
        self.poll_interval = poll_interval
        self.monitor: Optional[LinuxRouteMonitor] = None

        self._ipr = IPRoute()
        self._addrs: Set[IPInterface] = set()
        self._routes: Set[IPNetwork] = set()
        # None until the first set(), so that even a shutdown config is applied once
        self._dns: Optional[DNSConfig] = None

        # Guards the netlink socket and endpoint state, shared with the monitor thread
        self._lock = threading.Lock()
        self._endpoints: Tuple[IPAddress, ...] = ()
        self._exception_routes: Dict[IPAddress, Tuple[Optional[str], int]] = {}

    def _up(self) -> None:
        self.monitor = LinuxRouteMonitor(self._reassert_exception_routes, self.poll_interval)
        self.monitor.register()

    def _set(self, config: RouterConfig) -> None:
        try:
            index = interface_index(self.interface_name)
        except InterfaceNotReadyError:
            if config.local_addrs or config.routes:
                raise
            # The interface is gone and took its addresses and routes with it
            index = None

        with self._lock:
            if index is None:
                self._addrs.clear()
                self._routes.clear()
            else:
                self._apply_addresses(index, set(config.local_addrs))
            self._endpoints = config.endpoints

        # Endpoints are pinned before any route can capture their traffic
        self._reassert_exception_routes()

        if index is not None:
            with self._lock:
                self._apply_routes(index, tunnel_routes(config.routes))

        self.netfilter.set(config)

        # Routes stay applied even if DNS fails below
        if config.dns != self._dns:
            if config.dns.is_empty():
                self.dns.down()
            else:
                self.dns.up(config.dns)
            self._dns = config.dns

    def _close(self) -> None:
        if self.monitor is not None:
            self.monitor.unregister()
            self.monitor = None
        with self._lock:
            self._ipr.close()

    def _apply_addresses(self, index: int, wanted: Set[IPInterface]) -> None:
        for addr in sorted(self._addrs - wanted, key=str):
            logger.info(f"Removing address {addr} from {self.interface_name}")
            _netlink_call(f"ip addr del {addr} dev {self.interface_name}",
                          self._ipr.addr, "del", index=index, address=str(addr.ip),
                          prefixlen=addr.network.prefixlen, tolerate=_ALREADY_ABSENT)
            self._addrs.discard(addr)

        for addr in sorted(wanted - self._addrs, key=str):
            logger.info(f"Adding address {addr} to {self.interface_name}")
            _netlink_call(f"ip addr add {addr} dev {self.interface_name}",
                          self._ipr.addr, "add", index=index, address=str(addr.ip),
                          prefixlen=addr.network.prefixlen, tolerate=_ALREADY_PRESENT)
            self._addrs.add(addr)

    def _apply_routes(self, index: int, wanted: Set[IPNetwork]) -> None:
        for route in sorted(self._routes - wanted, key=str):
            logger.info(f"Removing route {route} via {self.interface_name}")
            _netlink_call(f"ip route del {route} dev {self.interface_name}",
                          self._ipr.route, "del", dst=str(route), oif=index,
                          tolerate=_ALREADY_ABSENT)
            self._routes.discard(route)

        for route in sorted(wanted - self._routes, key=str):
            logger.info(f"Adding route {route} via {self.interface_name}")
            _netlink_call(f"ip route replace {route} dev {self.interface_name}",
                          self._ipr.route, "replace", dst=str(route), oif=index)
            self._routes.add(route)

    def _default_route(self, family: int, exclude_index: Optional[int]) -> Optional[Tuple[Optional[str], int]]:
        """
        Find the best default route not going through the tunnel

        Returns:
            Tuple of (gateway or None, output interface index), or None
            if there is no such route
        """
        best = None
        best_metric = None
        for route in self._ipr.get_default_routes(family=family):
            oif = route.get_attr("RTA_OIF")
            if oif is None or oif == exclude_index:
                continue
            metric = route.get_attr("RTA_PRIORITY") or 0
            if best_metric is None or metric < best_metric:
                best = (route.get_attr("RTA_GATEWAY"), oif)
                best_metric = metric
        return best

    def _reassert_exception_routes(self) -> None:
        """
        Pin host routes for our own endpoints to the pre-VPN default route,
        so tunnel transport traffic never enters the tunnel itself.
        Runs on the caller's thread from set() and on the monitor thread.
        """
        with self._lock:
            try:
                tun_index = interface_index(self.interface_name)
            except InterfaceNotReadyError:
                tun_index = None

            wanted = set(self._endpoints)
            for endpoint in list(self._exception_routes):
                if endpoint not in wanted:
                    logger.info(f"Removing exception route for {endpoint}")
                    _netlink_call(f"ip route del {endpoint}",
                                  self._ipr.route, "del", dst=f"{endpoint}/{endpoint.max_prefixlen}",
                                  tolerate=_ALREADY_ABSENT)
                    del self._exception_routes[endpoint]

            defaults = {}
            for endpoint in self._endpoints:
                family = socket.AF_INET if endpoint.version == 4 else socket.AF_INET6
                if family not in defaults:
                    defaults[family] = self._default_route(family, tun_index)
                via = defaults[family]
                if via is None:
                    logger.warning(f"No default route outside the tunnel for {endpoint}")
                    continue
                gateway, oif = via
                if self._exception_routes.get(endpoint) != via:
                    logger.info(f"Routing {endpoint} via {gateway or 'link'} (ifindex {oif})")
                kwargs = {"oif": oif}
                if gateway:
                    kwargs["gateway"] = gateway
                _netlink_call(f"ip route replace {endpoint}",
                              self._ipr.route, "replace",
                              dst=f"{endpoint}/{endpoint.max_prefixlen}", **kwargs)
                self._exception_routes[endpoint] = via


def cleanup(interface_name: str) -> None:
    """
    Remove state a previous, crashed run may have left behind

    Args:
        interface_name: Name of the tunnel interface
    """
    try:
        DNSManager(interface_name).down()
    except RouterError as e:
        logger.warning(f"DNS cleanup failed: {e}")

    try:
        Netfilter(interface_name).delete_all()
    except RouterError as e:
        logger.warning(f"Netfilter cleanup failed: {e}")
