"""
Exception routes on Windows, managed with route.exe.
Kept apart from the Windows router so it has no Windows-only imports.
"""
import logging
from typing import Dict, Iterable, List, Set, Tuple

from router.command import run_command
from router.config import IPAddress

logger = logging.getLogger("router.windows")


def parse_default_routes(output: str) -> List[Tuple[str, str, int]]:
    """
    Parse the IPv4 default routes from "route print -4 0.0.0.0"

    Returns:
        List of (gateway, interface address, metric), lowest metric first
    """
    routes = []
    for line in output.splitlines():
        fields = line.split()
        if len(fields) != 5 or fields[0] != "0.0.0.0" or fields[1] != "0.0.0.0":
            continue
        try:
            metric = int(fields[4])
        except ValueError:
            continue
        routes.append((fields[2], fields[3], metric))
    routes.sort(key=lambda route: route[2])
    return routes


class EndpointRoutes:
    """
    Host routes that keep the VPN's own endpoints on the physical default
    route. Only IPv4 endpoints can be pinned.
    """

    def __init__(self):
        # endpoint -> gateway it is pinned to
        self.pinned: Dict[IPAddress, str] = {}

    def update(self, endpoints: Iterable[IPAddress], local_addrs: Set[str]) -> None:
        """
        Pin endpoints to the best default route not owned by the tunnel

        Routes that already point at the right gateway are left untouched,
        so calling this from a route change notification settles.

        Args:
            endpoints: Addresses that must bypass the tunnel
            local_addrs: The tunnel's own interface addresses
        """
        endpoints = list(endpoints)
        for endpoint in list(self.pinned):
            if endpoint not in endpoints:
                logger.info(f"Removing exception route for {endpoint}")
                run_command(["route", "delete", str(endpoint)], check=False)
                del self.pinned[endpoint]

        ipv4 = [ep for ep in endpoints if ep.version == 4]
        if len(ipv4) != len(endpoints):
            logger.warning("IPv6 endpoints are not pinned to the default route on Windows")
        if not ipv4:
            return

        _, output = run_command(["route", "print", "-4", "0.0.0.0"])
        defaults = [r for r in parse_default_routes(output)
                    if r[1] not in local_addrs and r[0] != "On-link"]
        if not defaults:
            logger.warning("No default route outside the tunnel")
            return
        gateway = defaults[0][0]

        for endpoint in ipv4:
            if self.pinned.get(endpoint) == gateway:
                continue
            logger.info(f"Routing {endpoint} via {gateway}")
            run_command(["route", "delete", str(endpoint)], check=False)
            run_command(["route", "add", str(endpoint), "mask", "255.255.255.255",
                         gateway, "metric", "1"])
            self.pinned[endpoint] = gateway
