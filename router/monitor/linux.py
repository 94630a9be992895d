"""
Linux route monitor: listens on the rtnetlink route multicast groups.
"""
import logging
import select
from typing import Callable, Optional

from pyroute2 import IPRoute
from pyroute2.netlink.rtnl import RTMGRP_IPV4_ROUTE, RTMGRP_IPV6_ROUTE

from router.monitor.base import POLL_INTERVAL, RouteMonitor

logger = logging.getLogger("router.monitor")

ROUTE_EVENTS = ("RTM_NEWROUTE", "RTM_DELROUTE")


def is_default_route_event(msg) -> bool:
    """True for a netlink message adding or removing a default route"""
    return msg.get("event") in ROUTE_EVENTS and msg.get("dst_len") == 0


class LinuxRouteMonitor(RouteMonitor):
    """
    Fires the handler whenever a default route is added or removed
    """

    def __init__(self, handler: Callable[[], None], poll_interval: float = POLL_INTERVAL):
        super().__init__(handler, poll_interval)
        self._ipr: Optional[IPRoute] = None

    def _open(self) -> None:
        ipr = IPRoute()
        try:
            ipr.bind(groups=RTMGRP_IPV4_ROUTE | RTMGRP_IPV6_ROUTE)
        except Exception:
            ipr.close()
            raise
        self._ipr = ipr

    def _wait_for_change(self, timeout: float) -> bool:
        ipr = self._ipr
        if ipr is None:
            return False

        readable, _, _ = select.select([ipr], [], [], timeout)
        if not readable:
            return False

        messages = ipr.get()
        changed = any(is_default_route_event(msg) for msg in messages)
        if changed:
            logger.debug("Default route changed")
        return changed

    def _close(self) -> None:
        if self._ipr is not None:
            self._ipr.close()
            self._ipr = None
