"""
DNS applier for systemd-resolved, driven over the system D-Bus.
Nameservers and search domains are registered per link, addressed by
interface index.
"""
import logging
import socket
import time
from typing import Any, List, Tuple

from jeepney import DBusAddress, new_method_call
from jeepney.io.blocking import open_dbus_connection
from jeepney.wrappers import DBusErrorResponse, unwrap_msg

from router.config import DNSConfig, IPAddress
from router.dns.base import DNS_RECONFIG_TIMEOUT, DNSApplier
from router.errors import BackendCallError
from router.interfaces import interface_index

logger = logging.getLogger("router.dns")

RESOLVED_NAME = "org.freedesktop.resolve1"
RESOLVED_PATH = "/org/freedesktop/resolve1"
RESOLVED_MANAGER_IFACE = RESOLVED_NAME + ".Manager"

RESOLVED = DBusAddress(RESOLVED_PATH, bus_name=RESOLVED_NAME, interface=RESOLVED_MANAGER_IFACE)

# resolved expects the Linux address family numbers on the wire.
AF_INET = 2
AF_INET6 = 10


def link_nameservers(nameservers: Tuple[IPAddress, ...]) -> List[Tuple[int, bytes]]:
    """
    Encode nameservers as resolved (family, address bytes) records
    """
    records = []
    for server in nameservers:
        family = AF_INET if server.version == 4 else AF_INET6
        records.append((family, server.packed))
    return records


def link_domains(domains: Tuple[str, ...]) -> List[Tuple[str, bool]]:
    """
    Encode search domains as resolved (domain, routing-only) records

    Our domains are used for full resolution, never as routing hints only.
    """
    return [(domain, False) for domain in domains]


class ResolvedApplier(DNSApplier):
    """
    Registers the tunnel link's DNS configuration with resolved
    """

    def __init__(self, interface_name: str, timeout: float = DNS_RECONFIG_TIMEOUT):
        """
        Initialize the applier

        Args:
            interface_name: Name of the tunnel interface
            timeout: Overall deadline for one up() or down() in seconds
        """
        self.interface_name = interface_name
        self.timeout = timeout

    def up(self, config: DNSConfig) -> None:
        index = interface_index(self.interface_name)
        deadline = time.monotonic() + self.timeout

        with self._connect() as conn:
            self._call(conn, deadline, "SetLinkDNS", "ia(iay)",
                       (index, link_nameservers(config.nameservers)))
            self._call(conn, deadline, "SetLinkDomains", "ia(sb)",
                       (index, link_domains(config.domains)))

        logger.info(f"Registered DNS for link {self.interface_name} (index {index}) with resolved")

    def down(self) -> None:
        index = interface_index(self.interface_name)
        deadline = time.monotonic() + self.timeout

        with self._connect() as conn:
            self._call(conn, deadline, "RevertLink", "i", (index,))

        logger.info(f"Reverted DNS for link {self.interface_name} (index {index})")

    def _connect(self):
        try:
            return open_dbus_connection(bus="SYSTEM", auth_timeout=self.timeout)
        except (OSError, ValueError) as e:
            raise BackendCallError("connect system bus", cause=str(e)) from e

    def _call(self, conn, deadline: float, method: str, signature: str, body: Tuple[Any, ...]) -> None:
        """
        Call a resolved manager method, bounded by the shared deadline
        """
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise BackendCallError(method, cause=f"timed out after {self.timeout}s")

        msg = new_method_call(RESOLVED, method, signature, body)
        try:
            reply = conn.send_and_get_reply(msg, timeout=remaining)
            unwrap_msg(reply)
        except (TimeoutError, socket.timeout) as e:
            raise BackendCallError(method, cause=f"timed out after {self.timeout}s") from e
        except DBusErrorResponse as e:
            raise BackendCallError(method, cause=f"{e.name}: {' '.join(map(str, e.data))}") from e
        except OSError as e:
            raise BackendCallError(method, cause=str(e)) from e
