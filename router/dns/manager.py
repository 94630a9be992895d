"""
DNS manager: picks the backend that owns name resolution and drives it.
"""
import logging
from typing import Callable

from router.config import DNSConfig
from router.dns.base import DNS_RECONFIG_TIMEOUT, DNSApplier
from router.dns.detect import BackendKind, detect_backend
from router.dns.direct import BACKUP_PATH, DirectApplier
from router.dns.resolvconf import LegacyResolvconfApplier, OpenresolvApplier
from router.dns.resolvconf_file import RESOLV_CONF

logger = logging.getLogger("router.dns")


class DNSManager:
    """
    Single up()/down() contract over all DNS backends.

    The backend is detected again on every call: ownership of the resolver
    file can change between up() and down(), so down() may legitimately
    use a different backend than the up() before it.
    """

    def __init__(self, interface_name: str,
                 resolv_conf: str = RESOLV_CONF,
                 backup_path: str = BACKUP_PATH,
                 timeout: float = DNS_RECONFIG_TIMEOUT,
                 detect: Callable[..., BackendKind] = detect_backend):
        """
        Initialize the DNS manager

        Args:
            interface_name: Name of the tunnel interface
            resolv_conf: Path to the resolver file
            backup_path: Backup location used by the direct backend
            timeout: Deadline for each backend call in seconds
            detect: Backend detection function
        """
        self.interface_name = interface_name
        self.resolv_conf = resolv_conf
        self.backup_path = backup_path
        self.timeout = timeout
        self._detect = detect

    def applier(self, kind: BackendKind) -> DNSApplier:
        """
        Create the applier for a backend kind
        """
        if kind == BackendKind.RESOLVED:
            # Imported here: the bus client is only needed on resolved hosts.
            from router.dns.resolved import ResolvedApplier
            return ResolvedApplier(self.interface_name, timeout=self.timeout)
        if kind == BackendKind.RESOLVCONF_OPENRESOLV:
            return OpenresolvApplier(timeout=self.timeout)
        if kind == BackendKind.RESOLVCONF_LEGACY:
            return LegacyResolvconfApplier(timeout=self.timeout)
        return DirectApplier(self.resolv_conf, self.backup_path)

    def detect(self) -> BackendKind:
        """Take a fresh snapshot of the active backend"""
        return self._detect(self.resolv_conf, self.timeout)

    def up(self, config: DNSConfig) -> None:
        """
        Install config through the currently active backend

        Raises:
            InterfaceNotReadyError: If resolved is active and the tunnel
                interface does not exist yet
            BackendCallError: If the backend call fails or times out
        """
        kind = self.detect()
        logger.info(f"Applying DNS config via {kind.value}: "
                    f"nameservers={[str(s) for s in config.nameservers]} "
                    f"domains={list(config.domains)}")
        self.applier(kind).up(config)

    def down(self) -> None:
        """
        Revert DNS configuration through the currently active backend

        Raises:
            InterfaceNotReadyError: If resolved is active and the tunnel
                interface is gone
            BackendCallError: If the backend call fails or times out
        """
        kind = self.detect()
        logger.info(f"Reverting DNS config via {kind.value}")
        self.applier(kind).down()
