"""
Router for platforms without a native implementation.
It only records and logs what it is asked to do.
"""
import logging
from typing import Optional

from router.base import Router
from router.config import RouterConfig

logger = logging.getLogger("router.fake")


class FakeRouter(Router):
    """
    Router that touches nothing on the host
    """

    def __init__(self, interface_name: str):
        super().__init__(interface_name)
        self.config: Optional[RouterConfig] = None

    def _up(self) -> None:
        logger.warning(f"No router implementation for this platform; {self.interface_name} is not configured")

    def _set(self, config: RouterConfig) -> None:
        logger.info(f"Set: addrs={[str(a) for a in config.local_addrs]} "
                    f"routes={[str(r) for r in config.routes]} "
                    f"nameservers={[str(s) for s in config.dns.nameservers]}")
        self.config = config

    def _close(self) -> None:
        pass


def cleanup(interface_name: str) -> None:
    """Nothing is ever configured, so nothing is left behind"""
