"""
Common interface of the per-backend DNS appliers.
"""
from abc import ABC, abstractmethod

from router.config import DNSConfig

# Deadline for a single reconfiguration. Bus calls can hang indefinitely
# (e.g. after improper authentication), so every backend call is bounded.
DNS_RECONFIG_TIMEOUT = 1.0


class DNSApplier(ABC):
    """
    Pushes a DNSConfig into one DNS control mechanism and reverts it.

    Both operations are idempotent.
    """

    @abstractmethod
    def up(self, config: DNSConfig) -> None:
        """Install config, replacing whatever this applier installed before"""

    @abstractmethod
    def down(self) -> None:
        """Revert everything up() installed; succeeds if nothing was installed"""
