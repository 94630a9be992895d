"""
DNS appliers driving the resolvconf command-line tool.
Two implementations exist in the wild (openresolv and Thomas Hood's
legacy resolvconf) with different command-line contracts.
"""
import logging
from abc import abstractmethod
from typing import List, Optional

from router.command import run_command
from router.config import DNSConfig
from router.dns.base import DNS_RECONFIG_TIMEOUT, DNSApplier
from router.dns.resolvconf_file import format_config

logger = logging.getLogger("router.dns")

# Named record submitted to resolvconf. The "tun" prefix matches the tun*
# rule of the legacy interface-order file, which sorts our record first.
RECORD_NAME = "tun-vpn.inet"


class ResolvconfApplier(DNSApplier):
    """
    Base for the resolvconf appliers: runs the tool with a bounded timeout
    """

    def __init__(self, record_name: str = RECORD_NAME, timeout: float = DNS_RECONFIG_TIMEOUT):
        """
        Initialize the applier

        Args:
            record_name: Name of the record submitted to resolvconf
            timeout: Timeout for each resolvconf invocation in seconds
        """
        self.record_name = record_name
        self.timeout = timeout

    @abstractmethod
    def _up_args(self) -> List[str]:
        """Command line submitting the record"""

    @abstractmethod
    def _down_args(self) -> List[str]:
        """Command line withdrawing the record"""

    def up(self, config: DNSConfig) -> None:
        stdin = format_config(config.nameservers, config.domains)
        self._run(self._up_args(), stdin)
        logger.info(f"Submitted resolvconf record {self.record_name}")

    def down(self) -> None:
        self._run(self._down_args())
        logger.info(f"Withdrew resolvconf record {self.record_name}")

    def _run(self, args: List[str], stdin: Optional[str] = None) -> None:
        run_command(args, stdin=stdin, timeout=self.timeout)


class OpenresolvApplier(ResolvconfApplier):
    """openresolv: supports interface metrics and exclusive mode"""

    def _up_args(self) -> List[str]:
        # Maximal priority (metric 0) and exclusive mode
        return ["resolvconf", "-m", "0", "-x", "-a", self.record_name]

    def _down_args(self) -> List[str]:
        # -f: do not fail if the record does not exist
        return ["resolvconf", "-f", "-d", self.record_name]


class LegacyResolvconfApplier(ResolvconfApplier):
    """
    Legacy resolvconf: no exclusive mode and no metrics.

    Queries may still leak to the nameservers of other interfaces. There is
    nothing to be done about that without rewriting other interfaces'
    records, which this applier does not touch.
    """

    def _up_args(self) -> List[str]:
        return ["resolvconf", "-a", self.record_name]

    def _down_args(self) -> List[str]:
        # No -f flag here; deleting an absent record already succeeds.
        return ["resolvconf", "-d", self.record_name]
