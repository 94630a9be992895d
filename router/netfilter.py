"""
Firewall (netfilter) rules for the tunnel interface on Linux.
Rules live in dedicated chains so they can be rebuilt or removed without
touching anyone else's rules.
"""
import logging
from typing import List, Tuple

from router.command import run_command
from router.config import NetfilterMode, RouterConfig

logger = logging.getLogger("router.netfilter")

# (table, our chain, built-in chain jumping to it)
CHAINS: Tuple[Tuple[str, str, str], ...] = (
    ("filter", "vpn-input", "INPUT"),
    ("filter", "vpn-forward", "FORWARD"),
    ("nat", "vpn-postrouting", "POSTROUTING"),
)


class Netfilter:
    """
    Applies a RouterConfig's netfilter mode with iptables

    Modes:
        on: chains are filled and hooked into the built-in chains
        nodivert: chains are filled but not hooked in; the administrator
            decides where to jump to them
        off: chains and jumps are removed
    """

    def __init__(self, interface_name: str, iptables: str = "iptables"):
        self.interface_name = interface_name
        self.iptables = iptables
        self.mode = NetfilterMode.OFF

    def _ipt(self, table: str, *args: str, check: bool = True) -> int:
        returncode, _ = run_command([self.iptables, "-w", "-t", table, *args], check=check)
        return returncode

    def _rules(self, config: RouterConfig) -> List[Tuple[str, str, List[str]]]:
        tun = self.interface_name
        rules = [
            ("filter", "vpn-input", ["-i", tun, "-j", "ACCEPT"]),
            ("filter", "vpn-forward", ["-i", tun, "-j", "ACCEPT"]),
            ("filter", "vpn-forward", ["-o", tun, "-m", "conntrack",
                                       "--ctstate", "RELATED,ESTABLISHED", "-j", "ACCEPT"]),
        ]
        if config.snat_subnet_routes:
            for subnet in config.subnet_routes:
                if subnet.version == 4:
                    rules.append(("nat", "vpn-postrouting", ["-d", str(subnet), "-j", "MASQUERADE"]))
        return rules

    def set(self, config: RouterConfig) -> None:
        """
        Bring the firewall in line with config.netfilter_mode

        Raises:
            BackendCallError: If an iptables command fails
        """
        mode = config.netfilter_mode
        if mode == NetfilterMode.OFF:
            if self.mode != NetfilterMode.OFF:
                self.delete_all()
            self.mode = mode
            return

        for table, chain, _ in CHAINS:
            # -S exits non-zero if the chain does not exist
            if self._ipt(table, "-S", chain, check=False) != 0:
                self._ipt(table, "-N", chain)
            self._ipt(table, "-F", chain)

        for table, chain, rule in self._rules(config):
            self._ipt(table, "-A", chain, *rule)

        for table, chain, parent in CHAINS:
            if mode == NetfilterMode.ON:
                self._add_jump(table, parent, chain)
            else:
                self._del_jump(table, parent, chain)

        if mode != self.mode:
            logger.info(f"Netfilter mode changed: {self.mode.value} -> {mode.value}")
        self.mode = mode

    def delete_all(self) -> None:
        """Remove our jumps and chains; tolerates their absence"""
        for table, chain, parent in CHAINS:
            self._del_jump(table, parent, chain)
            if self._ipt(table, "-S", chain, check=False) == 0:
                self._ipt(table, "-F", chain)
                self._ipt(table, "-X", chain)
        logger.info("Removed netfilter chains")

    def _add_jump(self, table: str, parent: str, chain: str) -> None:
        if self._ipt(table, "-C", parent, "-j", chain, check=False) != 0:
            self._ipt(table, "-I", parent, "1", "-j", chain)

    def _del_jump(self, table: str, parent: str, chain: str) -> None:
        while self._ipt(table, "-C", parent, "-j", chain, check=False) == 0:
            self._ipt(table, "-D", parent, "-j", chain)
