"""
DNS applier that edits the resolver file directly.
Used only when no other mechanism is proven to own the file.
"""
import logging
import os
import shutil

from router.config import DNSConfig
from router.dns.base import DNSApplier
from router.dns.resolvconf_file import (
    GENERATED_HEADER, RESOLV_CONF, format_config, write_atomic
)
from router.errors import BackendCallError

logger = logging.getLogger("router.dns")

BACKUP_PATH = "/etc/resolv.pre-vpn-backup.conf"


class DirectApplier(DNSApplier):
    """
    Overwrites the resolver file with our configuration.

    The file has no conflict-resolution model, so the previous content is
    kept in a backup file and put back on down().
    """

    def __init__(self, resolv_conf: str = RESOLV_CONF, backup_path: str = BACKUP_PATH):
        """
        Initialize the applier

        Args:
            resolv_conf: Path to the resolver file
            backup_path: Where the pre-VPN resolver file is preserved
        """
        self.resolv_conf = resolv_conf
        self.backup_path = backup_path

    def up(self, config: DNSConfig) -> None:
        try:
            # Only the first up() takes a backup; later ones would save our own file.
            if not os.path.lexists(self.backup_path) and os.path.lexists(self.resolv_conf):
                logger.info(f"Backing up {self.resolv_conf} to {self.backup_path}")
                self._backup()

            content = GENERATED_HEADER + format_config(config.nameservers, config.domains)
            write_atomic(self.resolv_conf, content)
        except OSError as e:
            raise BackendCallError(f"write {self.resolv_conf}", cause=str(e)) from e

        logger.info(f"Wrote {len(config.nameservers)} nameserver(s) to {self.resolv_conf}")

    def _backup(self) -> None:
        # The resolver file stays in place until write_atomic swaps ours in
        if os.path.islink(self.resolv_conf):
            os.symlink(os.readlink(self.resolv_conf), self.backup_path)
        else:
            shutil.copy2(self.resolv_conf, self.backup_path)

    def down(self) -> None:
        if not os.path.lexists(self.backup_path):
            logger.debug("No resolver file backup, nothing to restore")
            return

        try:
            os.replace(self.backup_path, self.resolv_conf)
        except OSError as e:
            raise BackendCallError(f"restore {self.resolv_conf}", cause=str(e)) from e

        logger.info(f"Restored {self.resolv_conf} from {self.backup_path}")
