"""
Privilege checks for the network configuration manager.
Changing routes, resolver settings and firewall rules needs admin/root.
"""
import os
import ctypes
import logging


def check_admin_privileges() -> bool:
    """
    Check if the process is running with administrator/root privileges

    Returns:
        True if running with admin/root privileges, False otherwise
    """
    logger = logging.getLogger("router.permissions")

    if os.name == 'nt':  # Windows
        try:
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except (AttributeError, OSError) as e:
            logger.error(f"Error checking admin privileges: {e}")
            return False

    # Unix-like (Linux, macOS)
    return os.geteuid() == 0
