"""
Lookup helpers for the tunnel network interface.
"""
import socket

from router.errors import InterfaceNotReadyError


def interface_index(name: str) -> int:
    """
    Get the OS-level index of a network interface

    Args:
        name: Interface name (e.g. "vpn0")

    Returns:
        Interface index

    Raises:
        InterfaceNotReadyError: If the interface does not exist yet
    """
    try:
        return socket.if_nametoindex(name)
    except OSError:
        raise InterfaceNotReadyError(name) from None
