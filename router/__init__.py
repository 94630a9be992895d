"""
Host network configuration for the VPN tunnel interface.
Selects the Router implementation for the running platform.
"""

import platform

from router.base import Router, RouterState
from router.config import DNSConfig, RouterConfig, NetfilterMode, SHUTDOWN_CONFIG
from router.errors import (
    RouterError, InterfaceNotReadyError, BackendCallError,
    RouteMonitorError, ResolvConfError, RouterStateError
)

# Export appropriate platform-specific modules
if platform.system() == 'Linux':
    from router.linux import LinuxRouter as PlatformRouter, cleanup
elif platform.system() == 'Windows':
    from router.windows import WindowsRouter as PlatformRouter, cleanup
else:
    from router.fake import FakeRouter as PlatformRouter, cleanup


def new_router(interface_name: str, **options) -> Router:
    """
    Create the Router for this platform

    Args:
        interface_name: Name of the tunnel interface
        **options: Platform-specific options (e.g. dns, poll_interval on Linux)

    Returns:
        Router instance in the Created state
    """
    return PlatformRouter(interface_name, **options)


__all__ = [
    'Router',
    'RouterState',
    'DNSConfig',
    'RouterConfig',
    'NetfilterMode',
    'SHUTDOWN_CONFIG',
    'RouterError',
    'InterfaceNotReadyError',
    'BackendCallError',
    'RouteMonitorError',
    'ResolvConfError',
    'RouterStateError',
    'PlatformRouter',
    'new_router',
    'cleanup'
]
