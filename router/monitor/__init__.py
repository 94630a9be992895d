"""
Route change monitoring. The platform modules (linux, windows) are
imported by the routers that use them.
"""

from router.monitor.base import RouteMonitor, POLL_INTERVAL

__all__ = [
    'RouteMonitor',
    'POLL_INTERVAL'
]
