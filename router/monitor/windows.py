"""
Windows route monitor built on NotifyRouteChange2 from the IP Helper API.
The native callback only signals an event object; the handler itself runs
on the monitor's worker thread.
"""
import ctypes
import logging
from ctypes import wintypes
from typing import Callable, Optional

# Try to import Windows-specific libraries
try:
    import win32event
    import win32api
except ImportError:
    raise ImportError("pywin32 library is required for Windows support. Please install it with: pip install pywin32")

from router.errors import RouteMonitorError
from router.monitor.base import POLL_INTERVAL, RouteMonitor
from router.monitor.mib import is_default_route_row

logger = logging.getLogger("router.monitor")

AF_UNSPEC = 0
NO_ERROR = 0

# VOID NETIOAPI_API_ (*PIPFORWARD_CHANGE_CALLBACK)(PVOID, PMIB_IPFORWARD_ROW2, MIB_NOTIFICATION_TYPE)
ROUTE_CHANGE_CALLBACK = ctypes.WINFUNCTYPE(None, ctypes.c_void_p, ctypes.c_void_p, ctypes.c_int)


class WindowsRouteMonitor(RouteMonitor):
    """
    Fires the handler whenever an IPv4/IPv6 default route changes
    """

    def __init__(self, handler: Callable[[], None], poll_interval: float = POLL_INTERVAL):
        super().__init__(handler, poll_interval)
        self._iphlpapi = ctypes.windll.iphlpapi
        self._changed = None
        self._handle: Optional[wintypes.HANDLE] = None
        # Must stay referenced for as long as the notification is registered
        self._native_callback = ROUTE_CHANGE_CALLBACK(self._on_route_change)

    def _on_route_change(self, context, row, notification_type) -> None:
        # Our own host routes also notify; only default routes matter
        if is_default_route_row(row):
            win32event.SetEvent(self._changed)

    def _open(self) -> None:
        self._changed = win32event.CreateEvent(None, False, False, None)

        handle = wintypes.HANDLE()
        result = self._iphlpapi.NotifyRouteChange2(
            AF_UNSPEC, self._native_callback, None, False, ctypes.byref(handle)
        )
        if result != NO_ERROR:
            win32api.CloseHandle(self._changed)
            self._changed = None
            raise RouteMonitorError(f"NotifyRouteChange2 failed with error {result}")

        self._handle = handle

    def _wait_for_change(self, timeout: float) -> bool:
        result = win32event.WaitForSingleObject(self._changed, int(timeout * 1000))
        return result == win32event.WAIT_OBJECT_0

    def _close(self) -> None:
        if self._handle is not None:
            # Blocks until any running native callback has returned
            result = self._iphlpapi.CancelMibChangeNotify2(self._handle)
            if result != NO_ERROR:
                logger.warning(f"CancelMibChangeNotify2 failed with error {result}")
            self._handle = None

        if self._changed is not None:
            win32api.CloseHandle(self._changed)
            self._changed = None
