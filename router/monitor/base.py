"""
Cancellable subscription to default route changes.
Platform subclasses provide the OS event source; this class owns the
worker thread and the register/unregister lifecycle.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from router.errors import RouteMonitorError

logger = logging.getLogger("router.monitor")

# How long the worker waits for an event before checking for cancellation
POLL_INTERVAL = 1.0


class RouteMonitor(ABC):
    """
    Calls a handler on every route table change until unregistered.

    After unregister() returns, the handler is never invoked again, even if
    an OS event was already in flight. unregister() may be called any
    number of times, including from inside the handler.
    """

    def __init__(self, handler: Callable[[], None], poll_interval: float = POLL_INTERVAL):
        """
        Initialize the monitor

        Args:
            handler: Called (without arguments) on every route change
            poll_interval: Maximum time the worker blocks between
                cancellation checks, in seconds
        """
        self.handler = handler
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        # Held while the handler runs; reentrant so the handler can unregister
        self._dispatch_lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._registered = False

    @property
    def registered(self) -> bool:
        return self._registered

    def register(self) -> None:
        """
        Subscribe to route changes and start dispatching

        Raises:
            RouteMonitorError: If the OS subscription cannot be created
        """
        with self._lock:
            if self._registered:
                raise RouteMonitorError("route monitor already registered")

            try:
                self._open()
            except RouteMonitorError:
                raise
            except Exception as e:
                raise RouteMonitorError(f"registering for route changes: {e}") from e

            self._stop.clear()
            self._registered = True
            self._thread = threading.Thread(
                target=self._run, name=f"{type(self).__name__}", daemon=True
            )
            self._thread.start()

        logger.info("Route monitor registered")

    def unregister(self) -> None:
        """Stop dispatching and release the OS subscription; no-op if not registered"""
        with self._lock:
            if not self._registered:
                return
            self._registered = False
            self._stop.set()
            thread = self._thread
            self._thread = None

        # Wait for an in-flight handler call to finish
        with self._dispatch_lock:
            pass

        if thread is not None and thread is not threading.current_thread():
            thread.join()

        self._close()
        logger.info("Route monitor unregistered")

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                changed = self._wait_for_change(self.poll_interval)
            except Exception as e:
                if self._stop.is_set():
                    break
                logger.error(f"Route monitor event source failed: {e}")
                self._stop.wait(self.poll_interval)
                continue
            if changed:
                self._dispatch()

    def _dispatch(self) -> None:
        with self._dispatch_lock:
            if self._stop.is_set():
                return
            try:
                self.handler()
            except Exception as e:
                # Nobody to report to from the event thread; the next
                # route change retries.
                logger.error(f"Route change handler failed: {e}", exc_info=True)

    @abstractmethod
    def _open(self) -> None:
        """Create the OS subscription"""

    @abstractmethod
    def _wait_for_change(self, timeout: float) -> bool:
        """Block up to timeout seconds; True if a relevant route changed"""

    @abstractmethod
    def _close(self) -> None:
        """Release the OS subscription"""
