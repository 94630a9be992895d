"""
The Router contract shared by all platform implementations.
"""
import enum
import logging
from abc import ABC, abstractmethod
from typing import Optional

from router.config import SHUTDOWN_CONFIG, RouterConfig
from router.errors import RouterStateError

logger = logging.getLogger("router")


class RouterState(enum.Enum):
    CREATED = "created"
    UP = "up"
    CLOSED = "closed"


class Router(ABC):
    """
    Makes the operating system's routing and DNS match a RouterConfig.

    Lifecycle: Created -> up() -> set()* -> close(). Calls on one instance
    must be serialized by the caller.
    """

    def __init__(self, interface_name: str):
        """
        Initialize the router

        Args:
            interface_name: Name of the tunnel interface
        """
        self.interface_name = interface_name
        self.state = RouterState.CREATED

    def up(self) -> None:
        """
        Arm platform monitoring. Must succeed before tunnel traffic flows.

        Raises:
            RouterStateError: If called twice or after close()
            RouteMonitorError: If route monitoring cannot be registered
        """
        if self.state != RouterState.CREATED:
            raise RouterStateError(f"up() called in state {self.state.value}")
        self._up()
        self.state = RouterState.UP
        logger.info(f"Router for {self.interface_name} is up")

    def set(self, config: Optional[RouterConfig]) -> None:
        """
        Apply a configuration; None applies the shutdown configuration.

        Interface and route changes are applied before DNS. A DNS failure is
        raised but does not roll back the route changes.

        Raises:
            RouterStateError: If called after close()
            RouterError: If any part of the configuration fails to apply
        """
        if self.state == RouterState.CLOSED:
            raise RouterStateError("set() called on a closed router")
        if config is None:
            config = SHUTDOWN_CONFIG
        self._set(config)

    def close(self) -> None:
        """
        Disarm monitoring. Idempotent; DNS is left alone, so callers
        wanting a full teardown call set(None) first.
        """
        if self.state == RouterState.CLOSED:
            return
        self._close()
        self.state = RouterState.CLOSED
        logger.info(f"Router for {self.interface_name} closed")

    @abstractmethod
    def _up(self) -> None:
        pass

    @abstractmethod
    def _set(self, config: RouterConfig) -> None:
        pass

    @abstractmethod
    def _close(self) -> None:
        pass
