"""
Exception types for the network configuration manager.
Every failure in the router and DNS layers is reported as a RouterError subclass.
"""
from typing import List, Optional


class RouterError(Exception):
    """Base class for all router errors"""


class InterfaceNotReadyError(RouterError):
    """
    The tunnel interface is not (yet) visible to the operating system.

    This is a transient condition during startup; callers should retry
    after a backoff instead of treating it as a misconfiguration.
    """

    def __init__(self, interface_name: str):
        super().__init__(f"interface {interface_name} not ready")
        self.interface_name = interface_name


class BackendCallError(RouterError):
    """
    A DNS or routing backend call failed: a command exited non-zero,
    timed out, or a bus method returned an error.
    """

    def __init__(self, command: str, output: str = "", cause: Optional[str] = None):
        message = f"running {command}"
        if cause:
            message += f": {cause}"
        if output:
            message += f": {output.strip()}"
        super().__init__(message)
        self.command = command
        self.output = output

    @classmethod
    def for_args(cls, args: List[str], output: str = "", cause: Optional[str] = None) -> "BackendCallError":
        """Build an error for a subprocess invocation"""
        return cls(" ".join(args), output, cause)


class RouteMonitorError(RouterError):
    """Registering for route change notifications failed"""


class ResolvConfError(RouterError):
    """The resolver file could not be read or parsed"""


class RouterStateError(RouterError):
    """An operation was called in the wrong lifecycle state"""
