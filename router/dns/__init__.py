"""
DNS configuration for the tunnel: backend detection, per-backend
appliers and the manager composing them.
"""

from router.dns.detect import BackendKind, detect_backend
from router.dns.base import DNSApplier
from router.dns.direct import DirectApplier
from router.dns.resolvconf import OpenresolvApplier, LegacyResolvconfApplier
from router.dns.manager import DNSManager

__all__ = [
    'BackendKind',
    'detect_backend',
    'DNSApplier',
    'DirectApplier',
    'OpenresolvApplier',
    'LegacyResolvconfApplier',
    'DNSManager'
]
