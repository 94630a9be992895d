"""
Leading fields of the IP Helper MIB_IPFORWARD_ROW2 route row, enough to
tell default routes apart in route change notifications.
"""
import ctypes


class SOCKADDR_INET(ctypes.Union):
    # sockaddr_in / sockaddr_in6 / si_family; sockaddr_in6 is the largest (28 bytes)
    _fields_ = [
        ("Ipv4", ctypes.c_ubyte * 16),
        ("Ipv6", ctypes.c_uint32 * 7),
        ("si_family", ctypes.c_ushort),
    ]


class IP_ADDRESS_PREFIX(ctypes.Structure):
    _fields_ = [
        ("Prefix", SOCKADDR_INET),
        ("PrefixLength", ctypes.c_ubyte),
    ]


class MIB_IPFORWARD_ROW2_HEAD(ctypes.Structure):
    _fields_ = [
        ("InterfaceLuid", ctypes.c_uint64),
        ("InterfaceIndex", ctypes.c_uint32),
        ("DestinationPrefix", IP_ADDRESS_PREFIX),
    ]


def is_default_route_row(row) -> bool:
    """
    True if a notified route row is a default route

    Args:
        row: Address of a MIB_IPFORWARD_ROW2; None (no row, as in the
            initial notification) counts as a change
    """
    if not row:
        return True
    head = ctypes.cast(row, ctypes.POINTER(MIB_IPFORWARD_ROW2_HEAD)).contents
    return head.DestinationPrefix.PrefixLength == 0
