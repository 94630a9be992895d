"""
Detection of the mechanism that currently owns system name resolution.
Evidence is read from the live system on every call and never cached.
"""
import enum
import ipaddress
import logging
import shutil
import subprocess

from router.dns.resolvconf_file import RESOLV_CONF, comment_block, read_config
from router.errors import ResolvConfError

logger = logging.getLogger("router.dns")

# Listen address of the systemd-resolved stub resolver. It is hard-coded
# into resolved, so there is no config option to read it from.
RESOLVED_STUB_ADDR = ipaddress.ip_address("127.0.0.53")

# Timeout for each probe command, in seconds
PROBE_TIMEOUT = 1.0

# Thomas Hood's resolvconf exits with this code on an unknown flag.
LEGACY_UNKNOWN_FLAG_EXIT = 99


class BackendKind(enum.Enum):
    """DNS control mechanisms the manager knows how to drive"""
    DIRECT = "direct"
    RESOLVCONF_OPENRESOLV = "resolvconf-openresolv"
    RESOLVCONF_LEGACY = "resolvconf-legacy"
    RESOLVED = "resolved"


def resolved_is_active(resolv_conf: str = RESOLV_CONF, timeout: float = PROBE_TIMEOUT) -> bool:
    """
    Check whether systemd-resolved exclusively owns the resolver file

    The service must be active AND the stub address must be the sole
    nameserver. If other nameservers are listed, resolved is merging
    per-link registrations (at least the link holding the default route)
    and the other servers could answer NXDOMAIN before we get a chance.

    Args:
        resolv_conf: Path to the resolver file
        timeout: Timeout for the service-manager query

    Returns:
        True if resolved should be driven over the bus
    """
    # resolved is never installed without systemd
    if shutil.which("systemctl") is None:
        return False

    # is-active exits with code 3 if the service is not active
    try:
        result = subprocess.run(
            ["systemctl", "is-active", "systemd-resolved"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"systemctl is-active failed: {e}")
        return False
    if result.returncode != 0:
        return False

    try:
        config = read_config(resolv_conf)
    except ResolvConfError as e:
        logger.debug(f"Cannot inspect resolver file: {e}")
        return False

    return list(config.nameservers) == [RESOLVED_STUB_ADDR]


def resolvconf_is_active(resolv_conf: str = RESOLV_CONF) -> bool:
    """
    Check whether the resolver file was generated by a resolvconf tool

    The binary being installed is not enough: it may be unused, or it may
    be the resolved compatibility shim, which does not honour exclusive
    mode. Only the provenance comment in the file proves ownership.
    """
    if shutil.which("resolvconf") is None:
        return False

    try:
        with open(resolv_conf, "r") as f:
            comments = comment_block(f)
    except OSError as e:
        logger.debug(f"Cannot read {resolv_conf}: {e}")
        return False

    return any("resolvconf" in line for line in comments)


def resolvconf_implementation(timeout: float = PROBE_TIMEOUT) -> BackendKind:
    """
    Tell the two resolvconf implementations apart

    The tool is invoked with a flag only openresolv understands. The
    legacy implementation rejects it with exit status 99; every other
    outcome, including a failure to run, is taken as openresolv.

    Returns:
        BackendKind.RESOLVCONF_LEGACY or BackendKind.RESOLVCONF_OPENRESOLV
    """
    try:
        result = subprocess.run(
            ["resolvconf", "-v"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"resolvconf probe failed: {e}")
        return BackendKind.RESOLVCONF_OPENRESOLV

    if result.returncode == LEGACY_UNKNOWN_FLAG_EXIT:
        return BackendKind.RESOLVCONF_LEGACY
    return BackendKind.RESOLVCONF_OPENRESOLV


def detect_backend(resolv_conf: str = RESOLV_CONF, timeout: float = PROBE_TIMEOUT) -> BackendKind:
    """
    Decide which mechanism currently owns name resolution

    Never raises: when no mechanism is proven active the result is
    BackendKind.DIRECT, meaning the resolver file is edited in place.

    Args:
        resolv_conf: Path to the resolver file
        timeout: Timeout for each probe command

    Returns:
        The detected BackendKind
    """
    if resolved_is_active(resolv_conf, timeout):
        kind = BackendKind.RESOLVED
    elif resolvconf_is_active(resolv_conf):
        kind = resolvconf_implementation(timeout)
    else:
        kind = BackendKind.DIRECT

    logger.debug(f"Detected DNS backend: {kind.value}")
    return kind
