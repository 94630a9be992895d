"""
Tests for the DNS manager composition.
"""
import pytest

from router.config import DNSConfig
from router.dns.detect import BackendKind
from router.dns.direct import DirectApplier
from router.dns.manager import DNSManager
from router.dns.resolvconf import LegacyResolvconfApplier, OpenresolvApplier
from router.errors import BackendCallError

CONFIG = DNSConfig(nameservers=["10.0.0.53"], domains=["corp.example"])


class RecordingApplier:
    def __init__(self, kind, log, fail=None):
        self.kind = kind
        self.log = log
        self.fail = fail

    def up(self, config):
        self.log.append(("up", self.kind, config))
        if self.fail:
            raise self.fail

    def down(self):
        self.log.append(("down", self.kind))
        if self.fail:
            raise self.fail


class ScriptedManager(DNSManager):
    """Manager whose detection results are scripted"""

    def __init__(self, kinds, fail=None):
        self.detected = list(kinds)
        super().__init__("vpn0", detect=lambda path, timeout: self.detected.pop(0))
        self.log = []
        self.fail = fail

    def applier(self, kind):
        return RecordingApplier(kind, self.log, self.fail)


def test_up_delegates_to_detected_backend():
    manager = ScriptedManager([BackendKind.RESOLVED])

    manager.up(CONFIG)

    assert manager.log == [("up", BackendKind.RESOLVED, CONFIG)]


def test_down_detects_again():
    manager = ScriptedManager([BackendKind.RESOLVCONF_OPENRESOLV, BackendKind.DIRECT])

    manager.up(CONFIG)
    manager.down()

    assert manager.log == [
        ("up", BackendKind.RESOLVCONF_OPENRESOLV, CONFIG),
        ("down", BackendKind.DIRECT),
    ]
    assert manager.detected == []


def test_backend_failure_propagates():
    manager = ScriptedManager([BackendKind.DIRECT], fail=BackendCallError("write /etc/resolv.conf"))

    with pytest.raises(BackendCallError):
        manager.up(CONFIG)


def test_detection_is_passed_settings():
    seen = []
    manager = DNSManager("vpn0", resolv_conf="/tmp/resolv.conf", timeout=0.5,
                         detect=lambda path, timeout: seen.append((path, timeout)) or BackendKind.DIRECT)

    assert manager.detect() == BackendKind.DIRECT
    assert seen == [("/tmp/resolv.conf", 0.5)]


@pytest.mark.parametrize("kind,applier_type", [
    (BackendKind.DIRECT, DirectApplier),
    (BackendKind.RESOLVCONF_OPENRESOLV, OpenresolvApplier),
    (BackendKind.RESOLVCONF_LEGACY, LegacyResolvconfApplier),
])
def test_applier_for_kind(kind, applier_type):
    manager = DNSManager("vpn0", timeout=0.25)

    applier = manager.applier(kind)

    assert type(applier) is applier_type


def test_resolved_applier_uses_interface():
    from router.dns.resolved import ResolvedApplier

    applier = DNSManager("vpn7", timeout=0.25).applier(BackendKind.RESOLVED)

    assert isinstance(applier, ResolvedApplier)
    assert applier.interface_name == "vpn7"
    assert applier.timeout == 0.25


def test_direct_roundtrip_through_manager(tmp_path, fake_run, installed):
    resolv = tmp_path / "resolv.conf"
    resolv.write_text("nameserver 192.168.1.1\n")
    manager = DNSManager("vpn0", resolv_conf=str(resolv), backup_path=str(tmp_path / "backup"))

    manager.up(CONFIG)
    assert "nameserver 10.0.0.53" in resolv.read_text()

    manager.down()
    manager.down()
    assert resolv.read_text() == "nameserver 192.168.1.1\n"
