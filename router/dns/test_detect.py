"""
Tests for DNS backend detection.
"""
import subprocess

import pytest

from router.dns.detect import (
    BackendKind, detect_backend, resolvconf_implementation, resolvconf_is_active,
    resolved_is_active
)

IS_ACTIVE = ["systemctl", "is-active", "systemd-resolved"]
PROBE = ["resolvconf", "-v"]


def test_resolvconf_generated_file_selects_resolvconf(fake_run, installed, resolv_conf):
    installed.add("resolvconf")
    path = resolv_conf("# Generated by resolvconf\nnameserver 10.0.0.1\n")

    kind = detect_backend(path)

    assert kind in (BackendKind.RESOLVCONF_OPENRESOLV, BackendKind.RESOLVCONF_LEGACY)


def test_resolved_stub_selects_resolved(fake_run, installed, resolv_conf):
    installed.add("systemctl")
    fake_run.on(IS_ACTIVE, returncode=0)
    path = resolv_conf("nameserver 127.0.0.53\n")

    assert detect_backend(path) == BackendKind.RESOLVED


def test_resolved_not_exclusive_owner(fake_run, installed, resolv_conf):
    installed.add("systemctl")
    fake_run.on(IS_ACTIVE, returncode=0)
    path = resolv_conf("nameserver 127.0.0.53\nnameserver 192.168.1.1\n")

    assert not resolved_is_active(path)
    assert detect_backend(path) == BackendKind.DIRECT


def test_resolved_service_inactive(fake_run, installed, resolv_conf):
    installed.add("systemctl")
    # is-active exits 3 for inactive units
    fake_run.on(IS_ACTIVE, returncode=3)
    path = resolv_conf("nameserver 127.0.0.53\n")

    assert detect_backend(path) == BackendKind.DIRECT


def test_resolved_without_systemctl(fake_run, installed, resolv_conf):
    path = resolv_conf("nameserver 127.0.0.53\n")

    assert not resolved_is_active(path)
    assert fake_run.calls == []


def test_resolved_service_query_timeout(fake_run, installed, resolv_conf):
    installed.add("systemctl")
    fake_run.on(IS_ACTIVE, raises=subprocess.TimeoutExpired(IS_ACTIVE, 1.0))
    path = resolv_conf("nameserver 127.0.0.53\n")

    assert not resolved_is_active(path)


def test_resolved_with_unparsable_file(fake_run, installed, resolv_conf):
    installed.add("systemctl")
    path = resolv_conf("nameserver not-an-address\n")

    assert not resolved_is_active(path)


def test_resolved_takes_priority_over_resolvconf(fake_run, installed, resolv_conf):
    installed.update({"systemctl", "resolvconf"})
    path = resolv_conf("# This file is managed by resolvconf\nnameserver 127.0.0.53\n")

    assert detect_backend(path) == BackendKind.RESOLVED


@pytest.mark.parametrize("content", [
    "nameserver 10.0.0.1\n# Generated by resolvconf\n",
    "nameserver 10.0.0.1\n",
    "# Written by hand\nsearch resolvconf.example\nnameserver 10.0.0.1\n",
    "",
])
def test_resolvconf_mention_outside_comment_block(fake_run, installed, resolv_conf, content):
    installed.add("resolvconf")
    path = resolv_conf(content)

    assert not resolvconf_is_active(path)
    assert detect_backend(path) == BackendKind.DIRECT


def test_resolvconf_comment_after_blank_line(installed, resolv_conf):
    installed.add("resolvconf")
    path = resolv_conf("# Dynamic resolv.conf(5) file\n\n# generated by resolvconf(8)\nnameserver 10.0.0.1\n")

    assert resolvconf_is_active(path)


def test_resolvconf_binary_missing(fake_run, installed, resolv_conf):
    path = resolv_conf("# Generated by resolvconf\nnameserver 10.0.0.1\n")

    assert not resolvconf_is_active(path)
    assert detect_backend(path) == BackendKind.DIRECT


def test_missing_resolver_file_defaults_to_direct(fake_run, installed, tmp_path):
    installed.update({"systemctl", "resolvconf"})

    assert detect_backend(str(tmp_path / "absent.conf")) == BackendKind.DIRECT


def test_probe_exit_99_is_legacy(fake_run):
    fake_run.on(PROBE, returncode=99)

    assert resolvconf_implementation() == BackendKind.RESOLVCONF_LEGACY


@pytest.mark.parametrize("returncode", [0, 1, 2, 98, 100, 127])
def test_probe_other_exit_is_openresolv(fake_run, returncode):
    fake_run.on(PROBE, returncode=returncode)

    assert resolvconf_implementation() == BackendKind.RESOLVCONF_OPENRESOLV


@pytest.mark.parametrize("error", [
    subprocess.TimeoutExpired(PROBE, 1.0),
    FileNotFoundError("resolvconf"),
])
def test_probe_failure_is_openresolv(fake_run, error):
    fake_run.on(PROBE, raises=error)

    assert resolvconf_implementation() == BackendKind.RESOLVCONF_OPENRESOLV


def test_legacy_detected_end_to_end(fake_run, installed, resolv_conf):
    installed.add("resolvconf")
    fake_run.on(PROBE, returncode=99)
    path = resolv_conf("# Dynamic resolv.conf(5) file for glibc resolver(3) generated by resolvconf(8)\n"
                       "nameserver 10.0.0.1\n")

    assert detect_backend(path) == BackendKind.RESOLVCONF_LEGACY
    assert PROBE in fake_run.calls
