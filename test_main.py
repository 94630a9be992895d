"""
Tests for the command line entry point.
"""
import json

import pytest

import main
import router
from router.dns.detect import BackendKind


@pytest.fixture
def settings_path(tmp_path):
    path = tmp_path / "vpn-router.json"
    path.write_text(json.dumps({"logging": {"console": False}}))
    return str(path)


def test_detect_prints_backend(settings_path, monkeypatch, capsys):
    seen = []

    def fake_detect(resolv_conf, timeout):
        seen.append((resolv_conf, timeout))
        return BackendKind.RESOLVCONF_OPENRESOLV
    monkeypatch.setattr(main, "detect_backend", fake_detect)

    assert main.main(["--settings", settings_path, "detect"]) == 0

    assert capsys.readouterr().out == "resolvconf-openresolv\n"
    assert seen == [("/etc/resolv.conf", 1.0)]


def test_invalid_settings_exit_code(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"logging": {"console": False}, "dns": {"reconfig_timeout": -1}}))

    assert main.main(["--settings", str(path), "detect"]) == 2


def test_cleanup_requires_admin(settings_path, monkeypatch):
    monkeypatch.setattr(main, "check_admin_privileges", lambda: False)

    assert main.main(["--settings", settings_path, "cleanup"]) == 1


def test_cleanup_failure_exit_code(settings_path, monkeypatch):
    def failing_cleanup(interface_name):
        raise router.BackendCallError("iptables -w -t filter -X vpn-input", cause="exit status 1")
    monkeypatch.setattr(main, "check_admin_privileges", lambda: True)
    monkeypatch.setattr(router, "cleanup", failing_cleanup)

    assert main.main(["--settings", settings_path, "cleanup"]) == 1


def test_load_router_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"routes": ["100.64.0.0/10"], "netfilter_mode": "on"}))

    config = main.load_router_config(str(path))

    assert config.routes == router.RouterConfig(routes=["100.64.0.0/10"]).routes
    assert config.netfilter_mode == router.NetfilterMode.ON


def test_run_rejects_malformed_config(settings_path, tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"routes": ["not-a-network"]}))
    monkeypatch.setattr(main, "check_admin_privileges", lambda: True)

    assert main.main(["--settings", settings_path, "run", str(path)]) == 2
