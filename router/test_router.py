"""
Tests for the Router lifecycle, platform selection and helpers.
"""
import pytest

import router
from router.base import RouterState
from router.config import RouterConfig
from router.errors import InterfaceNotReadyError, RouterStateError
from router.fake import FakeRouter
from router.interfaces import interface_index


def test_fake_router_lifecycle():
    r = FakeRouter("vpn0")
    assert r.state == RouterState.CREATED

    r.up()
    r.set(RouterConfig(routes=["10.0.0.0/8"]))
    assert r.config.routes[0].prefixlen == 8

    r.set(None)
    assert r.config == router.SHUTDOWN_CONFIG

    r.close()
    r.close()
    assert r.state == RouterState.CLOSED


def test_set_before_up_is_allowed():
    r = FakeRouter("vpn0")

    r.set(None)

    assert r.state == RouterState.CREATED


def test_closed_router_rejects_calls():
    r = FakeRouter("vpn0")
    r.close()

    with pytest.raises(RouterStateError):
        r.up()
    with pytest.raises(RouterStateError):
        r.set(None)


def test_platform_router_is_a_router():
    assert issubclass(router.PlatformRouter, router.Router)


def test_interface_index_of_missing_interface():
    with pytest.raises(InterfaceNotReadyError) as excinfo:
        interface_index("nosuchif0")

    assert excinfo.value.interface_name == "nosuchif0"
    assert isinstance(excinfo.value, router.RouterError)


def test_interface_index_of_loopback():
    assert interface_index("lo") > 0
