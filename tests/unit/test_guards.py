"""Tests for vyprovision.runtime.guards."""
import pytest

from vyprovision.exceptions import PrivilegeError
from vyprovision.runtime.guards import detect_server_ip, require_root


def test_require_root_passes_for_uid_0():
    require_root(lambda: 0)


def test_require_root_rejects_regular_user():
    with pytest.raises(PrivilegeError, match="root"):
        require_root(lambda: 1000)


def test_require_root_defaults_to_process_euid(monkeypatch):
    monkeypatch.setattr("vyprovision.runtime.guards.os.geteuid", lambda: 1000)
    with pytest.raises(PrivilegeError):
        require_root()


def test_detect_server_ip_first_address(make_runner):
    runner = make_runner({("hostname", "-I"): (0, "10.1.2.3 172.17.0.1 fe80::1\n")})
    assert detect_server_ip(runner) == "10.1.2.3"


def test_detect_server_ip_fallback_on_failure(make_runner):
    runner = make_runner({("hostname", "-I"): (1, "")})
    assert detect_server_ip(runner) == "localhost"


def test_detect_server_ip_fallback_on_empty_output(make_runner):
    runner = make_runner({("hostname", "-I"): (0, "  \n")})
    assert detect_server_ip(runner) == "localhost"
