"""
Operator prompts: blank answers apply the defaults shown in brackets.
"""
import pytest
from typer.testing import CliRunner

from vyprovision.config.config import RouterConfig
from vyprovision.exceptions import ConfigurationError
from vyprovision.prompts import ask_yes_no, collect_router_settings, wait_for_operator


def _answer(text, fn, *args):
    with CliRunner().isolation(input=text):
        return fn(*args)


def test_blank_answers_apply_defaults():
    settings = _answer("\n\n\n\n", collect_router_settings, RouterConfig())
    assert settings.hostname == "192.168.1.1"
    assert settings.name == "vyos15"
    assert settings.port == 443
    assert settings.verify_ssl is False


def test_answers_override_defaults():
    settings = _answer("10.0.0.1\nedge01\n8443\ny\n", collect_router_settings, RouterConfig())
    assert settings.hostname == "10.0.0.1"
    assert settings.name == "edge01"
    assert settings.port == 8443
    assert settings.verify_ssl is True


def test_unchanged_fields_carry_over():
    defaults = RouterConfig(version="1.4", protocol="http")
    settings = _answer("\n\n\n\n", collect_router_settings, defaults)
    assert settings.version == "1.4"
    assert settings.protocol == "http"


def test_whitespace_answer_is_blank():
    settings = _answer("   \n\n\n\n", collect_router_settings, RouterConfig())
    assert settings.hostname == "192.168.1.1"


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port(port):
    with pytest.raises(ConfigurationError, match="VyOS"):
        _answer(f"\n\n{port}\n\n", collect_router_settings, RouterConfig())


def test_hostname_with_injection_rejected():
    with pytest.raises(ConfigurationError):
        _answer("host;rm=1\n\n\n\n", collect_router_settings, RouterConfig())


@pytest.mark.parametrize("answer,default,expected", [
    ("", False, False),
    ("", True, True),
    ("y", False, True),
    ("Y", False, True),
    ("yes", False, False),
    ("n", True, False),
    ("whatever", True, False),
])
def test_ask_yes_no(answer, default, expected):
    assert _answer(f"{answer}\n", ask_yes_no, "Verify?", default) is expected


def test_wait_for_operator_returns_on_enter():
    assert _answer("\n", wait_for_operator) is None
