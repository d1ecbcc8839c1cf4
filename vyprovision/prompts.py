"""
Operator terminal interaction.

Prompts block without timeout. A blank answer applies the default shown in
brackets.
"""
from __future__ import annotations

import typer
from pydantic import ValidationError

from vyprovision.config.config import RouterConfig
from vyprovision.exceptions import ConfigurationError


def wait_for_operator(message: str = "Press ENTER once the VyOS commands are applied...") -> None:
    """Block until the operator presses ENTER."""
    typer.prompt(message, default="", show_default=False, prompt_suffix=" ")


def ask(label: str, default: str) -> str:
    answer = typer.prompt(f"{label} [{default}]", default="", show_default=False, prompt_suffix=": ")
    return answer.strip() or default


def ask_yes_no(label: str, default: bool) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = typer.prompt(f"{label} [{hint}]", default="", show_default=False, prompt_suffix=": ")
    answer = answer.strip().lower()
    if not answer:
        return default
    return answer == "y"


def collect_router_settings(defaults: RouterConfig) -> RouterConfig:
    """
    Ask for hostname, device label, HTTPS port and TLS verification.

    Raises:
        ConfigurationError: an answer is not acceptable (e.g. non-numeric port)
    """
    answers = {
        "hostname": ask("VyOS hostname/IP", defaults.hostname),
        "name": ask("VyOS device label", defaults.name),
        "port": ask("VyOS HTTPS port", str(defaults.port)),
        "verify_ssl": ask_yes_no("Verify VyOS SSL certificate?", defaults.verify_ssl),
    }
    try:
        return RouterConfig.model_validate({**defaults.model_dump(), **answers})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid VyOS connection settings:\n{e}") from e
