"""
CLI entrypoint for the VyManager installer.

Provides commands for install and secret.
"""
import typer
from typing import Optional
from pathlib import Path

from vyprovision.constants import SECRET_BYTES
from vyprovision.exceptions import ProvisioningError
from vyprovision.cli_output import print_critical_error
from vyprovision.monitoring.logger import get_logger

app = typer.Typer(
    name="vyprovision",
    help="VyManager installer for Ubuntu 24.04 LTS (no Docker)",
    add_completion=False,
)

logger = get_logger(__name__)


@app.callback()
def main():
    """VyManager installer."""
    from vyprovision.config.dotenv_loader import load_dotenv_files

    # Installer overrides from .env / .env.local (skip with VYPROVISION_SKIP_DOTENV=1).
    load_dotenv_files()


@app.command()
def install(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config file (defaults to the bundled config.yaml)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Path to log file (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print tracebacks on failure"),
):
    """
    Install VyManager (PostgreSQL, backend, frontend, systemd units).

    Must run as root. Prompts for the VyOS connection settings.

    Example:
        sudo vyprovision install
    """
    from vyprovision.config.config import load_config
    from vyprovision.installer import Installer
    from vyprovision.monitoring.logger import setup_logging
    from vyprovision.runtime.guards import require_root

    try:
        # Before config, logging or secrets: nothing may be touched without root.
        require_root()
        config = load_config(config_path)
    except FileNotFoundError as e:
        print_critical_error("Configuration not found", e)
        raise typer.Exit(1)
    except ProvisioningError as e:
        print_critical_error("Installation aborted", e, include_traceback=verbose)
        raise typer.Exit(1)

    setup_logging(
        config.monitoring.log_level,
        config.monitoring.log_format,
        str(log_file) if log_file else config.monitoring.log_file,
    )
    try:
        Installer(config).run()
    except ProvisioningError as e:
        logger.error("Installation aborted", error_type=type(e).__name__)
        print_critical_error("Installation aborted", e, include_traceback=verbose)
        raise typer.Exit(1)


@app.command()
def secret(
    nbytes: int = typer.Option(SECRET_BYTES, "--bytes", min=16, help="Random bytes (output is twice as many hex chars)"),
):
    """
    Print a fresh URL-safe (hex) secret.

    Example:
        vyprovision secret --bytes 32
    """
    from vyprovision.credentials import generate_secret

    try:
        typer.echo(generate_secret(nbytes))
    except ProvisioningError as e:
        print_critical_error("Secret generation failed", e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
