"""
FastAPI backend: virtualenv, dependencies and .env.
"""
from __future__ import annotations

import shutil

from vyprovision.constants import (
    BACKEND_ENV_EXAMPLE,
    BACKEND_ENV_FILE,
    VYOS_API_PROTOCOL,
    VYOS_API_VERSION,
)
from vyprovision.context import InstallContext
from vyprovision.envfile import update_env_file
from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)


def backend_env_updates(ctx: InstallContext) -> dict[str, str]:
    """Keys replaced in the backend's .env (copied from .env.example)."""
    router = ctx.router
    return {
        "VYOS_NAME": router.name,
        "VYOS_HOSTNAME": router.hostname,
        "VYOS_APIKEY": ctx.credentials.api_key,
        "VYOS_VERSION": VYOS_API_VERSION,
        "VYOS_PROTOCOL": VYOS_API_PROTOCOL,
        "VYOS_PORT": str(router.port),
        "VYOS_VERIFY_SSL": "true" if router.verify_ssl else "false",
    }


def setup_backend(ctx: InstallContext, runner: CommandRunner) -> None:
    installer = ctx.config.installer
    backend_dir = installer.backend_dir
    user = installer.service_user
    home = installer.service_home

    runner.run(["python3", "-m", "venv", "venv"], user=user, home=home, cwd=backend_dir)
    runner.run(["venv/bin/pip", "install", "--upgrade", "pip"], user=user, home=home, cwd=backend_dir)
    runner.run(["venv/bin/pip", "install", "-r", "requirements.txt"], user=user, home=home, cwd=backend_dir)

    env_path = backend_dir / BACKEND_ENV_FILE
    example_path = backend_dir / BACKEND_ENV_EXAMPLE
    try:
        shutil.copyfile(example_path, env_path)
    except OSError as e:
        raise ExternalCommandFailure(["cp", str(example_path), str(env_path)], 1, str(e)) from e
    update_env_file(env_path, backend_env_updates(ctx), owner=user)
    logger.info("Backend ready", path=str(backend_dir))
