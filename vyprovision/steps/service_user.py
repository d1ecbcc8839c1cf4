"""
System account that owns the checkout and runs both services.
"""
from __future__ import annotations

from vyprovision.config.config import InstallerConfig
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)


def service_user_exists(user: str, runner: CommandRunner) -> bool:
    return runner.run(["id", user], check=False, capture=True).returncode == 0


def ensure_service_user(installer: InstallerConfig, runner: CommandRunner) -> bool:
    """Create the service user unless present. Returns True if created."""
    if service_user_exists(installer.service_user, runner):
        logger.info("Service user already exists", user=installer.service_user)
        return False

    runner.run([
        "useradd", "-r", "-m",
        "-d", str(installer.service_home),
        "-s", "/usr/sbin/nologin",
        installer.service_user,
    ])
    logger.info("Service user created", user=installer.service_user, home=str(installer.service_home))
    return True
