"""
Application checkout.
"""
from __future__ import annotations

import shutil

from vyprovision.config.config import InstallerConfig
from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)


def clone_repository(installer: InstallerConfig, runner: CommandRunner) -> None:
    """Fresh clone of the configured branch, owned by the service user."""
    if installer.install_dir.exists():
        logger.warning("Removing previous installation", path=str(installer.install_dir))
        try:
            shutil.rmtree(installer.install_dir)
        except OSError as e:
            raise ExternalCommandFailure(["rm", "-rf", str(installer.install_dir)], 1, str(e)) from e

    runner.run([
        "git", "clone",
        "--branch", installer.repo_branch,
        installer.repo_url,
        str(installer.install_dir),
    ])
    owner = f"{installer.service_user}:{installer.service_user}"
    runner.run(["chown", "-R", owner, str(installer.install_dir)])
    logger.info("Repository cloned", branch=installer.repo_branch, path=str(installer.install_dir))
