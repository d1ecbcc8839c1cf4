"""
OS packages and the Node.js runtime.
"""
from __future__ import annotations

import requests

from vyprovision.config.config import PackagesConfig
from vyprovision.constants import DOWNLOAD_TIMEOUT
from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def install_os_packages(packages: PackagesConfig, runner: CommandRunner) -> None:
    runner.run(["apt-get", "update", "-y"], env=APT_ENV)
    runner.run(["apt-get", "install", "-y", *packages.apt_packages], env=APT_ENV)


def fetch_nodesource_setup(url: str) -> str:
    """Download the nodesource repository setup script."""
    try:
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ExternalCommandFailure(f"GET {url}", 1, str(e)) from e
    return response.text


def install_nodejs(packages: PackagesConfig, runner: CommandRunner) -> tuple[str, str]:
    """
    Replace distro nodejs/npm with the nodesource build.

    Returns:
        (node version, npm version)
    """
    # Absent on a fresh host; a failure here is expected.
    runner.run(["apt-get", "remove", "-y", "nodejs", "npm"], env=APT_ENV, check=False)

    script = fetch_nodesource_setup(packages.nodesource_setup_url)
    runner.run(["bash", "-"], input=script, env=APT_ENV)
    runner.run(["apt-get", "install", "-y", "nodejs"], env=APT_ENV)

    node_version = runner.output(["node", "-v"])
    npm_version = runner.output(["npm", "-v"])
    logger.info("Node.js installed", node=node_version, npm=npm_version)
    return node_version, npm_version
