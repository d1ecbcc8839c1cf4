"""
Host preconditions.

This module is intentionally dependency-light so the CLI can call it before
loading configuration or generating any credential.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from vyprovision.exceptions import PrivilegeError
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)


def require_root(geteuid: Optional[Callable[[], int]] = None) -> None:
    """
    Fail fast unless running as root.

    Must be the first thing the installer does: nothing has been mutated yet.
    """
    euid = (geteuid or os.geteuid)()
    if euid != 0:
        raise PrivilegeError("Run this installer as root (sudo).")


def detect_server_ip(runner: CommandRunner) -> str:
    """
    First address reported by `hostname -I`, or "localhost" if unavailable.
    """
    result = runner.run(["hostname", "-I"], check=False, capture=True)
    addresses = (result.stdout or "").split() if result.returncode == 0 else []
    if not addresses:
        logger.warning("Could not detect server IP, using localhost")
        return "localhost"
    return addresses[0]
