"""
Custom exception hierarchy for the installer.

Hierarchy:

    ProvisioningError (base)
    ├── PrivilegeError            — not root, abort before any mutation
    ├── EntropySourceUnavailable  — CSPRNG unreadable, abort before any artifact
    ├── ExternalCommandFailure    — an external tool exited non-zero
    └── ConfigurationError        — invalid operator input or config value

Rules:
    - Every ProvisioningError is fatal. The CLI reports it on stderr and
      exits non-zero. Nothing is retried and nothing is rolled back.
    - Everything else (AttributeError, TypeError, etc.): let crash.
"""
from __future__ import annotations

from typing import Sequence


class ProvisioningError(Exception):
    """Base exception for all installer errors."""
    pass


class PrivilegeError(ProvisioningError):
    """Raised when the process lacks root privileges."""
    pass


class EntropySourceUnavailable(ProvisioningError):
    """The secure random source could not be read (or returned a short read).

    There is no fallback to a weaker source.
    """
    pass


class ExternalCommandFailure(ProvisioningError):
    """An invoked external tool (apt, psql, git, npm, ...) failed."""

    def __init__(self, command: Sequence[str] | str, returncode: int, stderr: str = ""):
        if isinstance(command, str):
            display = command
        else:
            display = " ".join(command)
        self.command = display
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit status {returncode}: {display}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class ConfigurationError(ProvisioningError):
    """Invalid configuration or operator input."""
    pass
