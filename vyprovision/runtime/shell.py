"""
External command execution.

Every package manager, database client, build tool and init-system call goes
through CommandRunner so that:
- a non-zero exit always raises ExternalCommandFailure (no partial-success runs),
- generated secrets are masked in logged command lines and error messages,
- tests can substitute a recording fake.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.monitoring.redaction import mask_values

logger = get_logger(__name__)


class CommandRunner:
    """Runs external commands synchronously, failing fast on non-zero exit."""

    def __init__(self, sensitive_values: Iterable[str] = ()):
        self._sensitive: list[str] = [v for v in sensitive_values if v]

    def add_sensitive(self, *values: str) -> None:
        self._sensitive.extend(v for v in values if v)

    def mask(self, text: str) -> str:
        return mask_values(text, self._sensitive)

    def build_argv(
        self,
        args: Sequence[str],
        *,
        user: Optional[str] = None,
        home: Optional[Path] = None,
        preserve_env: Sequence[str] = (),
    ) -> list[str]:
        """Prefix `args` with sudo (and HOME) when running as another user."""
        argv = [str(a) for a in args]
        if user is None:
            return argv
        prefix = ["sudo"]
        if preserve_env:
            prefix.append(f"--preserve-env={','.join(preserve_env)}")
        prefix += ["-u", user]
        if home is not None:
            prefix += ["env", f"HOME={home}"]
        return prefix + argv

    def run(
        self,
        args: Sequence[str],
        *,
        user: Optional[str] = None,
        home: Optional[Path] = None,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        input: Optional[str] = None,
        check: bool = True,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run a command to completion.

        Args:
            args: Program and arguments (no shell)
            user: Run as this user via sudo
            home: HOME for the target user
            cwd: Working directory
            env: Extra environment variables. When `user` is set they are
                carried across sudo by name, never on the command line.
            input: Text fed to stdin
            check: Raise ExternalCommandFailure on non-zero exit
            capture: Capture stdout (stderr is always captured)

        Returns:
            CompletedProcess with text output
        """
        argv = self.build_argv(args, user=user, home=home, preserve_env=sorted(env or {}))
        display = self.mask(" ".join(argv))
        logger.info("Running command", command=display, cwd=str(cwd) if cwd else None)

        proc_env = None
        if env:
            proc_env = dict(os.environ)
            proc_env.update(env)

        try:
            result = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                env=proc_env,
                input=input,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise ExternalCommandFailure(display, 127, str(e)) from e

        if result.returncode != 0:
            stderr = self.mask(result.stderr or "")
            if check:
                logger.error("Command failed", command=display, returncode=result.returncode)
                raise ExternalCommandFailure(display, result.returncode, stderr)
            logger.warning("Command failed (ignored)", command=display, returncode=result.returncode)

        return result

    def output(self, args: Sequence[str], **kwargs) -> str:
        """Run a command and return its stripped stdout."""
        result = self.run(args, capture=True, **kwargs)
        return (result.stdout or "").strip()
