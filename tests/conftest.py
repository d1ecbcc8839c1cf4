"""
Pytest configuration and shared fixtures.
"""
import os

# Never pick up a developer's .env while testing (must be before any vyprovision imports).
os.environ["VYPROVISION_SKIP_DOTENV"] = "1"

import subprocess

import pytest

from vyprovision.config.config import Config
from vyprovision.runtime.shell import CommandRunner


class RecordingRunner(CommandRunner):
    """
    CommandRunner that records argv instead of executing anything.

    `responses` maps a command prefix (tuple) to (returncode, stdout).
    Unmatched commands succeed with empty output.
    """

    def __init__(self, responses=None):
        super().__init__()
        self.calls = []
        self.responses = dict(responses or {})

    def run(self, args, *, user=None, home=None, cwd=None, env=None, input=None, check=True, capture=False):
        argv = [str(a) for a in args]
        self.calls.append({
            "argv": argv,
            "user": user,
            "home": home,
            "cwd": cwd,
            "env": dict(env or {}),
            "input": input,
            "check": check,
        })
        returncode, stdout = 0, ""
        for prefix, response in self.responses.items():
            if tuple(argv[:len(prefix)]) == tuple(prefix):
                returncode, stdout = response
                break
        if returncode != 0 and check:
            from vyprovision.exceptions import ExternalCommandFailure
            raise ExternalCommandFailure(self.mask(" ".join(argv)), returncode, "")
        return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr="")

    @property
    def argvs(self):
        return [c["argv"] for c in self.calls]


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def config(tmp_path):
    """Config with every host path redirected into tmp_path."""
    return Config(
        installer={
            "install_dir": tmp_path / "opt" / "vymanager",
            "service_home": tmp_path / "var" / "lib" / "vymanager",
        },
        database={"pg_config_root": tmp_path / "etc" / "postgresql"},
        systemd={"unit_dir": tmp_path / "etc" / "systemd" / "system"},
        monitoring={"log_file": None},
    )


@pytest.fixture
def make_runner():
    """Factory for RecordingRunner with canned responses."""
    return RecordingRunner
