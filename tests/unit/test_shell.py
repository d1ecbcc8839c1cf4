"""Tests for vyprovision.runtime.shell."""
import sys

import pytest

from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.runtime.shell import CommandRunner

SECRET = "f" * 64


class TestBuildArgv:
    def test_plain(self):
        assert CommandRunner().build_argv(["git", "clone", 1]) == ["git", "clone", "1"]

    def test_as_user_with_home(self, tmp_path):
        argv = CommandRunner().build_argv(["npm", "install"], user="vymanager", home=tmp_path)
        assert argv == ["sudo", "-u", "vymanager", "env", f"HOME={tmp_path}", "npm", "install"]

    def test_preserve_env_names_only(self):
        argv = CommandRunner().build_argv(["psql"], user="postgres", preserve_env=["A", "B"])
        assert argv == ["sudo", "--preserve-env=A,B", "-u", "postgres", "psql"]


class TestRun:
    def test_success_captures_stdout(self):
        out = CommandRunner().output([sys.executable, "-c", "print('hello')"])
        assert out == "hello"

    def test_non_zero_raises(self):
        with pytest.raises(ExternalCommandFailure) as exc_info:
            CommandRunner().run([sys.executable, "-c", "import sys; sys.stderr.write('nope'); sys.exit(3)"])
        assert exc_info.value.returncode == 3
        assert "nope" in exc_info.value.stderr

    def test_non_zero_ignored_when_unchecked(self):
        result = CommandRunner().run([sys.executable, "-c", "import sys; sys.exit(2)"], check=False)
        assert result.returncode == 2

    def test_missing_program(self):
        with pytest.raises(ExternalCommandFailure) as exc_info:
            CommandRunner().run(["definitely-not-a-real-binary-vyprovision"])
        assert exc_info.value.returncode == 127

    def test_input_and_env(self):
        code = "import os, sys; print(os.environ['VYPROVISION_X'] + sys.stdin.read())"
        out = CommandRunner().output([sys.executable, "-c", code], env={"VYPROVISION_X": "a"}, input="b")
        assert out == "ab"

    def test_cwd(self, tmp_path):
        out = CommandRunner().output([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert out == str(tmp_path.resolve())

    def test_secrets_masked_in_failure(self):
        runner = CommandRunner(sensitive_values=[SECRET])
        code = f"import sys; sys.stderr.write('{SECRET}'); sys.exit(1)"
        with pytest.raises(ExternalCommandFailure) as exc_info:
            runner.run([sys.executable, "-c", code])
        assert SECRET not in str(exc_info.value)
        assert SECRET not in exc_info.value.command

    def test_add_sensitive(self):
        runner = CommandRunner()
        runner.add_sensitive(SECRET, "")
        assert runner.mask(f"key={SECRET}") == "key=***REDACTED***"
