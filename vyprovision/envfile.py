"""
Structured key=value writers for the application's .env files.

Values are never interpolated into a template: keys and values are validated
and written one line per pair, so operator input cannot inject extra lines.
"""
from __future__ import annotations

import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values, set_key

from vyprovision.constants import ENV_FILE_MODE
from vyprovision.exceptions import ConfigurationError, ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger

logger = get_logger(__name__)

_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FORBIDDEN_VALUE_CHARS = ("\n", "\r", "\x00")


def validate_pair(key: str, value: str) -> None:
    if not _KEY_RE.fullmatch(key):
        raise ConfigurationError(f"Invalid env key: {key!r}")
    if any(ch in value for ch in _FORBIDDEN_VALUE_CHARS):
        raise ConfigurationError(f"Value for {key} contains a line break or NUL")


def render_env(values: Mapping[str, str]) -> str:
    lines = []
    for key, value in values.items():
        validate_pair(key, value)
        lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


def _chown(path: Path, owner: str) -> None:
    try:
        shutil.chown(path, user=owner, group=owner)
    except LookupError as e:
        raise ConfigurationError(f"Unknown owner for {path}: {owner}") from e
    except OSError as e:
        raise ExternalCommandFailure(["chown", f"{owner}:{owner}", str(path)], 1, str(e)) from e


def write_env_file(path: Path, values: Mapping[str, str], *, owner: Optional[str] = None) -> Path:
    """
    Write a complete env file from scratch (atomic replace, mode 0600).
    """
    path = Path(path)
    content = render_env(values)
    try:
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".env.", suffix=".tmp")
    except OSError as e:
        raise ExternalCommandFailure(f"write {path}", 1, str(e)) from e
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_name, ENV_FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        if isinstance(e, OSError):
            raise ExternalCommandFailure(f"write {path}", 1, str(e)) from e
        raise

    if owner:
        _chown(path, owner)
    logger.info("Env file written", path=str(path), entries=list(values.keys()))
    return path


def update_env_file(path: Path, updates: Mapping[str, str], *, owner: Optional[str] = None) -> Path:
    """
    Overwrite `KEY=` lines for each key in `updates`; every other line is kept.

    Keys absent from the file are appended.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Env file not found: {path}")

    for key, value in updates.items():
        validate_pair(key, value)

    existing = dotenv_values(path, interpolate=False)
    missing = [k for k in updates if k not in existing]
    if missing:
        logger.warning("Env keys not present in file, appending", path=str(path), entries=missing)

    try:
        for key, value in updates.items():
            set_key(path, key, value, quote_mode="never")
        os.chmod(path, ENV_FILE_MODE)
    except OSError as e:
        raise ExternalCommandFailure(f"update {path}", 1, str(e)) from e

    if owner:
        _chown(path, owner)
    logger.info("Env file updated", path=str(path), entries=list(updates.keys()))
    return path
