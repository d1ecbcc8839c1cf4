"""
Explicit dotenv loader.

Rules:
- `VYPROVISION_SKIP_DOTENV=1`: do not load anything.
- Otherwise: load `.env` then `.env.local` from the working directory
  (local overrides). Already exported variables are never replaced by `.env`.

This must remain dependency-light and MUST NOT import `vyprovision.config.config`.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


def _skip_dotenv() -> bool:
    return str(os.getenv("VYPROVISION_SKIP_DOTENV", "") or "").strip().lower() in ("1", "true", "yes", "on")


def load_dotenv_files(*, root: Path | None = None) -> list[Path]:
    """
    Load installer override files. Returns the files that were loaded.
    """
    if _skip_dotenv():
        return []

    root = root or Path.cwd()
    env_path = root / ".env"
    env_local_path = root / ".env.local"
    loaded = []

    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        loaded.append(env_path)

    if env_local_path.exists():
        load_dotenv(dotenv_path=env_local_path, override=True)
        loaded.append(env_local_path)

    return loaded
