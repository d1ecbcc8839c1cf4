"""
systemd units for the backend and frontend.

Units are rendered from (section, [(key, value), ...]) pairs; repeated keys
such as Environment= are kept in order.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence, Tuple

from vyprovision.config.config import Config
from vyprovision.constants import POSTGRES_SERVICE, UNIT_FILE_MODE
from vyprovision.exceptions import ConfigurationError
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)

UnitSections = Sequence[Tuple[str, Sequence[Tuple[str, str]]]]


def render_unit(sections: UnitSections) -> str:
    blocks = []
    for section, entries in sections:
        lines = [f"[{section}]"]
        for key, value in entries:
            if "\n" in value or "\r" in value:
                raise ConfigurationError(f"Unit value for {key} contains a line break")
            lines.append(f"{key}={value}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def backend_unit(config: Config) -> str:
    installer = config.installer
    backend_dir = installer.backend_dir
    venv_bin = backend_dir / "venv" / "bin"
    return render_unit([
        ("Unit", [
            ("Description", "VyManager Backend"),
            ("After", f"network.target {POSTGRES_SERVICE}.service"),
            ("Wants", f"{POSTGRES_SERVICE}.service"),
        ]),
        ("Service", [
            ("User", installer.service_user),
            ("WorkingDirectory", str(backend_dir)),
            ("Environment", f"PATH={venv_bin}"),
            ("ExecStart", f"{venv_bin}/python -m uvicorn app:app --host 0.0.0.0 --port {installer.backend_port}"),
            ("Restart", "always"),
        ]),
        ("Install", [
            ("WantedBy", "multi-user.target"),
        ]),
    ])


def frontend_unit(config: Config) -> str:
    installer = config.installer
    return render_unit([
        ("Unit", [
            ("Description", "VyManager Frontend"),
            ("After", f"network.target {config.systemd.backend_unit}"),
            ("Requires", config.systemd.backend_unit),
        ]),
        ("Service", [
            ("User", installer.service_user),
            ("WorkingDirectory", str(installer.frontend_dir)),
            ("Environment", "NODE_ENV=production"),
            ("Environment", f"PORT={installer.frontend_port}"),
            ("Environment", "HOSTNAME=0.0.0.0"),
            ("ExecStart", "/usr/bin/npm run start"),
            ("Restart", "always"),
        ]),
        ("Install", [
            ("WantedBy", "multi-user.target"),
        ]),
    ])


def _write_unit(path: Path, content: str) -> None:
    path.write_text(content)
    os.chmod(path, UNIT_FILE_MODE)
    logger.info("Unit written", path=str(path))


def install_units(config: Config, runner: CommandRunner) -> None:
    """Write both units, reload systemd, enable and start them."""
    unit_dir = config.systemd.unit_dir
    _write_unit(unit_dir / config.systemd.backend_unit, backend_unit(config))
    _write_unit(unit_dir / config.systemd.frontend_unit, frontend_unit(config))

    runner.run(["systemctl", "daemon-reload"])
    runner.run([
        "systemctl", "enable", "--now",
        config.systemd.backend_unit,
        config.systemd.frontend_unit,
    ])
