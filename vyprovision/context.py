"""
Immutable state shared by every installer step.
"""
from __future__ import annotations

from dataclasses import dataclass

from vyprovision.config.config import Config, RouterConfig
from vyprovision.credentials import CredentialSet


@dataclass(frozen=True)
class InstallContext:
    """Built once after the operator prompts; passed to each step as-is."""

    config: Config
    credentials: CredentialSet
    router: RouterConfig
    server_ip: str

    @property
    def frontend_url(self) -> str:
        return f"http://{self.server_ip}:{self.config.installer.frontend_port}"

    @property
    def backend_url(self) -> str:
        return f"http://{self.server_ip}:{self.config.installer.backend_port}"

    @property
    def docs_url(self) -> str:
        return f"{self.backend_url}/docs"
