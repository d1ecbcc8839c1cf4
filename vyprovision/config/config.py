"""
Configuration models for the VyManager installer.

Uses Pydantic for validation and type safety. Defaults ship in config.yaml;
environment variables of the form VYPROVISION_<SECTION>__<FIELD> override them.
All sections are frozen: the loaded Config is built once and passed to every step.
"""
from typing import List, Literal, Optional, Tuple, Type
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
import yaml
from pathlib import Path
import os
import re

from vyprovision.exceptions import ConfigurationError

CONFIG_SCHEMA_VERSION = "2025-12-28"

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class InstallerConfig(BaseModel):
    """Install locations, service account and application source."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    install_dir: Path = Path("/opt/vymanager")
    service_user: str = "vymanager"
    service_home: Path = Path("/var/lib/vymanager")
    repo_url: str = "https://github.com/Community-VyProjects/VyManager.git"
    repo_branch: str = "beta"
    backend_port: int = Field(default=8000, ge=1, le=65535)
    frontend_port: int = Field(default=3000, ge=1, le=65535)

    @field_validator("service_user")
    @classmethod
    def validate_service_user(cls, v: str) -> str:
        if not re.fullmatch(r"[a-z_][a-z0-9_-]{0,31}", v):
            raise ValueError(f"invalid system user name: {v!r}")
        return v

    @property
    def backend_dir(self) -> Path:
        return self.install_dir / "backend"

    @property
    def frontend_dir(self) -> Path:
        return self.install_dir / "frontend"


class DatabaseConfig(BaseModel):
    """PostgreSQL role/database the application connects with."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "vymanager_auth"
    user: str = "vymanager"
    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    scheme: str = "postgresql"
    # Directory holding <version>/main/pg_hba.conf
    pg_config_root: Path = Path("/etc/postgresql")

    @field_validator("name", "user")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        # Keeps the role and database usable unquoted by the application's ORM.
        if not re.fullmatch(r"[a-z_][a-z0-9_]{0,62}", v):
            raise ValueError(f"invalid PostgreSQL identifier: {v!r}")
        return v


class RouterConfig(BaseModel):
    """VyOS router connection settings (operator prompts start from these)."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    hostname: str = "192.168.1.1"
    name: str = "vyos15"
    port: int = Field(default=443, ge=1, le=65535)
    verify_ssl: bool = False
    version: str = "1.5"
    protocol: Literal["http", "https"] = "https"

    @field_validator("hostname", "name")
    @classmethod
    def validate_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        if any(ch.isspace() for ch in v) or any(ch in v for ch in "'\"`$\\#="):
            raise ValueError(f"contains characters not allowed in an env value: {v!r}")
        return v


class PackagesConfig(BaseModel):
    """OS dependencies and Node.js runtime."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    apt_packages: List[str] = Field(default_factory=lambda: [
        "git", "curl", "ca-certificates", "gnupg", "build-essential",
        "python3", "python3-venv", "python3-pip",
        "postgresql", "postgresql-client",
    ])
    node_major: int = Field(default=24, ge=18)
    nodesource_url: str = "https://deb.nodesource.com/setup_{major}.x"

    @property
    def nodesource_setup_url(self) -> str:
        return self.nodesource_url.format(major=self.node_major)


class SystemdConfig(BaseModel):
    """Unit locations and names."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    unit_dir: Path = Path("/etc/systemd/system")
    backend_unit: str = "vymanager-backend.service"
    frontend_unit: str = "vymanager-frontend.service"


class MonitoringConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Optional[str] = "/var/log/vyprovision/install.log"


class Config(BaseSettings):
    """Main configuration class."""
    model_config = SettingsConfigDict(
        env_prefix="VYPROVISION_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    schema_version: str = CONFIG_SCHEMA_VERSION
    installer: InstallerConfig = Field(default_factory=InstallerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    systemd: SystemdConfig = Field(default_factory=SystemdConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from YAML (passed as init kwargs).
        return (env_settings, init_settings)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r") as f:
            raw_content = f.read()

        # Regex to find ${VAR} or $VAR
        pattern = re.compile(r'\$\{([^}]+)\}|\$([a-zA-Z_][a-zA-Z0-9_]*)')

        def replace_match(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))  # Return original if not found

        expanded_content = pattern.sub(replace_match, raw_content)
        config_dict = yaml.safe_load(expanded_content) or {}

        return cls(**config_dict)


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load and validate configuration.

    Args:
        config_path: Path to a YAML file. If None, uses the bundled config.yaml

    Returns:
        Validated, frozen Config object

    Raises:
        FileNotFoundError: If config file not found
        ConfigurationError: If configuration validation fails
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    from pydantic import ValidationError

    try:
        return Config.from_yaml(config_path)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n{e}") from e
