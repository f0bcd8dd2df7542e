"""
Configuration management for cert-tool.

Defaults are loaded from an optional YAML file, with environment variables
taking precedence.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("~/.config/cert-tool/config.yaml")


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(os.environ.get("CERTTOOL_CONFIG_FILE", DEFAULT_CONFIG_PATH)).expanduser()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


class SubjectConfig(BaseModel):
    """Distinguished name attributes shared by subject and issuer."""

    common_name: str = Field(default="localhost")
    country_name: str = Field(default="AU", min_length=2, max_length=2)
    state_or_province_name: str = Field(default="Victoria")
    locality_name: str = Field(default="Melbourne")
    organization_name: str = Field(default="PaperCut Software")
    organizational_unit_name: str = Field(default="Development")


class CertificateConfig(BaseModel):
    """Certificate construction defaults."""

    key_size: int = Field(default=2048, ge=1024, description="RSA key size in bits")
    validity_years: int = Field(default=1, ge=1, description="Calendar years until expiry")
    # Fixed serial; every generated certificate shares it
    serial_number: int = Field(default=1, ge=1)
    subject: SubjectConfig = Field(default_factory=SubjectConfig)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CERTTOOL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False, description="JSON logging instead of console output")

    output_dir: Path = Field(
        default=Path("certificates"),
        description="Directory for generated files, relative to the working directory",
    )
    default_file_name: str = Field(default="certificate", min_length=1)

    certificate: CertificateConfig = Field(default_factory=CertificateConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
