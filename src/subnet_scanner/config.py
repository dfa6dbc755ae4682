"""Configuration management for Subnet Scanner."""

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScanConfig(BaseModel):
    """Configuration for subnet scans."""

    port: int = Field(default=25565, ge=1, le=65535, description="TCP port probed on every host.")
    probe_timeout_seconds: float = Field(default=0.2, gt=0, le=30, description="Timeout for a single connection attempt.")
    max_workers: int = Field(default=50, ge=1, le=1024, description="Maximum number of probes in flight at once.")
    default_prefix: int = Field(default=24, ge=1, le=30, description="CIDR prefix used when none is given or it cannot be parsed.")
    default_address: str = Field(default="192.168.1.1", description="Base address used when none is given.")
    drain_interval_seconds: float = Field(default=0.05, gt=0, le=5, description="Period of the update consumer loop.")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: Literal["console", "json"] = Field(default="console", description="Log format")
    file: Optional[Path] = Field(default=None, description="Log file path")


class Config(BaseSettings):
    """Main configuration. Loads from environment variables prefixed with SUBNET_SCANNER_."""

    model_config = SettingsConfigDict(
        env_prefix='SUBNET_SCANNER_',
        env_nested_delimiter='__',  # e.g., SUBNET_SCANNER_SCAN__PORT
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    scan: ScanConfig = Field(default_factory=ScanConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    app_name: str = Field(default="SubnetScanner", description="Name used in log context.")
    app_version: str = Field(default="0.1.0", description="Version of the scanner software.")

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.

        Environment variables are not layered on top; `Config()` is the
        environment-driven constructor.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
