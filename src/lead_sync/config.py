"""
Lead Sync Configuration System.

This module provides a type-safe configuration system using Pydantic.
Settings can be loaded from:
1. Environment variables (prefixed with LEAD_SYNC_)
2. Config file (TOML or JSON)
3. CLI arguments or request bodies (highest priority)

Example usage:
    from lead_sync.config import Settings

    # Load from environment
    settings = Settings()

    # Or with explicit values
    settings = Settings(
        amplemarket_api_token="am-token",
        instantly_api_key="inst-key",
    )
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lead_sync.errors import ConfigError

# Instantly accepts at most this many leads per add call
INSTANTLY_MAX_LEADS_PER_REQUEST = 1000


class SourceApiConfig(BaseModel):
    """Amplemarket API settings."""

    base_url: str = Field(
        default="https://api.amplemarket.com/v1",
        description="Amplemarket REST API base URL",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Items requested per page (page_size)",
    )


class DestinationApiConfig(BaseModel):
    """Instantly API settings."""

    base_url: str = Field(
        default="https://api.instantly.ai",
        description="Instantly REST API base URL",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Campaigns requested per page (limit)",
    )
    max_leads_per_request: int = Field(
        default=INSTANTLY_MAX_LEADS_PER_REQUEST,
        ge=1,
        le=INSTANTLY_MAX_LEADS_PER_REQUEST,
        description="Maximum leads sent in a single add call",
    )
    skip_if_in_workspace: bool = Field(
        default=True,
        description="Ask Instantly to skip leads already present in the workspace",
    )


class HttpConfig(BaseModel):
    """Transport settings shared by both API clients."""

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Read timeout for a single request",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request on rate limiting or connection errors",
    )


class SyncOptions(BaseModel):
    """Options controlling sync behavior."""

    dry_run: bool = Field(
        default=False,
        description="Fetch and transform but do not send leads",
    )
    track_processed: bool = Field(
        default=True,
        description="Skip lists already synced within the retention window",
    )
    state_file: Path = Field(
        default=Path(".lead-sync-state.json"),
        description="Path to the processed-lists state file",
    )
    retention_days: int = Field(
        default=30,
        ge=1,
        description="Days a processed marker is kept before the list is eligible again",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path (None = console only)",
    )
    format: str = Field(
        default="rich",
        pattern="^(rich|json|simple)$",
        description="Log format: rich (colored), json, or simple",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Max log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of rotated log files to keep",
    )


class Settings(BaseSettings):
    """
    Main settings class for Lead Sync.

    Settings are loaded in this priority (highest first):
    1. Explicit constructor arguments
    2. Environment variables (LEAD_SYNC_* prefix)
    3. Config file (if specified)
    4. Defaults

    Example:
        # From environment
        export LEAD_SYNC_AMPLEMARKET_API_TOKEN="am-token"
        export LEAD_SYNC_INSTANTLY_API_KEY="inst-key"
        settings = Settings()

        # From config file
        settings = Settings.from_file("config.toml")
    """

    model_config = SettingsConfigDict(
        env_prefix="LEAD_SYNC_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    amplemarket_api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Amplemarket bearer token",
    )
    instantly_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Instantly API key (v2 campaigns endpoint)",
    )
    instantly_v1_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Instantly v1 API key for lead import (defaults to instantly_api_key)",
    )

    # Nested configs
    source: SourceApiConfig = Field(default_factory=SourceApiConfig)
    destination: DestinationApiConfig = Field(default_factory=DestinationApiConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    sync: SyncOptions = Field(default_factory=SyncOptions)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator(
        "amplemarket_api_token",
        "instantly_api_key",
        "instantly_v1_api_key",
        mode="before",
    )
    @classmethod
    def validate_token(cls, v: Any) -> SecretStr:
        """Handle tokens from various sources."""
        if isinstance(v, SecretStr):
            return v
        if isinstance(v, str):
            return SecretStr(v.strip())
        return SecretStr("")

    @model_validator(mode="after")
    def default_v1_key(self) -> Self:
        """Fall back to the v2 key when no separate v1 key is configured."""
        if not self.instantly_v1_api_key.get_secret_value():
            self.instantly_v1_api_key = self.instantly_api_key
        return self

    @classmethod
    def from_file(cls, path: Path | str) -> "Settings":
        """Load settings from a TOML or JSON config file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        content = path.read_text()

        if path.suffix in (".toml", ".tml"):
            import tomllib

            data = tomllib.loads(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            raise ConfigError(f"Unsupported config format: {path.suffix}")

        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save current settings to a config file with credentials redacted."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)

        for key in ("amplemarket_api_token", "instantly_api_key", "instantly_v1_api_key"):
            if key in data:
                data[key] = "***REDACTED***"

        if path.suffix in (".toml", ".tml"):
            # Basic TOML serialization
            lines = []
            for key, value in data.items():
                if isinstance(value, dict):
                    lines.append(f"\n[{key}]")
                    for k, v in value.items():
                        lines.append(f"{k} = {json.dumps(v)}")
                else:
                    lines.append(f"{key} = {json.dumps(value)}")
            path.write_text("\n".join(lines))
        else:
            path.write_text(json.dumps(data, indent=2))

    def with_credentials(
        self,
        amplemarket_token: str | None = None,
        instantly_token: str | None = None,
    ) -> "Settings":
        """Return a copy with per-request credentials taking precedence."""
        update: dict[str, Any] = {}
        if amplemarket_token:
            update["amplemarket_api_token"] = SecretStr(amplemarket_token)
        if instantly_token:
            update["instantly_api_key"] = SecretStr(instantly_token)
            if self.instantly_v1_api_key == self.instantly_api_key:
                update["instantly_v1_api_key"] = SecretStr(instantly_token)
        if not update:
            return self
        return self.model_copy(update=update)

    def validate_credentials(self) -> list[str]:
        """Validate that required credentials are present. Returns list of errors."""
        errors = []
        if not self.amplemarket_api_token.get_secret_value():
            errors.append("amplemarket_api_token is required")
        if not self.instantly_api_key.get_secret_value():
            errors.append("instantly_api_key is required")
        return errors


def load_settings(
    config_file: Path | str | None = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings with optional config file and overrides.

    Args:
        config_file: Optional path to config file
        **overrides: Settings to override (highest priority)

    Returns:
        Configured Settings instance
    """
    if config_file:
        settings = Settings.from_file(config_file)
        if overrides:
            data = settings.model_dump()
            data.update(overrides)
            return Settings.model_validate(data)
        return settings
    return Settings(**overrides)
