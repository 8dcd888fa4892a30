"""12-factor provider configuration from environment variables and TOML."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transit_providers.domain.models.network_id import NetworkId


class ProviderConfig(BaseSettings):
    """Backend-specific provider configuration.

    Every field can be set through a ``TRANSIT_``-prefixed environment
    variable, e.g. ``TRANSIT_ENDPOINT_OVERRIDE``. Unset optional fields fall
    back to the driver's defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    endpoint_override: str | None = Field(
        default=None, description="Base URL replacing the driver's default endpoint"
    )
    api_authorization: SecretStr | None = Field(
        default=None, description="Credential sent as Authorization header where supported"
    )
    request_timeout_seconds: float = Field(
        default=15.0, description="Total timeout for a single backend request in seconds"
    )
    num_trips_requested: int = Field(default=6, description="Number of trips per result page")
    min_request_delay_seconds: float = Field(
        default=0.0, description="Minimum delay between requests to the same host"
    )
    hafas_profile: str | None = Field(
        default=None, description="pyhafas profile name, e.g. 'db' or 'kvb'"
    )
    user_agent: str = Field(default="transit-providers", description="HTTP User-Agent header")

    @field_validator("endpoint_override")
    @classmethod
    def validate_endpoint_override(cls, v: str | None) -> str | None:
        """Reject blank endpoints and strip a trailing slash."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("endpoint_override cannot be blank")
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint_override must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("num_trips_requested")
    @classmethod
    def validate_num_trips(cls, v: int) -> int:
        if v < 1:
            raise ValueError("num_trips_requested must be at least 1")
        return v

    @field_validator("min_request_delay_seconds")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("min_request_delay_seconds cannot be negative")
        return v

    @field_validator("hafas_profile")
    @classmethod
    def validate_hafas_profile(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else None

    @property
    def authorization_header(self) -> str | None:
        if self.api_authorization is None:
            return None
        return self.api_authorization.get_secret_value()

    @classmethod
    def from_toml(cls, path: str | Path, network: NetworkId | str) -> "ProviderConfig":
        """Load the ``[providers.<network>]`` table of a TOML file.

        Values from the file take precedence over environment variables. A
        missing table yields a configuration from the environment alone.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the table is not a TOML table.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        key = NetworkId.parse(network).value
        section: Any = toml_data.get("providers", {}).get(key, {})
        if not isinstance(section, dict):
            raise ValueError(f"TOML config 'providers.{key}' must be a table")
        return cls(**section)
