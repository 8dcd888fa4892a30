"""Configuration adapters."""

from transit_providers.adapters.config.provider_config import ProviderConfig

__all__ = ["ProviderConfig"]
