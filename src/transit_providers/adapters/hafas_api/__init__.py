"""HAFAS driver built on pyhafas."""

from transit_providers.adapters.hafas_api.hafas_provider import HafasProvider

__all__ = ["HafasProvider"]
