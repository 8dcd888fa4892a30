"""MVG (Munich) driver."""

from transit_providers.adapters.mvg_api.mvg_provider import MvgProvider

__all__ = ["MvgProvider"]
