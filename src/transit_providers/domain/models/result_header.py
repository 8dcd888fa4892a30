"""Result header domain model."""

from dataclasses import dataclass
from datetime import datetime

from transit_providers.domain.models.network_id import NetworkId


@dataclass(frozen=True)
class ResultHeader:
    """Metadata about the backend that produced a result."""

    network: NetworkId
    server_product: str
    server_version: str | None = None
    server_name: str | None = None
    server_time: datetime | None = None
