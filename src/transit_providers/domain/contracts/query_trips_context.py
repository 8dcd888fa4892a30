"""Opaque continuation token for paging through trip searches."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from transit_providers.domain.models.network_id import NetworkId


@dataclass(frozen=True)
class QueryTripsContext(ABC):
    """Where in the search space a trips result sits.

    Callers only ask the two predicates and hand the context back to the
    provider that created it. Drivers subclass this with whatever payload they
    need to regenerate a page; instances are immutable and can be reused any
    number of times.
    """

    network: "NetworkId"

    @abstractmethod
    def can_query_earlier(self) -> bool:
        """Return True if earlier trips can be requested from this context."""
        ...

    @abstractmethod
    def can_query_later(self) -> bool:
        """Return True if later trips can be requested from this context."""
        ...

    @property
    def is_terminal(self) -> bool:
        return not (self.can_query_earlier() or self.can_query_later())


@dataclass(frozen=True)
class TerminalContext(QueryTripsContext):
    """Context of a result that cannot be paged in either direction."""

    def can_query_earlier(self) -> bool:
        return False

    def can_query_later(self) -> bool:
        return False
