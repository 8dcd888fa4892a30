"""Exceptions raised at the provider call boundary.

Operational outcomes (unknown station, no trips, backend down) are never
exceptions; they are encoded in the status of each result. The classes here
cover caller programming errors and the internal signal drivers use to report
transport failures to the shared provider base.
"""


class TransitProviderError(Exception):
    """Base exception for transit provider errors."""


class InvalidArgumentError(TransitProviderError, ValueError):
    """Raised when a caller passes arguments that violate an operation contract."""


class UnsupportedCapabilityError(TransitProviderError, NotImplementedError):
    """Raised when an operation is invoked on a provider lacking that capability."""


class ServiceUnavailableError(TransitProviderError):
    """Raised by drivers when the backend cannot be reached or answers garbage.

    Never escapes a provider: it is translated into a SERVICE_DOWN status.
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
