"""Diagnostic details attached to non-OK results."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Out-of-band detail about why a query failed.

    Travels next to the status enumeration; never replaces it.
    """

    model_config = ConfigDict(frozen=True)

    reason: str
    status_code: int | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorDetails":
        status_code = getattr(exc, "status_code", None) or getattr(exc, "status", None)
        reason = str(getattr(exc, "reason", None) or exc) or type(exc).__name__
        return cls(reason=reason, status_code=status_code if isinstance(status_code, int) else None)
