"""Logging of outgoing backend requests, enabled by TRANSIT_LOG_REQUESTS."""

import json
import logging
import os
from typing import Any
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

LOG_REQUESTS_ENV = "TRANSIT_LOG_REQUESTS"
REDACTED = "***REDACTED***"
SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def should_log_requests() -> bool:
    """Check whether the TRANSIT_LOG_REQUESTS environment variable is set to true."""
    return os.getenv(LOG_REQUESTS_ENV, "").strip().lower() in ("true", "1", "yes")


def build_request_url(url: str, params: dict[str, Any] | None) -> str:
    """Append query parameters to a URL, sorted for stable output."""
    if not params:
        return url
    query = urlencode(sorted((k, v) for k, v in params.items() if v is not None))
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: Any = None,
) -> None:
    """Log a backend request if request logging is enabled.

    Args:
        method: HTTP method or, for non-HTTP clients, the library call name.
        url: Request URL or backend name.
        params: Query parameters or call arguments.
        headers: Request headers; credentials are redacted.
        payload: Request body.
    """
    if not should_log_requests():
        return

    lines = [f"{method} {build_request_url(url, params)}"]
    if headers:
        lines.append(f"Headers: {json.dumps(redact_headers(headers), indent=2)}")
    if payload is not None:
        try:
            body = json.dumps(payload, indent=2, default=str)
        except (TypeError, ValueError):
            body = str(payload)
        lines.append(f"Payload: {body}")

    logger.info("Backend request:\n" + "\n".join(lines))
