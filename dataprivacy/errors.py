"""Custom exception hierarchy for dataprivacy.

All dataprivacy-specific exceptions derive from DataPrivacyError. Each
exception carries an optional ``context`` dict with structured metadata
(request URL, flag name, config key, etc.) that the CLI error handler
can render.

Exception hierarchy::

    DataPrivacyError
    ├── TransportError
    │   └── EmptyResponseError
    ├── ResponseParseError
    ├── FlagUnavailableError
    └── ConfigError
"""
from __future__ import annotations

from typing import Optional


class DataPrivacyError(Exception):
    """Base class for all dataprivacy exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Network Errors ─────────────────────────────────────────────────

class TransportError(DataPrivacyError):
    """Raised when a request fails at the HTTP layer.

    Covers connection errors, timeouts and non-2xx responses. ``body``
    holds whatever the server sent back, if anything.
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status_code: Optional[int] = None,
        body: str = "",
    ):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(
            message,
            context={"url": url, "status_code": status_code},
        )

    def describe(self) -> str:
        """Return the message, suffixed with the response body when present."""
        message = str(self) or "Empty response"
        if self.body:
            message += f": {self.body}"
        return message


class EmptyResponseError(TransportError):
    """Raised when a request succeeds but the response body is empty."""

    def __init__(self, url: str = "", status_code: Optional[int] = None):
        super().__init__("Empty response", url=url, status_code=status_code)


class ResponseParseError(DataPrivacyError):
    """Raised when a response body is not the JSON shape we expect."""

    def __init__(self, message: str, body: str = ""):
        self.body = body
        super().__init__(message, context={"body": body[:200]})


# ── Flag Errors ────────────────────────────────────────────────────

class FlagUnavailableError(DataPrivacyError):
    """Raised when a live flag is not part of the current build."""

    def __init__(self, flag: str):
        super().__init__(
            f"Flag '{flag}' is not available in this build",
            context={"flag": flag},
        )


class ConfigError(DataPrivacyError):
    """Raised when configuration is invalid or missing."""
    pass
