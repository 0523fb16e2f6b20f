"""Error taxonomy for the narrative engine.

None of these is fatal to producing a composite score: scorers turn
`UpstreamUnavailable` into a zero component, `DegradedFallback` is reported
as a signal, and the stores swallow persistence errors after logging them.
"""

from __future__ import annotations


class NarrativeError(Exception):
    """Base exception for the narrative engine."""


class UpstreamUnavailable(NarrativeError):
    """An upstream fetcher failed or returned nothing usable."""

    def __init__(self, source: str, reason: str, status_code: int | None = None):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
        self.status_code = status_code


class MalformedPayload(UpstreamUnavailable):
    """An upstream answered, but not with the shape we expect."""


class DegradedFallback(NarrativeError):
    """Partial or approximated upstream data was substituted."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class PersistenceError(NarrativeError):
    """Base class for store read/write failures."""


class PersistenceReadError(PersistenceError):
    """Stored data is missing, unreadable or corrupt."""


class PersistenceWriteError(PersistenceError):
    """Stored data could not be written durably."""


def classify_http_error(source: str, status_code: int, message: str) -> UpstreamUnavailable:
    """Wrap an HTTP error status from an upstream API."""
    if status_code == 429:
        reason = f"rate limited ({message})"
    elif status_code in {401, 403}:
        reason = f"unauthorized ({message})"
    elif 500 <= status_code < 600:
        reason = f"server error {status_code} ({message})"
    else:
        reason = f"HTTP {status_code} ({message})"
    return UpstreamUnavailable(source, reason, status_code=status_code)
