"""
Error taxonomy for Lead Sync.

Collection-level fetch failures abort a run. Write failures and per-list
fetch failures are caught at the list boundary by the engine and reported
as data.
"""

from __future__ import annotations

# Response bodies are truncated to this many characters in error messages
BODY_PREVIEW_CHARS = 500


def truncate_body(body: str, limit: int = BODY_PREVIEW_CHARS) -> str:
    """Shorten a response body for inclusion in an error message."""
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class LeadSyncError(Exception):
    """Base exception for Lead Sync errors."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigError(LeadSyncError):
    """Raised for invalid or incomplete configuration."""

    pass


class TransportError(LeadSyncError):
    """Raised when a request could not be completed after all retries."""

    pass


class FetchFailure(LeadSyncError):
    """Raised when a paginated collection could not be read in full."""

    def __init__(
        self,
        collection: str,
        status: int | None = None,
        body: str = "",
        message: str | None = None,
    ) -> None:
        self.collection = collection
        self.body = truncate_body(body)
        if message is None:
            message = f"{collection} API error: {status} - {self.body}"
        super().__init__(message, status)


class SchemaMismatch(FetchFailure):
    """Raised when a response envelope is not one of the recognized shapes."""

    def __init__(self, collection: str, body: str = "") -> None:
        preview = truncate_body(body, 200)
        super().__init__(
            collection,
            body=body,
            message=(
                f"Unexpected {collection} response structure. "
                f"Response: {preview}"
            ),
        )


class WriteFailure(LeadSyncError):
    """Raised when a lead import chunk is rejected by the destination."""

    def __init__(
        self,
        status: int,
        body: str = "",
        chunks_sent: int = 0,
    ) -> None:
        self.body = truncate_body(body)
        self.chunks_sent = chunks_sent
        super().__init__(f"Instantly API error: {status} - {self.body}", status)
