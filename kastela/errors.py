"""
Exception classes for the Kastela client.

Every failure surfaced by the client is a ``KastelaError`` carrying a
single message. Nothing is retried.
"""


class KastelaError(Exception):
    """Base exception for Kastela errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ServerError(KastelaError):
    """Server responded with a non-2xx status."""
    pass


class TransportError(KastelaError):
    """No response was received (connection, TLS or timeout failure)."""
    pass


class VersionMismatchError(KastelaError):
    """Server version header is not compatible with this client."""

    def __init__(self, expected: str, actual: str | None):
        super().__init__(
            f"kastela server version mismatch, expected: {expected}.x, actual: {actual}"
        )
        self.expected = expected
        self.actual = actual


class ValidationError(KastelaError):
    """Input rejected locally, before any request is sent."""
    pass


class UnsupportedOperationError(ValidationError):
    """The selected server revision does not expose this operation."""
    pass
