from __future__ import annotations


class CollectorError(RuntimeError):
    """Base class for failures surfaced by a collection run."""


class TransportError(CollectorError):
    """Raised when the price API cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(CollectorError):
    """Raised when the response body is not a valid price envelope."""
