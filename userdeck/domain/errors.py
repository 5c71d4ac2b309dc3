"""Domain-level fetch error types shared by adapters, use cases and view models.

Every failure of a page fetch resolves to exactly one of these classes so
callers can branch on the error kind without knowing ``requests`` exception
types. All of them are recoverable by retrying at the call site.
"""

from __future__ import annotations

from typing import Optional


class FetchError(RuntimeError):
    """Base class for listing fetch failures."""

    code: str = "FETCH_ERROR"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class NoConnectivity(FetchError):
    """Reachability reported no network; no request was attempted."""

    code = "NO_CONNECTIVITY"

    def __init__(self, message: str = "No internet connection.") -> None:
        super().__init__(message)


class NetworkFailure(FetchError):
    """Transport failure (timeout, DNS, reset) after all retries were spent."""

    code = "NETWORK_FAILURE"

    def __init__(self, cause: BaseException, *, attempts: int = 1) -> None:
        super().__init__(f"Network error: {cause}", cause=cause)
        self.attempts = attempts


class HttpError(FetchError):
    """Response status outside 200-299."""

    code = "HTTP_ERROR"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error with status code: {status_code}")
        self.status_code = status_code


class NoData(FetchError):
    code = "NO_DATA"

    def __init__(self, message: str = "No data received.") -> None:
        super().__init__(message)


class DecodingFailure(FetchError):
    """Body present but not valid JSON or not the expected schema."""

    code = "DECODING_FAILURE"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to decode data: {cause}", cause=cause)


class InvalidURL(FetchError):
    code = "INVALID_URL"

    def __init__(self, url: str = "") -> None:
        message = f"Invalid URL: {url}" if url else "Invalid URL."
        super().__init__(message)
        self.url = url


__all__ = [
    "DecodingFailure",
    "FetchError",
    "HttpError",
    "InvalidURL",
    "NetworkFailure",
    "NoConnectivity",
    "NoData",
]
