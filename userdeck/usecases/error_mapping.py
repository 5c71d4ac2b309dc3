"""Translate fetch errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from userdeck.domain.errors import (
    DecodingFailure,
    FetchError,
    HttpError,
    InvalidURL,
    NetworkFailure,
    NoConnectivity,
    NoData,
)
from userdeck.domain.ports import UseCaseError


def map_fetch_error(
    exc: BaseException,
    *,
    default_code: str = "UNEXPECTED",
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a listing fetch.
        default_code: Code used for exceptions outside the fetch taxonomy.
        default_message: Message used for exceptions outside the taxonomy.

    Returns:
        UseCaseError carrying a code the view layer can branch on.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, NoConnectivity):
        return UseCaseError(exc.code, "No internet connection. Check your network and try again.")
    if isinstance(exc, NetworkFailure):
        return UseCaseError(exc.code, _compose_error_message("Network error", str(exc.cause or "")))
    if isinstance(exc, HttpError):
        status = exc.status_code
        if status == 429:
            return UseCaseError(exc.code, "Too many requests. Try again in a moment.")
        if status >= 500:
            return UseCaseError(exc.code, f"Server error (HTTP {status}), try again.")
        return UseCaseError(exc.code, f"Request failed (HTTP {status}).")
    if isinstance(exc, NoData):
        return UseCaseError(exc.code, "No data received.")
    if isinstance(exc, DecodingFailure):
        return UseCaseError(exc.code, "Received an unexpected response from the server.")
    if isinstance(exc, InvalidURL):
        return UseCaseError(exc.code, "Invalid service URL.")
    if isinstance(exc, FetchError):
        return UseCaseError(exc.code, exc.message)

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_fetch_error"]
