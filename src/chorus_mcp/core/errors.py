"""
Classification of failed Chorus calls into user-facing error categories.

``classify_error`` is total: whatever a handler caught (or any other value)
maps to exactly one ``ErrorCategory`` and nothing is re-raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import httpx

from .client import (
    ChorusClientError,
    ChorusConnectionError,
    ChorusHTTPError,
    ChorusParseError,
    ChorusTimeoutError,
)


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    AUTH_FAILURE = "auth_failure"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    UNKNOWN_STATUS = "unknown_status"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ErrorCategory:
    kind: ErrorKind
    message: str
    status: Optional[int] = None

    def __str__(self) -> str:
        return self.message


def _upstream_message(body: Any) -> str:
    if not isinstance(body, Mapping):
        return ""
    message = body.get("message")
    if message is None:
        message = body.get("error")
    return "" if message is None else str(message)


def _from_status(status: int, message: str) -> ErrorCategory:
    if status == 400:
        detail = message or "Check your parameters and try again."
        return ErrorCategory(
            ErrorKind.BAD_REQUEST, f"Error: Bad request. {detail}", status
        )
    if status == 401:
        return ErrorCategory(
            ErrorKind.AUTH_FAILURE,
            "Error: Authentication failed. Check your CHORUS_API_KEY environment "
            "variable. Generate a token from Chorus Personal Settings.",
            status,
        )
    if status == 403:
        return ErrorCategory(
            ErrorKind.FORBIDDEN,
            "Error: Access denied. Your API key may lack permissions for this "
            "resource, or the recording is marked as private.",
            status,
        )
    if status == 404:
        return ErrorCategory(
            ErrorKind.NOT_FOUND,
            "Error: Resource not found. Verify the ID is correct and that you "
            "have access to this resource.",
            status,
        )
    if status == 429:
        return ErrorCategory(
            ErrorKind.RATE_LIMITED,
            "Error: Rate limit exceeded. Wait a moment before making more requests.",
            status,
        )
    if status >= 500:
        return ErrorCategory(
            ErrorKind.SERVER_ERROR,
            f"Error: Chorus API server error ({status}). Try again later.",
            status,
        )
    return ErrorCategory(
        ErrorKind.UNKNOWN_STATUS,
        f"Error: API request failed with status {status}. {message}".rstrip(),
        status,
    )


TIMEOUT_CATEGORY = ErrorCategory(
    ErrorKind.TIMEOUT,
    "Error: Request timed out. The Chorus API did not respond within 30 seconds. "
    "Try again.",
)
CONNECTION_CATEGORY = ErrorCategory(
    ErrorKind.CONNECTION_REFUSED,
    "Error: Could not connect to the Chorus API. Check your network connection.",
)


def _unexpected(error: Any) -> ErrorCategory:
    try:
        detail = str(error)
    except Exception:
        # A broken __str__ must not escape the classifier
        detail = type(error).__name__
    if not detail and isinstance(error, BaseException):
        detail = type(error).__name__
    return ErrorCategory(
        ErrorKind.UNEXPECTED, f"Error: Unexpected error occurred: {detail}"
    )


def classify_error(error: Any) -> ErrorCategory:
    """Map a caught failure (or any thrown value) to its ErrorCategory."""
    if isinstance(error, ChorusHTTPError):
        message = error.message or _upstream_message(error.response_json)
        return _from_status(error.status_code, message)
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        return _from_status(error.response.status_code, _upstream_message(body))

    if isinstance(error, (ChorusTimeoutError, httpx.TimeoutException)):
        return TIMEOUT_CATEGORY
    if isinstance(error, (ChorusConnectionError, httpx.ConnectError)):
        return CONNECTION_CATEGORY

    # Parse failures and anything else are reported verbatim
    return _unexpected(error)


def handle_api_error(error: Any) -> str:
    """One-line, user-facing description of ``error``."""
    return classify_error(error).message


__all__ = [
    "ChorusClientError",
    "ChorusConnectionError",
    "ChorusHTTPError",
    "ChorusParseError",
    "ChorusTimeoutError",
    "ErrorCategory",
    "ErrorKind",
    "classify_error",
    "handle_api_error",
]
