"""chorus_mcp package exports."""

from .core import (
    CanonicalCollection,
    ChorusClient,
    ChorusClientError,
    ChorusHTTPError,
    ErrorKind,
    PaginationWindow,
    ResponseFormat,
    classify_error,
    create_client_from_env,
    format_output,
    normalize,
    register_discovered_tools,
)

__all__ = [
    "ChorusClient",
    "ChorusClientError",
    "ChorusHTTPError",
    "CanonicalCollection",
    "PaginationWindow",
    "ResponseFormat",
    "ErrorKind",
    "classify_error",
    "create_client_from_env",
    "format_output",
    "normalize",
    "register_discovered_tools",
]
