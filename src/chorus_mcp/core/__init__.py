"""Core domain surface for chorus-mcp (transport-agnostic)."""

from .client import (
    DEFAULT_BASE_URL,
    ChorusClient,
    ChorusClientError,
    ChorusConnectionError,
    ChorusHTTPError,
    ChorusParseError,
    ChorusTimeoutError,
    RetryConfig,
)
from .config import create_client_from_env, load_env_config
from .envelope import (
    CanonicalCollection,
    EnvelopeKind,
    classify_body,
    flatten_record,
    normalize,
)
from .errors import ErrorCategory, ErrorKind, classify_error, handle_api_error
from .formatting import (
    CHARACTER_LIMIT,
    ResponseFormat,
    format_output,
    truncate_response,
)
from .pagination import (
    PaginationWindow,
    build_window,
    slice_window,
    window_from_collection,
)
from .registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)

__all__ = [
    # Client
    "ChorusClient",
    "RetryConfig",
    "DEFAULT_BASE_URL",
    # Exceptions
    "ChorusClientError",
    "ChorusHTTPError",
    "ChorusTimeoutError",
    "ChorusConnectionError",
    "ChorusParseError",
    # Envelopes
    "CanonicalCollection",
    "EnvelopeKind",
    "classify_body",
    "flatten_record",
    "normalize",
    # Pagination
    "PaginationWindow",
    "build_window",
    "slice_window",
    "window_from_collection",
    # Output
    "CHARACTER_LIMIT",
    "ResponseFormat",
    "format_output",
    "truncate_response",
    # Errors
    "ErrorCategory",
    "ErrorKind",
    "classify_error",
    "handle_api_error",
    # Config helpers
    "create_client_from_env",
    "load_env_config",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
