"""
DeepSeek completion client.

This package provides the blocking completion client together with its
wire codec, retry policy, error classification and user-facing messages.
"""

from .outcome import (
    ChatRequest,
    Failure,
    FailureKind,
    Outcome,
    Success,
)
from .codec import (
    CONTENT_MARKER,
    encode_request,
    escape_json,
    extract_content,
    unescape_json,
)
from .errors import (
    DeepSeekError,
    AuthenticationError,
    PaymentRequiredError,
    RateLimitError,
    ServerError,
    NetworkError,
    TlsError,
    RequestTimeoutError,
    MalformedResponseError,
    ResponseFormatError,
    IncompleteResponseError,
    RequestCancelledError,
    ConfigurationError,
    classify_error,
    create_user_friendly_message,
)
from .messages import get_message, SUPPORTED_LOCALES
from .retry import (
    Backoff,
    Retry,
    RetryPolicy,
    classify,
)
from .completion_client import (
    CompletionClient,
    DEFAULT_API_URL,
    DEFAULT_MODEL,
)

__all__ = [
    # Request and outcome
    "ChatRequest",
    "Failure",
    "FailureKind",
    "Outcome",
    "Success",
    # Codec
    "CONTENT_MARKER",
    "encode_request",
    "escape_json",
    "extract_content",
    "unescape_json",
    # Errors
    "DeepSeekError",
    "AuthenticationError",
    "PaymentRequiredError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "TlsError",
    "RequestTimeoutError",
    "MalformedResponseError",
    "ResponseFormatError",
    "IncompleteResponseError",
    "RequestCancelledError",
    "ConfigurationError",
    "classify_error",
    "create_user_friendly_message",
    # Messages
    "get_message",
    "SUPPORTED_LOCALES",
    # Retry logic
    "Backoff",
    "Retry",
    "RetryPolicy",
    "classify",
    # Client
    "CompletionClient",
    "DEFAULT_API_URL",
    "DEFAULT_MODEL",
]
