"""
Structured error system for the DeepSeek completion client.

This module provides the exception types raised inside the client, the
classification of raw transport faults into those types, and the conversion
of a classified error into a user-facing sentence.
"""

import socket
import ssl
from typing import Any, Dict, Iterator, Optional
import logging

import httpx

from .messages import DEFAULT_LOCALE, get_message

logger = logging.getLogger(__name__)


class DeepSeekError(Exception):
    """Base exception for all DeepSeek API related errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.status:
            parts.append(f"(Status: {self.status})")
        if self.code:
            parts.append(f"(Code: {self.code})")
        return " ".join(parts)


class AuthenticationError(DeepSeekError):
    """The API key was rejected."""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, status=401, code="AUTHENTICATION_ERROR", **kwargs)


class PaymentRequiredError(DeepSeekError):
    """The account has no remaining balance."""

    def __init__(self, message: str = "Payment required", **kwargs):
        super().__init__(message, status=402, code="PAYMENT_REQUIRED", **kwargs)


class RateLimitError(DeepSeekError):
    """Too many requests."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, status=429, code="RATE_LIMITED", **kwargs)
        if retry_after:
            self.details["retry_after"] = retry_after


class ServerError(DeepSeekError):
    """Error for server-side issues."""

    def __init__(self, message: str = "Server error", **kwargs):
        super().__init__(message, code="SERVER_ERROR", **kwargs)
        if not kwargs.get("status"):
            self.status = 500


class NetworkError(DeepSeekError):
    """The server could not be reached."""

    def __init__(self, message: str = "Network error", **kwargs):
        super().__init__(message, code="NETWORK_ERROR", **kwargs)


class TlsError(DeepSeekError):
    """The TLS handshake or certificate check failed."""

    def __init__(self, message: str = "TLS error", **kwargs):
        super().__init__(message, code="TLS_ERROR", **kwargs)


class RequestTimeoutError(DeepSeekError):
    """Error for connect or read timeouts."""

    def __init__(self, message: str = "Request timeout", **kwargs):
        super().__init__(message, code="TIMEOUT_ERROR", **kwargs)


class MalformedResponseError(DeepSeekError):
    """A 200 response whose reply text could not be extracted."""

    def __init__(self, message: str, body: str, **kwargs):
        super().__init__(message, code="MALFORMED_RESPONSE", **kwargs)
        self.body = body


class ResponseFormatError(MalformedResponseError):
    """The response has no content field."""

    def __init__(self, body: str, **kwargs):
        super().__init__("Content field not found in response", body, **kwargs)


class IncompleteResponseError(MalformedResponseError):
    """The content field of the response is not terminated."""

    def __init__(self, body: str, **kwargs):
        super().__init__("Content field is not terminated", body, **kwargs)


class RequestCancelledError(DeepSeekError):
    """The request was cancelled by the caller."""

    def __init__(self, message: str = "Request cancelled", **kwargs):
        super().__init__(message, code="CANCELLED", **kwargs)


class ConfigurationError(DeepSeekError):
    """Error related to client configuration."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, code="CONFIGURATION_ERROR", **kwargs)
        if config_field:
            self.details["config_field"] = config_field


def _iter_causes(error: BaseException) -> Iterator[BaseException]:
    """Walk an exception and its cause/context chain."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _status_of(error: BaseException) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    return status if isinstance(status, int) else None


def _classify_by_status(status: int, message: str, error: BaseException) -> Optional[DeepSeekError]:
    if status == 401:
        return AuthenticationError(message, original_error=error)
    if status == 402:
        return PaymentRequiredError(message, original_error=error)
    if status == 429:
        return RateLimitError(message, original_error=error)
    if 500 <= status < 600:
        return ServerError(message, status=status, original_error=error)
    return None


def classify_error(error: BaseException) -> DeepSeekError:
    """
    Classify a transport fault into a structured DeepSeekError.

    Typed information (exception classes along the cause chain, attached
    status codes) is used first; the message text is only inspected when
    nothing structured applies.

    Args:
        error: The original exception

    Returns:
        Classified DeepSeekError instance
    """
    if isinstance(error, DeepSeekError):
        return error

    error_message = str(error) or type(error).__name__

    causes = list(_iter_causes(error))

    # httpx reports TLS failures as ConnectError caused by an SSLError
    if any(isinstance(cause, ssl.SSLError) for cause in causes):
        return TlsError(error_message, original_error=error)

    for cause in causes:
        if isinstance(cause, (httpx.TimeoutException, socket.timeout, TimeoutError)):
            return RequestTimeoutError(error_message, original_error=error)
        if isinstance(cause, (httpx.ConnectError, socket.gaierror, ConnectionRefusedError)):
            return NetworkError(error_message, original_error=error)
        status = _status_of(cause)
        if status:
            classified = _classify_by_status(status, error_message, error)
            if classified:
                return classified

    error_lower = error_message.lower()

    if "401" in error_lower or "unauthorized" in error_lower:
        return AuthenticationError(error_message, original_error=error)
    elif "402" in error_lower or "payment required" in error_lower:
        return PaymentRequiredError(error_message, original_error=error)
    elif "429" in error_lower or "rate limit" in error_lower or "too many requests" in error_lower:
        return RateLimitError(error_message, original_error=error)
    elif any(keyword in error_lower for keyword in ("ssl", "certificate", "handshake")):
        return TlsError(error_message, original_error=error)
    elif "timed out" in error_lower or "timeout" in error_lower:
        return RequestTimeoutError(error_message, original_error=error)
    elif any(keyword in error_lower for keyword in (
        "unknownhost",
        "name or service not known",
        "nodename nor servname",
        "getaddrinfo",
        "connection refused",
        "network is unreachable",
    )):
        return NetworkError(error_message, original_error=error)

    # Default classification
    return DeepSeekError(error_message, original_error=error)


def create_user_friendly_message(error: DeepSeekError, locale: str = DEFAULT_LOCALE) -> str:
    """
    Create a user-friendly error message.

    Args:
        error: The DeepSeekError to convert
        locale: Message catalog to use

    Returns:
        User-friendly error message
    """
    if isinstance(error, RequestCancelledError):
        return get_message("cancelled", locale)

    elif isinstance(error, AuthenticationError):
        return get_message("authentication", locale)

    elif isinstance(error, PaymentRequiredError):
        return get_message("payment_required", locale)

    elif isinstance(error, RateLimitError):
        return get_message("rate_limited", locale)

    elif isinstance(error, TlsError):
        return get_message("tls", locale)

    elif isinstance(error, NetworkError):
        return get_message("network", locale)

    elif isinstance(error, RequestTimeoutError):
        return get_message("timeout", locale)

    elif isinstance(error, ServerError):
        return get_message("server_unavailable", locale, status=error.status)

    elif isinstance(error, IncompleteResponseError):
        return get_message("incomplete_response", locale)

    elif isinstance(error, ResponseFormatError):
        return get_message("format_mismatch", locale, body=error.body)

    elif isinstance(error, ConfigurationError):
        return get_message("configuration", locale, detail=error.message)

    else:
        return get_message("unknown", locale, detail=error.message)
