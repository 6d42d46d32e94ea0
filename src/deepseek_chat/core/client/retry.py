"""
Linear backoff retry policy for the DeepSeek completion client.

The policy is a pure decision function: given an HTTP status or a transport
fault and the attempt number, :func:`classify` says whether to decode the
response, retry after a delay, or stop with a terminal :class:`Failure`.
The client loop only executes those decisions, so the policy can be tested
without any networking.
"""

import threading
from dataclasses import dataclass
from typing import Optional, Union
import logging

import httpx

from .errors import (
    ConfigurationError,
    MalformedResponseError,
    RequestCancelledError,
    RequestTimeoutError,
    classify_error,
    create_user_friendly_message,
)
from .messages import DEFAULT_LOCALE, get_message
from .outcome import Failure, FailureKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    server_backoff_ms: int = 2000
    timeout_backoff_ms: int = 3000
    locale: str = DEFAULT_LOCALE


@dataclass(frozen=True)
class Retry:
    """Decision to run another attempt after a delay."""
    backoff_ms: int
    reason: str


Decision = Optional[Union[Retry, Failure]]


def _is_timeout(fault: BaseException) -> bool:
    return isinstance(fault, (httpx.TimeoutException, RequestTimeoutError, TimeoutError))


def _classify_status(status: int, attempt: int, policy: RetryPolicy) -> Decision:
    if status == 200:
        return None

    if status == 429:
        return Failure(
            FailureKind.RATE_LIMITED,
            get_message("rate_limited", policy.locale),
            status=status,
        )

    if status >= 500:
        if attempt < policy.max_attempts:
            return Retry(policy.server_backoff_ms * attempt, f"HTTP {status}")
        return Failure(
            FailureKind.SERVER_UNAVAILABLE,
            get_message("server_unavailable", policy.locale, status=status),
            status=status,
        )

    return Failure(
        FailureKind.HTTP_ERROR,
        get_message("http_error", policy.locale, status=status),
        status=status,
    )


def _classify_fault(
    fault: BaseException,
    attempt: int,
    policy: RetryPolicy,
    cancelled: bool
) -> Decision:
    if cancelled or isinstance(fault, RequestCancelledError):
        return cancelled_failure(policy.locale)

    if isinstance(fault, MalformedResponseError):
        return Failure(
            FailureKind.MALFORMED_RESPONSE,
            create_user_friendly_message(fault, policy.locale),
            status=200,
            detail=fault.body,
        )

    if isinstance(fault, ConfigurationError):
        return Failure(
            FailureKind.CONFIGURATION,
            create_user_friendly_message(fault, policy.locale),
            detail=str(fault),
        )

    if _is_timeout(fault):
        if attempt < policy.max_attempts:
            return Retry(policy.timeout_backoff_ms * attempt, f"timeout: {fault}")
        return Failure(
            FailureKind.TIMEOUT,
            get_message("timeout", policy.locale),
            detail=str(fault),
        )

    if attempt < policy.max_attempts:
        return Retry(policy.server_backoff_ms * attempt, f"{type(fault).__name__}: {fault}")

    # Only the final failure is worth classifying for the user
    error = classify_error(fault)
    return Failure(
        FailureKind.TRANSPORT,
        create_user_friendly_message(error, policy.locale),
        status=error.status,
        detail=str(fault),
    )


def classify(
    fault_or_status: Union[int, BaseException],
    attempt: int,
    policy: RetryPolicy,
    cancelled: bool = False
) -> Decision:
    """
    Decide what to do after an attempt.

    Args:
        fault_or_status: HTTP status code read, or the exception raised
        attempt: 1-based attempt number that just finished
        policy: Retry configuration
        cancelled: Whether the cancellation flag is set

    Returns:
        None to decode a 200 response, a Retry, or a terminal Failure
    """
    if isinstance(fault_or_status, int):
        return _classify_status(fault_or_status, attempt, policy)
    return _classify_fault(fault_or_status, attempt, policy, cancelled)


def cancelled_failure(locale: str = DEFAULT_LOCALE) -> Failure:
    return Failure(FailureKind.CANCELLED, get_message("cancelled", locale))


class Backoff:
    """Interruptible sleep between attempts."""

    def __init__(self):
        self._wake = threading.Event()

    def reset(self) -> None:
        """Re-arm before a new send."""
        self._wake.clear()

    def interrupt(self) -> None:
        """Wake a pending sleep early."""
        self._wake.set()

    def sleep(self, delay_ms: int) -> bool:
        """
        Block for ``delay_ms`` milliseconds.

        Returns:
            True if the full delay elapsed, False if interrupted
        """
        return not self._wake.wait(delay_ms / 1000.0)
