"""
Blocking DeepSeek chat completion client.

:class:`CompletionClient` owns one request lifecycle end to end: encode the
message, post it, wait for the response, decode the reply text. Transient
failures are retried with linear backoff, and :meth:`CompletionClient.cancel`
can abort an in-flight ``send`` from another thread.

The client is single-flight: run at most one ``send`` per instance at a time,
on a worker thread rather than the thread that drives the user interface.
"""

import threading
from typing import Optional, Union
import logging

import httpx

from deepseek_chat import USER_AGENT

from .codec import encode_request, extract_content
from .errors import ConfigurationError
from .messages import get_message
from .outcome import ChatRequest, Failure, FailureKind, Outcome, Success
from .retry import Backoff, Retry, RetryPolicy, cancelled_failure, classify

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.deepseek.com/chat/completions"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_CONNECT_TIMEOUT = 45.0
DEFAULT_READ_TIMEOUT = 120.0


class CompletionClient:
    """Sends single chat messages to the DeepSeek completions endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        model: str = DEFAULT_MODEL,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        policy: Optional[RetryPolicy] = None,
        backoff: Optional[Backoff] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            api_key: DeepSeek API key, checked for presence by the caller
            api_url: Completions endpoint
            model: Model identifier sent with every request
            connect_timeout: Connect timeout per attempt, in seconds
            read_timeout: Read timeout per attempt, in seconds
            policy: Retry configuration
            backoff: Sleeper used between attempts
            transport: httpx transport override, used by tests
        """
        self.api_url = api_url
        self.model = model
        self.policy = policy or RetryPolicy()
        self._api_key = api_key
        self._timeout = httpx.Timeout(read_timeout, connect=connect_timeout)
        self._backoff = backoff or Backoff()
        self._transport = transport

        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._http: Optional[httpx.Client] = None

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "CompletionClient":
        """
        Create a client from DeepSeekSettings.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not settings.is_configured:
            raise ConfigurationError("No API key configured", config_field="api_key")
        return cls(
            settings.api_key,
            api_url=settings.api_url,
            model=settings.model,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
            policy=RetryPolicy(
                max_attempts=settings.max_attempts,
                server_backoff_ms=settings.server_backoff_ms,
                timeout_backoff_ms=settings.timeout_backoff_ms,
                locale=settings.locale,
            ),
            **kwargs
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def in_flight(self) -> bool:
        """Whether an attempt currently holds a live connection."""
        with self._lock:
            return self._http is not None

    def send(self, message: str) -> Outcome:
        """
        Send one user message and wait for the reply.

        Never raises; every failure is returned as a :class:`Failure`.

        Args:
            message: The user message

        Returns:
            Success with the reply text, or Failure with a user-facing message
        """
        self._cancelled.clear()
        self._backoff.reset()

        # Unencodable characters such as lone surrogates are sent as "?"
        body = encode_request(ChatRequest(message=message), self.model).encode("utf-8", errors="replace")
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            if self._cancelled.is_set():
                logger.info(f"Request cancelled before attempt {attempt}")
                return cancelled_failure(self.policy.locale)

            logger.debug(f"Attempt {attempt}/{max_attempts} to {self.api_url}")
            decision = self._attempt(body, attempt)

            if not isinstance(decision, Retry):
                self._log_outcome(decision, attempt)
                return decision

            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({decision.reason}); "
                f"retrying in {decision.backoff_ms}ms"
            )
            if not self._backoff.sleep(decision.backoff_ms):
                if self._cancelled.is_set():
                    logger.info("Request cancelled during backoff")
                    return cancelled_failure(self.policy.locale)
                logger.error(f"Backoff interrupted after attempt {attempt}")
                return Failure(FailureKind.INTERRUPTED, get_message("interrupted", self.policy.locale))

        logger.error(f"All {max_attempts} attempts failed")
        return Failure(
            FailureKind.ALL_ATTEMPTS_FAILED,
            get_message("all_attempts_failed", self.policy.locale),
        )

    def send_message(self, message: str) -> str:
        """Send a message and return the text to show the user."""
        return self.send(message).text

    def cancel(self) -> None:
        """
        Cancel the in-flight send, if any.

        Returns immediately. The live connection is closed on a separate
        thread; errors caused by that close are reported as a cancellation.
        """
        self._cancelled.set()
        with self._lock:
            http = self._http
        self._backoff.interrupt()

        if http is not None:
            logger.info("Cancelling in-flight request")
            threading.Thread(
                target=self._close_quietly,
                args=(http,),
                name="deepseek-cancel",
                daemon=True,
            ).start()

    def interrupt(self) -> None:
        """Wake a pending backoff sleep without cancelling."""
        self._backoff.interrupt()

    def _open(self) -> httpx.Client:
        try:
            http = httpx.Client(
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._api_key}",
                    "User-Agent": USER_AGENT,
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        except UnicodeEncodeError as e:
            # Header values must be ASCII
            raise ConfigurationError(
                "API key contains characters that cannot be sent in a header",
                config_field="api_key",
                original_error=e,
            ) from e
        with self._lock:
            self._http = http
        return http

    def _release(self, http: httpx.Client) -> None:
        with self._lock:
            if self._http is http:
                self._http = None
        http.close()

    def _attempt(self, body: bytes, attempt: int) -> Union[Success, Failure, Retry]:
        """Run one connect-write-read cycle and decide what comes next."""
        http: Optional[httpx.Client] = None
        try:
            http = self._open()
            request = http.build_request("POST", self.api_url, content=body)
            response = http.send(request, stream=True)
            try:
                if self._cancelled.is_set():
                    return cancelled_failure(self.policy.locale)

                decision = classify(response.status_code, attempt, self.policy)
                if decision is not None:
                    return decision

                response.read()
                return Success(extract_content(response.text))
            finally:
                response.close()
        except Exception as e:
            return classify(e, attempt, self.policy, cancelled=self._cancelled.is_set())
        finally:
            if http is not None:
                self._release(http)

    def _log_outcome(self, outcome: Outcome, attempt: int) -> None:
        if isinstance(outcome, Success):
            if attempt > 1:
                logger.info(f"Succeeded after {attempt} attempts")
        elif outcome.kind is FailureKind.CANCELLED:
            logger.info("Request cancelled")
        else:
            logger.error(f"Request failed after {attempt} attempt(s): {outcome.kind.value} {outcome.detail or ''}".rstrip())

    @staticmethod
    def _close_quietly(http: httpx.Client) -> None:
        try:
            http.close()
        except Exception as e:
            logger.debug(f"Error closing cancelled connection: {e}")
