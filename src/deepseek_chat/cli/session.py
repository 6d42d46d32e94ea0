"""
Chat session driving the completion client from a front end.

Each submitted message is sent on its own worker thread so the thread that
renders the conversation never blocks on the network. The front end cancels
through the session from its own thread.
"""

import threading
from typing import Callable, Optional
import logging

from deepseek_chat.core.client import CompletionClient, Outcome

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Outcome], None]


class ChatSession:
    """One chat turn at a time against a single CompletionClient."""

    def __init__(self, client: CompletionClient):
        self.client = client
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._last_outcome: Optional[Outcome] = None

    @property
    def busy(self) -> bool:
        """Whether a message is still waiting for its outcome."""
        worker = self._worker
        return worker is not None and worker.is_alive()

    @property
    def last_outcome(self) -> Optional[Outcome]:
        return self._last_outcome

    def submit(self, message: str, on_done: Optional[OutcomeCallback] = None) -> threading.Thread:
        """
        Send a message on a new worker thread.

        Args:
            message: The user message
            on_done: Called on the worker thread with the outcome

        Returns:
            The started worker thread

        Raises:
            RuntimeError: If a previous message is still in flight
        """
        with self._lock:
            if self.busy:
                raise RuntimeError("A message is already being sent")

            self._last_outcome = None
            worker = threading.Thread(
                target=self._run,
                args=(message, on_done),
                name="deepseek-send",
                daemon=True,
            )
            self._worker = worker
            worker.start()

        return worker

    def wait(self, timeout: Optional[float] = None) -> Optional[Outcome]:
        """Wait for the current message and return its outcome (None on timeout)."""
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
            if worker.is_alive():
                return None
        return self._last_outcome

    def cancel(self) -> None:
        """Cancel the message in flight, if any."""
        if not self.busy:
            return
        logger.info("Cancelling chat turn")
        self.client.cancel()
        self.client.interrupt()

    def _run(self, message: str, on_done: Optional[OutcomeCallback]) -> None:
        outcome = self.client.send(message)
        self._last_outcome = outcome
        if on_done is not None:
            on_done(outcome)
