"""
Request and outcome types for the completion client.

A ``send`` call takes a :class:`ChatRequest` and always produces exactly one
:class:`Success` or :class:`Failure`; nothing is raised past the client.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class ChatRequest(BaseModel):
    """A single user message, built fresh for every send."""

    model_config = ConfigDict(frozen=True)

    message: str


class FailureKind(Enum):
    """Why a send did not produce an assistant reply."""
    CANCELLED = "cancelled"
    RATE_LIMITED = "rate_limited"
    SERVER_UNAVAILABLE = "server_unavailable"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    INTERRUPTED = "interrupted"
    TRANSPORT = "transport"
    MALFORMED_RESPONSE = "malformed_response"
    ALL_ATTEMPTS_FAILED = "all_attempts_failed"
    CONFIGURATION = "configuration"


@dataclass(frozen=True)
class Success:
    """The assistant reply text."""
    text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A terminal failure with its user-facing message."""
    kind: FailureKind
    message: str
    status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def text(self) -> str:
        return self.message


Outcome = Union[Success, Failure]
