"""Shared fixtures for DeepSeek Chat tests."""

from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from deepseek_chat.core.client import Backoff, CompletionClient

DEEPSEEK_VARS = [
    "DEEPSEEK_API_KEY",
    "DEEPSEEK_API_URL",
    "DEEPSEEK_MODEL",
    "DEEPSEEK_LOCALE",
    "DEEPSEEK_LOG_LEVEL",
    "DEEPSEEK_MAX_ATTEMPTS",
    "DEEPSEEK_DEBUG",
]


class RecordingBackoff(Backoff):
    """Backoff that records delays instead of sleeping."""

    def __init__(self, completes: bool = True):
        super().__init__()
        self.delays: List[int] = []
        self.completes = completes

    def sleep(self, delay_ms: int) -> bool:
        self.delays.append(delay_ms)
        return self.completes


def _reply(content: str = "Hello from DeepSeek") -> httpx.Response:
    return httpx.Response(
        200,
        text=(
            '{"id":"chatcmpl-1","object":"chat.completion","model":"deepseek-chat",'
            '"choices":[{"index":0,"message":{"role":"assistant","content":"%s"},'
            '"finish_reason":"stop"}]}' % content
        ),
    )


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Run in an empty project under a fake home, with no DEEPSEEK_ variables."""
    home = tmp_path / "home"
    project = home / "project"
    (project / ".git").mkdir(parents=True)

    monkeypatch.setenv("HOME", str(home))
    for name in DEEPSEEK_VARS:
        # setenv first so teardown removes anything written during the test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def reply() -> Callable[..., httpx.Response]:
    """Build a minimal successful completions response."""
    return _reply


@pytest.fixture
def backoff() -> RecordingBackoff:
    return RecordingBackoff()


@pytest.fixture
def interrupted_backoff() -> RecordingBackoff:
    """Backoff whose every sleep reports an interruption."""
    return RecordingBackoff(completes=False)


@pytest.fixture
def make_client(backoff: RecordingBackoff) -> Callable[..., CompletionClient]:
    """Build a client whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> CompletionClient:
        kwargs.setdefault("backoff", backoff)
        return CompletionClient("test-key", transport=httpx.MockTransport(handler), **kwargs)

    return _make
