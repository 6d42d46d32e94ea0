"""
Integration tests for CompletionClient against a mocked HTTP transport.

The transport is httpx.MockTransport, so the full client code path runs:
header construction, body encoding, status handling, decoding and retries.
"""

import json
from typing import List

import httpx
import pytest

from deepseek_chat import USER_AGENT
from deepseek_chat.config.settings import DeepSeekSettings
from deepseek_chat.core.client import (
    CompletionClient,
    ConfigurationError,
    Failure,
    FailureKind,
    Success,
    get_message,
)


class TestSuccessfulExchange:
    """Request shape and reply decoding."""

    def test_request_shape(self, make_client, reply) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return reply("Hi there")

        outcome = make_client(handler).send('What is "2+2"?\n')

        assert outcome == Success("Hi there")
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.deepseek.com/chat/completions"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert request.headers["User-Agent"] == USER_AGENT
        assert json.loads(request.content) == {
            "model": "deepseek-chat",
            "messages": [{"role": "user", "content": 'What is "2+2"?\n'}],
        }

    def test_reply_is_unescaped(self, make_client, reply) -> None:
        outcome = make_client(lambda request: reply('line\\nnext \\"quoted\\"')).send("hi")
        assert outcome.text == 'line\nnext "quoted"'

    def test_send_message_returns_text(self, make_client, reply) -> None:
        assert make_client(lambda request: reply()).send_message("hi") == "Hello from DeepSeek"

    def test_connection_released_after_send(self, make_client, reply) -> None:
        client = make_client(lambda request: reply())
        client.send("hi")
        assert not client.in_flight

    def test_unencodable_characters_are_replaced(self, make_client, reply) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return reply()

        outcome = make_client(handler).send("bad \ud800 text")

        assert outcome == Success("Hello from DeepSeek")
        assert json.loads(seen[0].content)["messages"][0]["content"] == "bad ? text"


class TestRetries:
    """Retry and backoff behaviour."""

    def test_server_errors_then_success(self, make_client, reply, backoff) -> None:
        statuses = iter([500, 503])
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            status = next(statuses, None)
            return httpx.Response(status) if status else reply("third time lucky")

        outcome = make_client(handler).send("hi")

        assert outcome == Success("third time lucky")
        assert len(calls) == 3
        assert backoff.delays == [2000, 4000]

    def test_timeouts_then_success(self, make_client, reply, backoff) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectTimeout("connect timed out", request=request)
            if len(calls) == 2:
                raise httpx.ReadTimeout("read timed out", request=request)
            return reply()

        outcome = make_client(handler).send("hi")

        assert outcome.ok
        assert backoff.delays == [3000, 6000]

    def test_server_unavailable_after_three_attempts(self, make_client, backoff) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502)

        outcome = make_client(handler).send("hi")

        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.SERVER_UNAVAILABLE
        assert outcome.status == 502
        assert len(calls) == 3
        assert backoff.delays == [2000, 4000]

    def test_timeout_after_three_attempts(self, make_client, backoff) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        outcome = make_client(handler).send("hi")

        assert outcome.kind is FailureKind.TIMEOUT
        assert outcome.text == get_message("timeout")
        assert backoff.delays == [3000, 6000]

    def test_transport_fault_classified_on_final_attempt(self, make_client, backoff) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

        outcome = make_client(handler).send("hi")

        assert outcome.kind is FailureKind.TRANSPORT
        assert outcome.text == get_message("network")
        assert backoff.delays == [2000, 4000]

    def test_rate_limit_is_not_retried(self, make_client, backoff) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(429)

        outcome = make_client(handler).send("hi")

        assert outcome.kind is FailureKind.RATE_LIMITED
        assert len(calls) == 1
        assert backoff.delays == []

    @pytest.mark.parametrize("status", [400, 401, 402, 404])
    def test_client_errors_are_not_retried(self, make_client, backoff, status: int) -> None:
        outcome = make_client(lambda request: httpx.Response(status)).send("hi")

        assert outcome.kind is FailureKind.HTTP_ERROR
        assert outcome.status == status
        assert str(status) in outcome.text
        assert backoff.delays == []

    def test_malformed_response_is_not_retried(self, make_client, backoff) -> None:
        body = '{"error":"unexpected"}'
        outcome = make_client(lambda request: httpx.Response(200, text=body)).send("hi")

        assert outcome.kind is FailureKind.MALFORMED_RESPONSE
        assert outcome.detail == body
        assert body in outcome.text
        assert backoff.delays == []

    def test_truncated_response(self, make_client) -> None:
        outcome = make_client(lambda request: httpx.Response(200, text='{"content":"cut off')).send("hi")

        assert outcome.kind is FailureKind.MALFORMED_RESPONSE
        assert outcome.text == get_message("incomplete_response")

    def test_interrupted_backoff_is_terminal(self, make_client, interrupted_backoff) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        outcome = make_client(handler, backoff=interrupted_backoff).send("hi")

        assert outcome.kind is FailureKind.INTERRUPTED
        assert len(calls) == 1
        assert interrupted_backoff.delays == [2000]


class TestCancellation:
    """Cancellation checkpoints inside send."""

    def test_cancel_after_write(self, make_client, reply) -> None:
        client = None

        def handler(request: httpx.Request) -> httpx.Response:
            client.cancel()
            return reply()

        client = make_client(handler)
        outcome = client.send("hi")

        assert outcome.kind is FailureKind.CANCELLED
        assert outcome.text == get_message("cancelled")

    def test_forced_close_error_reported_as_cancel(self, make_client, backoff) -> None:
        client = None
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            client.cancel()
            raise httpx.ReadError("Connection reset by peer", request=request)

        client = make_client(handler)
        outcome = client.send("hi")

        assert outcome.kind is FailureKind.CANCELLED
        assert len(calls) == 1
        assert backoff.delays == []

    def test_cancel_when_idle_has_no_effect(self, make_client, reply) -> None:
        client = make_client(lambda request: reply())

        client.cancel()
        client.cancel()

        assert client.send("hi") == Success("Hello from DeepSeek")
        assert not client.cancelled

    def test_cancel_between_sends_does_not_leak(self, make_client, reply) -> None:
        client = None
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                client.cancel()
            return reply()

        client = make_client(handler)
        assert client.send("first").kind is FailureKind.CANCELLED
        assert client.send("second").ok


class TestFromSettings:
    """Client construction from settings."""

    def test_blank_api_key_is_rejected(self, isolated_env) -> None:
        with pytest.raises(ConfigurationError):
            CompletionClient.from_settings(DeepSeekSettings(api_key="   "))

    def test_unsendable_api_key_is_a_failure(self, backoff) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        client = CompletionClient("sk-caf\u00e9", transport=httpx.MockTransport(handler), backoff=backoff)
        outcome = client.send("hi")

        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.CONFIGURATION
        assert outcome.text.startswith("Invalid configuration")
        assert seen == []
        assert backoff.delays == []
        assert not client.in_flight

    def test_settings_are_applied(self, isolated_env, backoff) -> None:
        settings = DeepSeekSettings(
            api_key="sk-settings",
            api_url="http://localhost:9000/v1/chat/completions",
            model="deepseek-reasoner",
            max_attempts=2,
            server_backoff_ms=100,
            locale="pt_BR",
        )
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(500)

        client = CompletionClient.from_settings(
            settings, transport=httpx.MockTransport(handler), backoff=backoff
        )
        outcome = client.send("olá")

        assert outcome.kind is FailureKind.SERVER_UNAVAILABLE
        assert "indisponível" in outcome.text
        assert len(seen) == 2
        assert backoff.delays == [100]
        assert str(seen[0].url) == "http://localhost:9000/v1/chat/completions"
        assert seen[0].headers["Authorization"] == "Bearer sk-settings"
        assert json.loads(seen[0].content)["model"] == "deepseek-reasoner"
