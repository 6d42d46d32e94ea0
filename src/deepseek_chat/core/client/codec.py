"""
Wire codec for the DeepSeek chat completions endpoint.

The request body is assembled by hand and the reply text is pulled out of the
response with a textual scan for the ``"content":"`` marker instead of a JSON
parser. Only that one field of the response is ever consulted.
"""

import logging

from .errors import IncompleteResponseError, ResponseFormatError
from .outcome import ChatRequest

logger = logging.getLogger(__name__)

CONTENT_MARKER = '"content":"'

# Backslash must come first so the backslashes added by the other
# substitutions are not escaped twice.
_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)

# Escaped backslash must come last so it cannot feed the earlier substitutions.
_UNESCAPES = (
    ("\\n", "\n"),
    ("\\r", "\r"),
    ("\\t", "\t"),
    ('\\"', '"'),
    ("\\\\", "\\"),
)


def escape_json(text: str) -> str:
    """Escape text for use inside a JSON string literal."""
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def unescape_json(text: str) -> str:
    """Reverse :func:`escape_json` on the body of a JSON string literal."""
    for escaped, raw in _UNESCAPES:
        text = text.replace(escaped, raw)
    return text


def encode_request(request: ChatRequest, model: str) -> str:
    """Build the JSON body for a single-turn chat completion."""
    return (
        '{"model": "%s", "messages": [{"role": "user", "content": "%s"}]}'
        % (escape_json(model), escape_json(request.message))
    )


def extract_content(body: str) -> str:
    """
    Extract and unescape the first ``content`` string field of a response body.

    Args:
        body: Raw response body

    Returns:
        The unescaped reply text

    Raises:
        ResponseFormatError: If the content marker is not present
        IncompleteResponseError: If the content value has no closing quote
    """
    marker_index = body.find(CONTENT_MARKER)
    if marker_index < 0:
        raise ResponseFormatError(body)

    start = marker_index + len(CONTENT_MARKER)
    end = None
    escaped = False
    for index in range(start, len(body)):
        char = body[index]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            end = index
            break

    if end is None:
        logger.debug(f"Unterminated content field in {len(body)}-character response")
        raise IncompleteResponseError(body)

    return unescape_json(body[start:end])
