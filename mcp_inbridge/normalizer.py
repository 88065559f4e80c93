"""
Response normalization.

Turns whatever the MCP server sent back (a JSON body, an event-stream
framed body, or an empty 202) into the single JSON-RPC message that is
written to stdout.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict

from .exceptions import ResponseParseError

SESSION_HEADER = "Mcp-Session-Id"
ACCEPTED_STATUS = 202

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")
_SNIPPET_LEN = 200


class ResponseKind(str, Enum):
    EMPTY = "empty"
    STRUCTURED = "structured"
    EVENT_STREAM = "event_stream"
    TEXT_JSON = "text_json"
    UNPARSEABLE = "unparseable"


@dataclass
class RawResponse:
    """
    Status, headers and body of one HTTP reply.

    `parsed` marks a body already decoded from JSON; such a body is
    returned as-is even when it is a JSON string.
    """
    status_code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: Any = ""
    parsed: bool = False

    def __post_init__(self):
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers)

    @property
    def session_id(self) -> Optional[str]:
        return self.headers.get(SESSION_HEADER) or None


def is_event_stream(text: str) -> bool:
    """True if `text` has both an `event:` line and a `data:` line."""
    lines = _LINE_SPLIT.split(text)
    has_event = any(line.startswith("event:") for line in lines)
    has_data = any(line.startswith("data:") for line in lines)
    return has_event and has_data


def extract_event_data(text: str) -> Any:
    """
    Parse the payload of the first `data:` line.

    Raises:
        ValueError: If there is no data line or it is not JSON
    """
    for line in _LINE_SPLIT.split(text):
        if line.startswith("data:"):
            payload = line[len("data:"):]
            if payload.startswith(" "):
                payload = payload[1:]
            return json.loads(payload)
    raise ValueError("no data line in event stream")


def _parse_text(raw: RawResponse):
    """Return (kind, value) for a text body."""
    text = raw.body
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    if is_event_stream(text):
        try:
            return ResponseKind.EVENT_STREAM, extract_event_data(text)
        except ValueError:
            # fall through to plain JSON
            pass

    try:
        return ResponseKind.TEXT_JSON, json.loads(text)
    except ValueError:
        return ResponseKind.UNPARSEABLE, text


def _decide(raw: RawResponse):
    if raw.status_code == ACCEPTED_STATUS:
        return ResponseKind.EMPTY, {}
    if raw.parsed or not isinstance(raw.body, (str, bytes)):
        return ResponseKind.STRUCTURED, raw.body
    return _parse_text(raw)


def classify(raw: RawResponse) -> ResponseKind:
    """Which response variant `raw` is."""
    kind, _ = _decide(raw)
    return kind


def normalize(raw: RawResponse) -> Any:
    """
    Produce the JSON-RPC message for `raw`.

    Order: 202 is `{}`; an already-parsed body is returned unchanged;
    event-stream text yields its first data payload; other text is parsed
    as JSON.

    Raises:
        ResponseParseError: If no rule produced a JSON value
    """
    kind, value = _decide(raw)
    if kind is ResponseKind.UNPARSEABLE:
        snippet = value if len(value) <= _SNIPPET_LEN else value[:_SNIPPET_LEN] + "..."
        if not snippet.strip():
            snippet = "<empty body>"
        raise ResponseParseError(
            f"Unparseable response from MCP server (HTTP {raw.status_code}): {snippet}",
            status_code=raw.status_code,
        )
    return value
