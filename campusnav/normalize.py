"""
Repairing raw response bodies before they are decoded.

The service has a few habits that make its responses invalid as-is:

- most endpoints are labelled and sent as Latin-1, a few as UTF-8
- JSON string values contain raw newline characters
- errors come back as HTTP 200 with a body like {"error": "Login incorrect"}

Which encoding an endpoint uses is a static property of the endpoint, the
caller passes it in.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from campusnav.errors import DecodeFailed, ReEncodingFailed, ServerReportedError


class Encoding(Enum):
    LATIN1 = "latin-1"
    UTF8 = "utf-8"


def repair_text(raw: bytes, encoding: Encoding) -> str:
    """
    Steps 1 and 2: reinterpret the bytes in the declared encoding as UTF-8
    text and strip every literal newline.
    """
    try:
        if encoding is Encoding.LATIN1:
            # Latin-1 maps every byte, the round trip through UTF-8 makes sure
            # the result is representable before anything else touches it.
            text = raw.decode("latin-1").encode("utf-8").decode("utf-8")
        else:
            text = raw.decode("utf-8")
    except UnicodeError as exc:
        raise ReEncodingFailed() from exc

    return text.replace("\n", "")


def error_envelope_message(payload: Any) -> str | None:
    """
    Return the message of an error envelope, or None if payload is something else.

    An envelope is an object carrying a string "error" field.
    """
    if isinstance(payload, dict):
        message = payload.get("error")
        if isinstance(message, str):
            return message
    return None


def load_payload(raw: bytes, encoding: Encoding) -> Any:
    """
    Steps 1 to 3: repair the text, parse it as JSON and surface error envelopes.

    Raises ReEncodingFailed, DecodeFailed (not JSON at all) or ServerReportedError.
    """
    text = repair_text(raw, encoding)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeFailed(exc) from exc

    message = error_envelope_message(payload)
    if message is not None:
        raise ServerReportedError(message)
    return payload
