"""Encode one participant's assignment into a URL-safe token.

The pipeline is JSON -> reversed text -> base64 -> percent-encoding, which
matches the links produced by the web client. It only keeps the recipient's
name from being readable at a glance; anyone can decode a token.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import NamedTuple, Optional
from urllib.parse import quote, unquote


class Payload(NamedTuple):
    title: str
    description: str
    giver: str
    receiver: str


# Wire keys, in serialization order.
_KEYS = ("t", "d", "g", "r")

_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]+")
_BASE64_BODY = re.compile(r"[A-Za-z0-9+/]*")


def encode(payload: Payload) -> str:
    text = json.dumps(dict(zip(_KEYS, payload)), separators=(",", ":"))
    reversed_text = text[::-1]
    # ensure_ascii keeps the JSON text ASCII, so base64 sees the same bytes a
    # browser's btoa() would.
    b64 = base64.b64encode(reversed_text.encode("ascii")).decode("ascii")
    return quote(b64, safe="")


def _forgiving_b64decode(text: str) -> bytes:
    """Decode base64 the way a browser's atob() does.

    ASCII whitespace is dropped and trailing padding is optional. Anything
    else outside the base64 alphabet is an error.
    """
    text = _ASCII_WHITESPACE.sub("", text)
    if len(text) % 4 == 0:
        if text.endswith("=="):
            text = text[:-2]
        elif text.endswith("="):
            text = text[:-1]
    if len(text) % 4 == 1 or not _BASE64_BODY.fullmatch(text):
        raise binascii.Error("invalid base64 data")
    return base64.b64decode(text + "=" * (-len(text) % 4), validate=True)


def decode(token: str) -> Optional[Payload]:
    """Return the payload carried by ``token``, or ``None`` if it is malformed."""
    try:
        b64 = unquote(token, errors="strict")
        # atob() yields one character per byte, so read the bytes as Latin-1.
        reversed_text = _forgiving_b64decode(b64).decode("latin-1")
        data = json.loads(reversed_text[::-1])
    except (binascii.Error, UnicodeError, ValueError, TypeError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None
    fields = [data.get(key) for key in _KEYS]
    if not all(isinstance(value, str) for value in fields):
        return None
    return Payload(*fields)
