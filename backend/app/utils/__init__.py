"""Shared helpers for request payload decoding."""
import base64
import binascii
from datetime import datetime, timezone

from app.core.errors import InvalidInput


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def decode_base64_payload(payload: str) -> bytes:
    """Decode a base64 upload body.

    Accepts both bare base64 and browser data URLs such as
    "data:application/pdf;base64,JVBERi0...". Whitespace inside the payload
    is ignored.
    """
    if payload is None:
        raise InvalidInput("base64 payload is required")
    text = payload.strip()
    if text.startswith("data:"):
        header, sep, text = text.partition(",")
        if not sep or ";base64" not in header:
            raise InvalidInput("Unsupported data URL")
    text = "".join(text.split())
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInput("Invalid base64 payload")
