"""HMAC-SHA256 request signing for incident webhooks."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Optional, Union


def rfc3339_now(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def sign(secret: Union[str, bytes], payload: bytes, timestamp: str) -> str:
    """
    Sign `timestamp:payload` with the shared secret.

    Returns the base64 encoded HMAC-SHA256 digest. The signature binds the
    timestamp header to the exact body bytes.
    """
    message = timestamp.encode("utf-8") + b":" + payload
    digest = hmac.new(_to_bytes(secret), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(
    secret: Union[str, bytes],
    payload: bytes,
    timestamp: str,
    signature: str,
) -> bool:
    """Check a received signature in constant time."""
    expected = sign(secret, payload, timestamp)
    return hmac.compare_digest(expected, signature)
