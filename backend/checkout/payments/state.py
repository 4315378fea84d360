"""Correlation token and reference generation."""

import base64
import hmac
import secrets
import string

STATE_BYTES = 32
REF_ID_LENGTH = 8
REF_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_state() -> str:
    """Generate a callback correlation token.

    32 bytes from the OS CSPRNG, URL-safe base64 without padding
    (always 43 characters).
    """
    raw = secrets.token_bytes(STATE_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def verify_state(received: str | None, expected: str | None) -> bool:
    """Check callback state against the expected token.

    Exact, case-sensitive comparison in constant time. An empty or missing
    value on either side never verifies.
    """
    if not received or not expected:
        return False
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


def generate_ref_id(length: int = REF_ID_LENGTH) -> str:
    """Generate a merchant reference, e.g. '4F7K2Q9A'."""
    return "".join(secrets.choice(REF_ID_ALPHABET) for _ in range(length))
