"""Run identifier and bearer token primitives."""

import base64
import hashlib
import hmac
import secrets
import uuid


def generate_run_id() -> str:
    """Return a fresh public run identifier."""
    return f"run-{uuid.uuid4()}"


def generate_token(issued_at: int, expires_at: int) -> str:
    """Return a bearer token embedding its timestamps and 128 random bits.

    The embedded timestamps are for audit only. Authorization comes from the
    stored hash, never from the token's structure.
    """
    return f"{issued_at}.{expires_at}.{secrets.token_hex(16)}"


def hash_token(token: str) -> str:
    """Return the unpadded base64url SHA-256 digest of a token."""
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def timing_safe_equal(a: str, b: str) -> bool:
    """Compare two digests without short-circuiting on the first mismatch."""
    left = a.encode("utf-8")
    right = b.encode("utf-8")
    if len(left) != len(right):
        return False
    return hmac.compare_digest(left, right)
