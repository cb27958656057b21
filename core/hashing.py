"""
core/hashing.py -- Thin hex-digest helpers over hashlib.

This is the hash primitive the credential scheme consumes, not a general
hashing API: it accepts text or bytes and returns a lowercase hex digest.
"""

import hashlib


def to_bytes(data: str | bytes) -> bytes:
    """Encode text as UTF-8; pass bytes through unchanged."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(f"expected str or bytes, got {type(data).__name__}")


def hex_digest(algorithm: str, data: str | bytes) -> str:
    """Return the hex digest of data under the named hashlib algorithm.

    Raises ValueError for an algorithm hashlib does not provide.
    """
    try:
        h = hashlib.new(algorithm)
    except ValueError as exc:
        raise ValueError(f"Unsupported hash algorithm: {algorithm!r}") from exc
    h.update(to_bytes(data))
    return h.hexdigest()


def md5(data: str | bytes) -> str:
    return hex_digest("md5", data)


def sha1(data: str | bytes) -> str:
    return hex_digest("sha1", data)
