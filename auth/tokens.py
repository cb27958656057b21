"""
auth/tokens.py -- Random token generation (verification codes, temp passwords).

All tokens come from the secrets module. random.choice is never used here:
its Mersenne Twister state can be recovered from a few hundred outputs.
"""

from __future__ import annotations

import secrets
import string

ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits
LETTERS = string.ascii_uppercase + string.ascii_lowercase
DIGITS = string.digits

_DEFAULT_SIZE = 6


def random_string(size: int = _DEFAULT_SIZE, chars: str = ALPHANUMERIC) -> str:
    """Return size characters drawn uniformly from chars.

    Raises ValueError for a negative or non-int size, or an empty alphabet.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise ValueError(f"size must be a non-negative int, got {size!r}")
    if not chars:
        raise ValueError("chars must not be empty")
    return "".join(secrets.choice(chars) for _ in range(size))


def random_number(size: int = _DEFAULT_SIZE) -> str:
    """Return a string of size random decimal digits (leading zeros kept).

    >>> len(random_number())
    6
    """
    return random_string(size, DIGITS)


def random_letters(size: int = _DEFAULT_SIZE) -> str:
    """Return a string of size random ASCII letters."""
    return random_string(size, LETTERS)
