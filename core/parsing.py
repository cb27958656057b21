"""
core/parsing.py -- Strict numeric and IPv4 parsing.

Every function either returns a value of the requested type or raises
ParseError. Nothing is coerced loosely: booleans are not numbers, "1e3" is
not an integer, and " 12 " is accepted only because surrounding whitespace
is stripped before matching.
"""

import math
import re

from core.errors import ParseError

_INT_RE = re.compile(r"[+-]?[0-9]+")
_NUMBER_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_OCTET_RE = re.compile(r"[0-9]{1,3}")


def parse_int(value) -> int:
    """Parse value as an integer.

    Accepts int, an integral finite float, or a decimal digit string with an
    optional sign.
    """
    if isinstance(value, bool):
        raise ParseError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        raise ParseError(f"not an integer: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if _INT_RE.fullmatch(text):
            return int(text)
    raise ParseError(f"not an integer: {value!r}")


def parse_number(value) -> int | float:
    """Parse value as a finite number.

    Integer-looking strings come back as int, everything else as float.
    """
    if isinstance(value, bool):
        raise ParseError(f"not a number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        raise ParseError(f"not a finite number: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if _INT_RE.fullmatch(text):
            return int(text)
        if _NUMBER_RE.fullmatch(text):
            result = float(text)
            if math.isfinite(result):
                return result
            raise ParseError(f"not a finite number: {value!r}")
    raise ParseError(f"not a number: {value!r}")


def ip_to_int(ip: str) -> int:
    """Convert a dotted-quad IPv4 address to its 32-bit integer value.

    ip_to_int("192.0.34.166") -> 3221234342
    """
    if not isinstance(ip, str):
        raise ParseError(f"not an IPv4 address: {ip!r}")
    octets = ip.strip().split(".")
    if len(octets) != 4:
        raise ParseError(f"not an IPv4 address: {ip!r}")
    result = 0
    for octet in octets:
        if not _OCTET_RE.fullmatch(octet):
            raise ParseError(f"not an IPv4 address: {ip!r}")
        value = int(octet)
        if value > 255:
            raise ParseError(f"octet out of range in {ip!r}")
        result = result * 256 + value
    return result
