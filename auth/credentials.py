"""
auth/credentials.py -- Salted password digests in LEFT:DIGEST:RIGHT form.

Record format:
  LEFT and RIGHT are the first and last two characters of a 32-character
  uppercase hex "salt universe" (md5 of 16 CSPRNG bytes). DIGEST is the
  uppercase hex digest of LEFT + plaintext + RIGHT under the configured
  algorithm (md5 by default, so existing records keep verifying).

  Example: 3F:9B2C...E1:A0

Security design decisions:
  Salt seed: secrets.token_bytes(16). The record format only carries 2+2 hex
       characters of salt, but the seed behind them must still be
       unpredictable so two issues of the same password differ.

  Verification: hmac.compare_digest() on the two digest strings. Plain ==
       leaks the length of the common prefix through timing.

  Fail-closed: verify_credential() returns False for any malformed record or
       non-string input. It never raises -- login code turns False into 401.

  DUMMY_RECORD: issued once at module load so store lookups for unknown
       usernames still run one digest + compare [see auth/store.py].

Layer rule: no imports from api/ or vault/. Import from core/ is allowed.
"""

from __future__ import annotations

import hmac
import logging
import secrets

from core.config import get_settings
from core.errors import MalformedRecord
from core.hashing import hex_digest, md5
from core.models import CredentialRecord

logger = logging.getLogger("credseal.auth")

_SEED_BYTES = 16
_FRAGMENT_LEN = 2


def _salt_universe() -> str:
    """Return 32 uppercase hex characters derived from fresh CSPRNG bytes."""
    return md5(secrets.token_bytes(_SEED_BYTES)).upper()


def _digest(left: str, plaintext: str, right: str) -> str:
    algorithm = get_settings().credential_digest_algorithm
    return hex_digest(algorithm, left + plaintext + right).upper()


def issue_credential(plaintext: str) -> str:
    """Return a new salted digest record for plaintext.

    Two calls with the same plaintext yield different records (fresh salt),
    each of which verifies. Raises TypeError if plaintext is not a str and
    ValueError if it cannot be encoded as UTF-8 (lone surrogates).
    """
    if not isinstance(plaintext, str):
        raise TypeError(f"plaintext must be a str, got {type(plaintext).__name__}")
    universe = _salt_universe()
    left = universe[:_FRAGMENT_LEN]
    right = universe[-_FRAGMENT_LEN:]
    try:
        digest = _digest(left, plaintext, right)
    except UnicodeEncodeError as exc:
        raise ValueError("plaintext is not encodable as UTF-8") from exc
    return str(CredentialRecord(left=left, digest=digest, right=right))


def verify_credential(plaintext: str, record: str) -> bool:
    """Return True if plaintext matches the stored record.

    The record is case-insensitive. Returns False, never raises, for a record
    with fewer than three ':'-separated fields, for non-string input, or for
    input that cannot be encoded as UTF-8.
    """
    if not isinstance(plaintext, str):
        return False
    try:
        parsed = CredentialRecord.parse(record)
    except MalformedRecord:
        logger.debug("Rejected malformed credential record")
        return False
    try:
        expected = _digest(parsed.left, plaintext, parsed.right)
        # compare_digest requires ASCII-only str; stored digests are hex but a
        # hostile record may contain anything.
        return hmac.compare_digest(expected.encode("utf-8"), parsed.digest.encode("utf-8"))
    except UnicodeEncodeError:
        logger.debug("Rejected credential input that is not encodable as UTF-8")
        return False


# Timing equalization dummy record.
# Issued once at import so the first lookup of an unknown user costs the same
# as every later one.
DUMMY_RECORD: str = issue_credential(secrets.token_hex(16))
