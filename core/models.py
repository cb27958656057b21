"""
core/models.py -- Domain dataclasses shared by auth/ and vault/.

Pattern: Data class (pure data container, minimal logic). Parsing and
formatting of the textual/binary wire shapes live next to the shape they
describe; hashing and encryption live in auth/ and vault/.

Layer rule: no imports from api/, auth/, or vault/.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import DecryptionError, MalformedRecord

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

RECORD_SEPARATOR = ":"

PAYLOAD_VERSION = 1
PAYLOAD_HEADER_SIZE = 4
KDF_SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16


@dataclass(frozen=True)
class CredentialRecord:
    """A salted password digest in LEFT:DIGEST:RIGHT form.

    left / right are the two-character salt fragments; digest is the
    uppercase hex digest of left + plaintext + right. All three are stored
    uppercase regardless of how the record was supplied.
    """

    left: str
    digest: str
    right: str

    @classmethod
    def parse(cls, text: str) -> CredentialRecord:
        """Split a stored record into its fields.

        Input is uppercased first (records are case-insensitive). Fields
        beyond the third are ignored. Raises MalformedRecord when fewer than
        three fields are present.
        """
        if not isinstance(text, str):
            raise MalformedRecord(f"record must be a string, got {type(text).__name__}")
        parts = text.upper().split(RECORD_SEPARATOR)
        if len(parts) < 3:
            raise MalformedRecord("record must have at least 3 ':'-separated fields")
        return cls(left=parts[0], digest=parts[1], right=parts[2])

    def __str__(self) -> str:
        return RECORD_SEPARATOR.join((self.left, self.digest, self.right))


@dataclass(frozen=True)
class SealedPayload:
    """Binary layout of an encrypted payload, before hex encoding.

    Header (authenticated as AES-GCM associated data):
        version | log2(N) | r | p      -- one byte each
    Followed by:
        salt (16) | nonce (12) | ciphertext + tag (>= 16)
    """

    log2_n: int
    r: int
    p: int
    salt: bytes
    nonce: bytes
    ciphertext: bytes
    version: int = PAYLOAD_VERSION

    @property
    def header(self) -> bytes:
        return bytes((self.version, self.log2_n, self.r, self.p))

    def to_bytes(self) -> bytes:
        return self.header + self.salt + self.nonce + self.ciphertext

    @classmethod
    def from_bytes(cls, raw: bytes) -> SealedPayload:
        """Split raw payload bytes into fields. Raises DecryptionError when truncated."""
        minimum = PAYLOAD_HEADER_SIZE + KDF_SALT_SIZE + NONCE_SIZE + TAG_SIZE
        if len(raw) < minimum:
            raise DecryptionError("payload is truncated")
        version, log2_n, r, p = raw[:PAYLOAD_HEADER_SIZE]
        salt_end = PAYLOAD_HEADER_SIZE + KDF_SALT_SIZE
        nonce_end = salt_end + NONCE_SIZE
        return cls(
            version=version,
            log2_n=log2_n,
            r=r,
            p=p,
            salt=raw[PAYLOAD_HEADER_SIZE:salt_end],
            nonce=raw[salt_end:nonce_end],
            ciphertext=raw[nonce_end:],
        )
