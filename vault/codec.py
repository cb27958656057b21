"""
vault/codec.py -- Encrypt and decrypt JSON-compatible values under a passphrase.

Pipeline:
  encrypt: value -> canonical JSON -> UTF-8 -> AES-256-GCM(scrypt(passphrase, salt), nonce) -> hex
  decrypt: hex -> header check -> scrypt -> AES-GCM open (tag check) -> JSON -> value

Security design decisions:
  KDF: scrypt via the cryptography package. Memory-hard, so guessing a
       passphrase costs memory as well as CPU. A fresh 16-byte salt per
       payload means identical passphrases never share a key.

  Cipher: AESGCM with a fresh 12-byte nonce per payload. The 16-byte tag
       makes any modification -- one flipped hex digit, a wrong passphrase,
       a swapped header byte -- fail as DecryptionError instead of returning
       corrupted data.

  Header as associated data: the version and scrypt cost bytes are not
       secret but they are authenticated. Their ranges are checked BEFORE
       key derivation so a crafted payload cannot ask scrypt for gigabytes.

  Canonical JSON: sort_keys + compact separators + allow_nan=False. Only
       shapes that survive a JSON round trip unchanged are accepted, so
       decrypt(encrypt(v, s), s) == v holds exactly.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import json
import logging
import math
import secrets
from dataclasses import replace

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from core.config import SCRYPT_LOG2_N_MAX, SCRYPT_LOG2_N_MIN, SCRYPT_P_MAX, SCRYPT_R_MAX, get_settings
from core.errors import DecryptionError, DeserializationError, SerializationError
from core.models import KDF_SALT_SIZE, NONCE_SIZE, PAYLOAD_VERSION, SealedPayload

logger = logging.getLogger("credseal.vault")

_KEY_SIZE = 32  # AES-256

# ---------------------------------------------------------------------------
# Canonical serialization
# ---------------------------------------------------------------------------


def _check_serializable(value, path: str = "$", active: set[int] | None = None) -> None:
    """Raise SerializationError unless value survives a JSON round trip unchanged.

    json.dumps alone is too lenient: it turns tuples into lists and int keys
    into strings, both of which break the round-trip invariant.
    """
    if active is None:
        active = set()
    if isinstance(value, str):
        _check_text(value, path)
        return
    if value is None or isinstance(value, (bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(f"non-finite number at {path}")
        return
    if isinstance(value, (dict, list)):
        if id(value) in active:
            raise SerializationError(f"circular reference at {path}")
        active.add(id(value))
        if isinstance(value, dict):
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(f"non-string key {key!r} at {path}")
                _check_text(key, path)
                _check_serializable(item, f"{path}.{key}", active)
        else:
            for i, item in enumerate(value):
                _check_serializable(item, f"{path}[{i}]", active)
        active.discard(id(value))
        return
    raise SerializationError(f"unsupported type {type(value).__name__} at {path}")


def _check_text(text: str, path: str) -> None:
    """Lone surrogates are valid in a str but have no UTF-8 encoding."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise SerializationError(f"string not encodable as UTF-8 at {path}") from None


def serialize(value) -> str:
    """Return the canonical JSON text for value."""
    try:
        _check_serializable(value)
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(str(exc)) from exc


def deserialize(text: str):
    """Parse canonical JSON text back into a value."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise DeserializationError("plaintext is not valid JSON") from exc


def _reject_constant(name: str):
    raise ValueError(f"non-finite constant {name}")


def clone(value):
    """Return a deep copy of a JSON-compatible value."""
    return deserialize(serialize(value))


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------


def _derive_key(passphrase: str, salt: bytes, log2_n: int, r: int, p: int) -> bytes:
    kdf = Scrypt(salt=salt, length=_KEY_SIZE, n=1 << log2_n, r=r, p=p)
    return kdf.derive(passphrase.encode("utf-8"))


def _require_passphrase(passphrase: str) -> None:
    if not isinstance(passphrase, str) or not passphrase:
        raise ValueError("passphrase must be a non-empty string")
    try:
        passphrase.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("passphrase is not encodable as UTF-8") from None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encrypt(value, passphrase: str) -> str:
    """Serialize value and encrypt it under passphrase. Returns lowercase hex.

    Raises SerializationError for values outside the JSON-compatible shapes
    (tuples, sets, bytes, objects, non-string keys, NaN/Infinity, cycles,
    strings with lone surrogates). Raises ValueError for an empty passphrase.
    """
    _require_passphrase(passphrase)
    plaintext = serialize(value).encode("utf-8")

    settings = get_settings()
    salt = secrets.token_bytes(KDF_SALT_SIZE)
    nonce = secrets.token_bytes(NONCE_SIZE)
    key = _derive_key(passphrase, salt, settings.scrypt_log2_n, settings.scrypt_r, settings.scrypt_p)

    sealed = SealedPayload(
        log2_n=settings.scrypt_log2_n,
        r=settings.scrypt_r,
        p=settings.scrypt_p,
        salt=salt,
        nonce=nonce,
        ciphertext=b"",
    )
    sealed = replace(sealed, ciphertext=AESGCM(key).encrypt(nonce, plaintext, sealed.header))
    return sealed.to_bytes().hex()


def decrypt(ciphertext_hex: str, passphrase: str):
    """Decrypt a payload produced by encrypt() and return the original value.

    Raises DecryptionError for malformed hex, truncated payloads, unknown
    versions, out-of-range KDF parameters, a wrong passphrase, or tampering.
    Raises DeserializationError if the authenticated plaintext is not JSON.
    """
    _require_passphrase(passphrase)
    if not isinstance(ciphertext_hex, str):
        raise DecryptionError("payload must be a hex string")
    try:
        raw = bytes.fromhex(ciphertext_hex.strip())
    except ValueError as exc:
        raise DecryptionError("payload is not valid hex") from exc

    sealed = SealedPayload.from_bytes(raw)
    if sealed.version != PAYLOAD_VERSION:
        raise DecryptionError(f"unsupported payload version {sealed.version}")
    if not (
        SCRYPT_LOG2_N_MIN <= sealed.log2_n <= SCRYPT_LOG2_N_MAX
        and 1 <= sealed.r <= SCRYPT_R_MAX
        and 1 <= sealed.p <= SCRYPT_P_MAX
    ):
        raise DecryptionError("payload KDF parameters out of range")

    key = _derive_key(passphrase, sealed.salt, sealed.log2_n, sealed.r, sealed.p)
    try:
        plaintext = AESGCM(key).decrypt(sealed.nonce, sealed.ciphertext, sealed.header)
    except InvalidTag:
        logger.debug("Payload failed authentication")
        raise DecryptionError("payload failed authentication") from None

    try:
        text = plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DeserializationError("plaintext is not valid UTF-8") from exc
    return deserialize(text)
