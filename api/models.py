"""
API request and response models for CredSeal REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from core/models.py, which owns the internal
record and payload shapes. Route handlers map between the two.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Usernames are path parameters; keep them to a conservative charset.
USERNAME_PATTERN = r"^[A-Za-z0-9_.@-]{1,255}$"


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: str | None = None


class ErrorResponse(BaseModel):
    """Every non-2xx response body: {"error": {"code", "message", "detail"}}."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class PasswordBody(BaseModel):
    """Request body carrying a single plaintext password.

    max_length bounds the digest work per request. No whitespace stripping:
    leading/trailing spaces are part of the password.
    """

    password: str = Field(min_length=1, max_length=1024)


class VerifyRequest(PasswordBody):
    """Request body for POST /api/v1/credentials/verify.

    record is not pattern-checked here: a malformed record must resolve to
    valid=false, not a 422, to keep the fail-closed contract.
    """

    record: str = Field(max_length=1024)


class RecordResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: str


class VerifyResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------


class EncryptRequest(BaseModel):
    """Request body for POST /api/v1/vault/encrypt. value is any JSON value."""

    value: Any = None
    passphrase: str = Field(min_length=1, max_length=1024)


class DecryptRequest(BaseModel):
    payload: str = Field(min_length=1, max_length=2_000_000)
    passphrase: str = Field(min_length=1, max_length=1024)


class EncryptResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: str


class DecryptResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: Any = None
