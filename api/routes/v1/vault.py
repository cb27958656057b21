"""
api/routes/v1/vault.py -- Passphrase encryption of JSON values.

Routes:
  POST /api/v1/vault/encrypt   -- {"value", "passphrase"} -> {"payload"}
  POST /api/v1/vault/decrypt   -- {"payload", "passphrase"} -> {"value"}

Handlers are plain def (not async): scrypt is CPU- and memory-bound, so
FastAPI runs them in the threadpool instead of blocking the event loop.

Codec errors are not caught here. api/main.py maps CodecError subclasses to
the error envelope (400 decryption_failed, 422 (de)serialization_error).
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models import DecryptRequest, DecryptResponse, EncryptRequest, EncryptResponse
from vault.codec import decrypt, encrypt

router = APIRouter()


@router.post("/vault/encrypt", response_model=EncryptResponse)
def encrypt_value(body: EncryptRequest) -> EncryptResponse:
    return EncryptResponse(payload=encrypt(body.value, body.passphrase))


@router.post("/vault/decrypt", response_model=DecryptResponse)
def decrypt_value(body: DecryptRequest) -> JSONResponse:
    """Decrypt a payload. The plaintext value is returned with Cache-Control: no-store."""
    value = decrypt(body.payload, body.passphrase)
    resp = JSONResponse(content=DecryptResponse(value=value).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
