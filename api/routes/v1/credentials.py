"""
api/routes/v1/credentials.py -- Credential issue/verify and per-user password endpoints.

Routes:
  POST /api/v1/credentials/issue             -- plaintext -> LEFT:DIGEST:RIGHT record
  POST /api/v1/credentials/verify            -- (plaintext, record) -> valid
  PUT  /api/v1/users/{username}/password     -- set or change a stored password; 204
  POST /api/v1/users/{username}/check        -- check a password against the store

Security:
  verify and check are rate-limited per IP (Settings.verify_rate_limit) --
  they are password-guessing oracles.
  A malformed record yields valid=false with 200, never an error: the
  fail-closed contract of verify_credential() extends to the HTTP layer.
  Cache-Control: no-store on every response that carries a record.
  Unknown usernames and wrong passwords both return valid=false.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import limiter, verify_limit
from api.models import USERNAME_PATTERN, PasswordBody, RecordResponse, VerifyRequest, VerifyResponse
from auth.credentials import issue_credential, verify_credential
from auth.store import CredentialStore

logger = logging.getLogger("credseal.api")

router = APIRouter()

_Username = Annotated[str, Path(pattern=USERNAME_PATTERN)]


# ---------------------------------------------------------------------------
# Stateless record endpoints
# ---------------------------------------------------------------------------


@router.post("/credentials/issue", response_model=RecordResponse)
def issue(body: PasswordBody) -> JSONResponse:
    """Return a fresh salted digest record for the given password."""
    record = issue_credential(body.password)
    resp = JSONResponse(content=RecordResponse(record=record).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


# limiter.limit must sit below the route decorator so the registered endpoint is the wrapped one.
@router.post("/credentials/verify", response_model=VerifyResponse)
@limiter.limit(verify_limit)
def verify(request: Request, body: VerifyRequest) -> VerifyResponse:
    """Check a password against a caller-supplied record."""
    return VerifyResponse(valid=verify_credential(body.password, body.record))


# ---------------------------------------------------------------------------
# Stored credentials
# ---------------------------------------------------------------------------


@router.put("/users/{username}/password", status_code=204)
def set_password(request: Request, username: _Username, body: PasswordBody) -> Response:
    """Create or replace the stored credential for username.

    Replacing invalidates the previous password immediately. The new record
    is not returned -- it never needs to leave the server.
    """
    store: CredentialStore = request.app.state.credential_store
    store.set_password(username, body.password)
    return Response(status_code=204)


@router.post("/users/{username}/check", response_model=VerifyResponse)
@limiter.limit(verify_limit)
def check_password(request: Request, username: _Username, body: PasswordBody) -> VerifyResponse:
    """Return valid=true if the password matches the stored credential.

    Uses CredentialStore.check_password(), which equalizes timing for unknown
    usernames. Do NOT inline get_record() + verify_credential() here.
    """
    store: CredentialStore = request.app.state.credential_store
    valid = store.check_password(username, body.password)
    if not valid:
        logger.info("Failed password check for %s", username)
    return VerifyResponse(valid=valid)
