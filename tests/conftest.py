"""
tests/conftest.py -- Shared test fixtures for CredSeal.

This module provides:
  - store: an isolated in-memory CredentialStore per test
  - api_client: TestClient over the real app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API fixture because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread.

Environment must be set before any core/auth/vault import so the lru_cache'd
Settings sees it: the scrypt cost is lowered to the minimum the decoder
accepts to keep the suite fast, and the verify rate limit is raised so
repeated verify calls in one module do not trip it.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SCRYPT_LOG2_N", "10")
os.environ.setdefault("VERIFY_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import CredentialStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _shared_memory_url(name: str) -> str:
    return f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true"


def _patch_lifespan(store: CredentialStore):
    """Return a lifespan that wires the test store into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.credential_store = store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[CredentialStore, None, None]:
    """Fresh CredentialStore backed by a uniquely named in-memory DB."""
    s = CredentialStore(db_url=_shared_memory_url(f"test_store_{uuid.uuid4().hex}"))
    yield s
    s.close()


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, CredentialStore], None, None]:
    """Yield (client, store) for API integration tests.

    The store is pre-seeded with user "alice" / password "s3cret".
    """
    s = CredentialStore(db_url=_shared_memory_url(f"test_api_{uuid.uuid4().hex}"))
    s.set_password("alice", "s3cret")

    app.router.lifespan_context = _patch_lifespan(s)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client, s

    s.close()
