"""
tests/test_api_routes.py -- Integration tests for the CredSeal REST API.

These tests exercise the full stack: FastAPI routing -> request validation ->
auth/vault calls -> exception handlers -> response serialization.

Fixtures used (from conftest.py):
  - api_client: (client, store) -- store is pre-seeded with alice / s3cret.
"""

from __future__ import annotations

import re

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from fastapi.testclient import TestClient

from api.limiter import limiter
from core.config import get_settings
from core.models import SealedPayload
from vault import codec

_RECORD_RE = re.compile(r"^[0-9A-F]{2}:[0-9A-F]{32}:[0-9A-F]{2}$")


class TestHealth:
    def test_health_returns_components(self, api_client) -> None:
        client, _ = api_client
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["components"] == {"app": "ok", "database": "ok"}

    def test_unknown_host_rejected(self, api_client) -> None:
        client, _ = api_client
        resp = client.get("/api/v1/health", headers={"host": "evil.example.com"})
        assert resp.status_code == 400


class TestCredentialRoutes:
    def test_issue_then_verify(self, api_client: tuple[TestClient, object]) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/credentials/issue", json={"password": "s3cret"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        record = resp.json()["record"]
        assert _RECORD_RE.match(record)

        ok = client.post("/api/v1/credentials/verify", json={"password": "s3cret", "record": record})
        bad = client.post("/api/v1/credentials/verify", json={"password": "wrong", "record": record})
        assert ok.json() == {"valid": True}
        assert bad.json() == {"valid": False}

    def test_malformed_record_is_not_an_error(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/credentials/verify", json={"password": "x", "record": "nosep"})
        assert resp.status_code == 200
        assert resp.json() == {"valid": False}

    def test_missing_password_is_validation_error(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/credentials/issue", json={})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_validation_error_does_not_echo_input(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/credentials/issue", json={"password": "p" * 2000})
        assert resp.status_code == 422
        assert "ppppp" not in resp.text


class TestStoredCredentialRoutes:
    def test_check_seeded_user(self, api_client) -> None:
        client, _ = api_client
        ok = client.post("/api/v1/users/alice/check", json={"password": "s3cret"})
        bad = client.post("/api/v1/users/alice/check", json={"password": "nope"})
        assert ok.json() == {"valid": True}
        assert bad.json() == {"valid": False}

    def test_unknown_user_is_invalid(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/users/ghost/check", json={"password": "s3cret"})
        assert resp.status_code == 200
        assert resp.json() == {"valid": False}

    def test_set_and_change_password(self, api_client) -> None:
        client, store = api_client
        resp = client.put("/api/v1/users/bob/password", json={"password": "first"})
        assert resp.status_code == 204
        assert store.check_password("bob", "first")

        client.put("/api/v1/users/bob/password", json={"password": "second"})
        assert client.post("/api/v1/users/bob/check", json={"password": "second"}).json()["valid"] is True
        assert client.post("/api/v1/users/bob/check", json={"password": "first"}).json()["valid"] is False

    def test_invalid_username_rejected(self, api_client) -> None:
        client, _ = api_client
        resp = client.put("/api/v1/users/bad name!/password", json={"password": "x"})
        assert resp.status_code == 422


class TestVaultRoutes:
    def test_encrypt_decrypt_round_trip(self, api_client) -> None:
        client, _ = api_client
        value = {"user": "alice", "id": 42}
        enc = client.post("/api/v1/vault/encrypt", json={"value": value, "passphrase": "passphrase"})
        assert enc.status_code == 200, enc.text
        payload = enc.json()["payload"]

        dec = client.post("/api/v1/vault/decrypt", json={"payload": payload, "passphrase": "passphrase"})
        assert dec.status_code == 200, dec.text
        assert dec.json() == {"value": value}
        assert dec.headers["cache-control"] == "no-store"

    def test_wrong_passphrase_is_400(self, api_client) -> None:
        client, _ = api_client
        payload = client.post("/api/v1/vault/encrypt", json={"value": [1], "passphrase": "one"}).json()["payload"]
        resp = client.post("/api/v1/vault/decrypt", json={"payload": payload, "passphrase": "two"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "decryption_failed"

    def test_garbage_payload_is_400(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/vault/decrypt", json={"payload": "not-hex", "passphrase": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "decryption_failed"

    def test_empty_passphrase_is_validation_error(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/v1/vault/encrypt", json={"value": 1, "passphrase": ""})
        assert resp.status_code == 422

    def test_non_finite_value_is_serialization_error(self, api_client) -> None:
        client, _ = api_client
        resp = client.post(
            "/api/v1/vault/encrypt",
            content='{"value": [1, NaN], "passphrase": "pw"}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "serialization_error"

    def test_non_json_plaintext_is_deserialization_error(self, api_client) -> None:
        client, _ = api_client
        salt, nonce = b"\x00" * 16, b"\x01" * 12
        header = SealedPayload(log2_n=10, r=8, p=1, salt=salt, nonce=nonce, ciphertext=b"").header
        ciphertext = AESGCM(codec._derive_key("pw", salt, 10, 8, 1)).encrypt(nonce, b"{not json", header)
        payload = SealedPayload(log2_n=10, r=8, p=1, salt=salt, nonce=nonce, ciphertext=ciphertext).to_bytes().hex()

        resp = client.post("/api/v1/vault/decrypt", json={"payload": payload, "passphrase": "pw"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "deserialization_error"


class TestRateLimit:
    @pytest.fixture
    def low_verify_limit(self, monkeypatch):
        monkeypatch.setenv("VERIFY_RATE_LIMIT", "2/minute")
        get_settings.cache_clear()
        limiter.reset()
        yield
        monkeypatch.undo()
        get_settings.cache_clear()
        limiter.reset()

    def test_verify_over_limit_is_429(self, api_client, low_verify_limit) -> None:
        client, _ = api_client
        body = {"password": "x", "record": "nosep"}
        codes = [client.post("/api/v1/credentials/verify", json=body).status_code for _ in range(3)]
        assert codes == [200, 200, 429]

        resp = client.post("/api/v1/credentials/verify", json=body)
        assert resp.status_code == 429
        assert resp.json()["error"]["code"] == "rate_limited"
        assert resp.headers["retry-after"].isdigit()

    def test_user_check_is_limited(self, api_client, low_verify_limit) -> None:
        client, _ = api_client
        codes = [
            client.post("/api/v1/users/alice/check", json={"password": "nope"}).status_code for _ in range(3)
        ]
        assert codes == [200, 200, 429]
