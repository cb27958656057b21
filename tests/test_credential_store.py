"""Unit tests for auth/store.py -- CredentialStore.

Covers:
- set_password() then check_password() with right and wrong passwords
- Password change overwrites the record and invalidates the old password
- Unknown usernames return False after verifying against DUMMY_RECORD
- Stored records are LEFT:DIGEST:RIGHT, never the plaintext
- count() / has_credentials()
"""

from unittest.mock import patch

from auth.credentials import DUMMY_RECORD


def test_empty_store(store):
    assert store.count() == 0
    assert store.has_credentials() is False
    assert store.get_record("alice") is None


def test_set_and_check(store):
    store.set_password("alice", "s3cret")
    assert store.check_password("alice", "s3cret") is True
    assert store.check_password("alice", "wrong") is False
    assert store.has_credentials() is True


def test_record_is_not_plaintext(store):
    store.set_password("alice", "s3cret")
    record = store.get_record("alice")
    assert record is not None
    assert "s3cret" not in record
    assert len(record.split(":")) == 3


def test_password_change_overwrites(store):
    store.set_password("alice", "old-password")
    first = store.get_record("alice")
    store.set_password("alice", "new-password")

    assert store.count() == 1
    assert store.get_record("alice") != first
    assert store.check_password("alice", "new-password") is True
    assert store.check_password("alice", "old-password") is False


def test_users_are_independent(store):
    store.set_password("alice", "one")
    store.set_password("bob", "two")
    assert store.count() == 2
    assert store.check_password("alice", "one")
    assert store.check_password("bob", "two")
    assert not store.check_password("alice", "two")


def test_unknown_user_verifies_against_dummy(store):
    """Timing equalization: an unknown username still runs one verification."""
    with patch("auth.store.verify_credential", return_value=True) as mock_verify:
        assert store.check_password("nobody", "whatever") is False
    mock_verify.assert_called_once_with("whatever", DUMMY_RECORD)
