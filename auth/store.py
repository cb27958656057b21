"""
auth/store.py -- SQLAlchemy Core persistence for credential records.

Pattern: Repository. CredentialStore is the only code that touches SQL;
route and CLI code call set_password() / check_password() and never see a
query.

Lifecycle of a record:
  set_password() issues a fresh record and inserts it, or overwrites the
  existing one on password change. There is no delete -- a record is only
  ever replaced. Plaintext passwords are never written anywhere.

Security:
  All queries use bound parameters. No f-strings in SQL.

  check_password() always runs one digest + constant-time compare, against
  DUMMY_RECORD when the username is unknown, so response time does not
  reveal which usernames exist.

Layer rule: no imports from api/ or vault/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.credentials import DUMMY_RECORD, issue_credential, verify_credential
from core.config import get_settings

logger = logging.getLogger("credseal.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_credentials = Table(
    "credentials",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("record", Text, nullable=False),  # LEFT:DIGEST:RIGHT
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked by a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository mapping usernames to credential records.

    Usage:
        store = CredentialStore()
        store.set_password("alice", "s3cret")
        store.check_password("alice", "s3cret")   # True
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().db_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def set_password(self, username: str, plaintext: str) -> None:
        """Issue a fresh record for plaintext and store it under username.

        Overwrites any existing record, so the previous password stops
        verifying immediately.
        """
        record = issue_credential(plaintext)
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _credentials.update()
                .where(_credentials.c.username == username)
                .values(record=record, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(
                    _credentials.insert().values(
                        username=username,
                        record=record,
                        created_at=now,
                        updated_at=now,
                    )
                )
                logger.info("Credential created for %s", username)
            else:
                logger.info("Credential replaced for %s", username)
            conn.commit()

    def get_record(self, username: str) -> str | None:
        """Return the stored record for username, or None if there is none."""
        with self.engine.connect() as conn:
            return conn.execute(
                select(_credentials.c.record).where(_credentials.c.username == username)
            ).scalar_one_or_none()

    def check_password(self, username: str, plaintext: str) -> bool:
        """Return True if plaintext matches the record stored for username.

        Unknown usernames verify against DUMMY_RECORD and return False. Do
        NOT return early before verifying -- that re-introduces the timing
        difference.
        """
        record = self.get_record(username)
        if record is None:
            verify_credential(plaintext, DUMMY_RECORD)
            return False
        return verify_credential(plaintext, record)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_credentials)).scalar() or 0

    def has_credentials(self) -> bool:
        """Return True if at least one record exists."""
        return self.count() > 0

    def close(self) -> None:
        self.engine.dispose()
