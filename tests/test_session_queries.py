import re
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from walkingdrum.sql.account_queries import AccountQueries
from walkingdrum.sql.core import NoRowsError
from walkingdrum.sql.session_queries import SessionQueries

_PLACEHOLDER = re.compile(r"\$(\d+)")

_SCHEMA = """
CREATE TABLE accounts (
  id TEXT PRIMARY KEY,
  email TEXT NOT NULL UNIQUE COLLATE NOCASE,
  email_verified INTEGER NOT NULL DEFAULT 0,
  display_name TEXT NOT NULL,
  password_hash TEXT NOT NULL,
  totp_secret TEXT,
  totp_enabled INTEGER NOT NULL DEFAULT 0,
  status TEXT NOT NULL DEFAULT 'active',
  created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  last_login_at TEXT,
  deleted_at TEXT
);
CREATE TABLE sessions (
  id TEXT PRIMARY KEY,
  account_id TEXT NOT NULL REFERENCES accounts(id),
  token_hash TEXT NOT NULL UNIQUE,
  ip_address TEXT,
  user_agent TEXT,
  created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  last_seen_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  expires_at TEXT NOT NULL,
  revoked_at TEXT,
  revoke_reason TEXT
    CHECK (revoke_reason IN ('user_logout', 'password_change', 'admin', 'expired'))
);
"""


def _ts_text(value):
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")


sqlite3.register_adapter(uuid.UUID, str)
sqlite3.register_adapter(datetime, _ts_text)


class SqliteDB:
    def __init__(self, conn):
        self.conn = conn

    def _run(self, sql, args):
        return self.conn.execute(_PLACEHOLDER.sub(r"?\1", sql), args)

    def execute(self, sql, *args):
        return self._run(sql, args).rowcount

    def query(self, sql, *args):
        return self._run(sql, args).fetchall()

    def query_row(self, sql, *args):
        rows = self._run(sql, args).fetchall()
        return rows[0] if rows else None


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.create_function("NOW", 0, lambda: _ts_text(datetime.now(timezone.utc)))
    conn.executescript(_SCHEMA)
    yield SqliteDB(conn)
    conn.close()


@pytest.fixture
def q(db):
    return SessionQueries(db)


def make_account(db, email, name):
    return AccountQueries(db).create_account(uuid.uuid4(), email, name, "x")


def _now():
    return datetime.now(timezone.utc)


def test_sessions_lifecycle(db, q):
    acc = make_account(db, "session-test@example.com", "SessionTest")
    sess = q.create_session(
        uuid.uuid4(), acc.id, "fake-token-hash-1", _now() + timedelta(hours=24)
    )
    assert sess.revoked_at is None
    assert sess.account_id == acc.id

    by_hash = q.get_session_by_token_hash("fake-token-hash-1")
    assert by_hash.id == sess.id

    active = q.list_active_sessions_for_account(acc.id)
    assert len(active) == 1

    revoked = q.revoke_session(sess.id, "user_logout")
    assert isinstance(revoked.revoked_at, datetime)
    assert revoked.revoke_reason == "user_logout"

    assert q.list_active_sessions_for_account(acc.id) == []


def test_session_revoke_reason_check(db, q):
    acc = make_account(db, "check-test@example.com", "CheckTest")
    sess = q.create_session(
        uuid.uuid4(), acc.id, "fake-token-hash-2", _now() + timedelta(hours=1)
    )
    with pytest.raises(sqlite3.IntegrityError):
        q.revoke_session(sess.id, "not-a-real-reason")


def test_session_expired_is_not_active(db, q):
    acc = make_account(db, "expired-test@example.com", "ExpiredTest")
    q.create_session(uuid.uuid4(), acc.id, "fake-token-hash-3", _now() - timedelta(hours=1))
    assert q.list_active_sessions_for_account(acc.id) == []


def test_revoking_twice_raises_no_rows(db, q):
    acc = make_account(db, "twice@example.com", "Twice")
    sess = q.create_session(uuid.uuid4(), acc.id, "fake-token-hash-4", _now() + timedelta(hours=1))
    q.revoke_session(sess.id, "user_logout")
    with pytest.raises(NoRowsError):
        q.revoke_session(sess.id, "user_logout")


def test_unknown_token_hash_raises_no_rows(q):
    with pytest.raises(NoRowsError):
        q.get_session_by_token_hash("missing-hash")