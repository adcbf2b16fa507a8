"""Password hashing, session tokens, and their link to the sessions table."""

from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt

from walkingdrum.game.model import new_entity_id
from walkingdrum.sql.core import NoRowsError, Session
from walkingdrum.sql.session_queries import SessionQueries

BCRYPT_COST = 10
_BCRYPT_MAX_BYTES = 72
TOKEN_RAND_BYTES = 32
DEFAULT_SESSION_TTL = timedelta(days=30)


class PasswordMismatchError(ValueError):
    """The password does not match the stored hash."""


class SessionError(Exception):
    """A session token cannot be accepted."""


class SessionNotFoundError(SessionError, LookupError):
    """No session has this token."""

    def __init__(self) -> None:
        super().__init__("auth: session not found")


class SessionRevokedError(SessionError):
    """The session has been revoked."""

    def __init__(self) -> None:
        super().__init__("auth: session revoked")


class SessionExpiredError(SessionError):
    """The session has expired."""

    def __init__(self) -> None:
        super().__init__("auth: session expired")


def hash_password(plain: str) -> str:
    """Return the bcrypt hash of *plain* for accounts.password_hash."""
    data = plain.encode("utf-8")
    if len(data) > _BCRYPT_MAX_BYTES:
        raise ValueError("bcrypt: password length exceeds 72 bytes")
    return bcrypt.hashpw(data, bcrypt.gensalt(rounds=BCRYPT_COST)).decode("ascii")


def verify_password(hashed: str, plain: str) -> None:
    """Return silently if *plain* matches *hashed*.

    Raises PasswordMismatchError on a mismatch and ValueError if the hash
    is malformed.
    """
    data = plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        matches = bcrypt.checkpw(data, hashed.encode("utf-8"))
    except ValueError as err:
        raise ValueError(f"bcrypt: malformed hash: {err}") from err
    if not matches:
        raise PasswordMismatchError("bcrypt: hashedPassword is not the hash of the given password")


def hash_token(raw: str) -> str:
    """One-way hash used both to store and to look up session tokens."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_session_token() -> Tuple[str, str]:
    """Return ``(raw_token, token_hash)``; only the hash is ever stored."""
    raw = secrets.token_urlsafe(TOKEN_RAND_BYTES)
    return raw, hash_token(raw)


def create_session_for_account(
    q: SessionQueries, account_id: uuid.UUID, ttl: Optional[timedelta] = None
) -> Tuple[str, Session]:
    """Store a fresh session for an account and return its raw token and row.

    A missing or non-positive *ttl* means DEFAULT_SESSION_TTL.
    """
    if ttl is None or ttl <= timedelta(0):
        ttl = DEFAULT_SESSION_TTL
    raw, token_hash = generate_session_token()
    session = q.create_session(
        new_entity_id(),
        account_id,
        token_hash,
        datetime.now(timezone.utc) + ttl,
    )
    return raw, session


def validate_session_token(q: SessionQueries, raw_token: str) -> Session:
    """Return the session for *raw_token* if it is neither revoked nor expired."""
    try:
        session = q.get_session_by_token_hash(hash_token(raw_token))
    except NoRowsError:
        raise SessionNotFoundError() from None
    if session.revoked_at is not None:
        raise SessionRevokedError()
    if session.expires_at is None or session.expires_at <= datetime.now(timezone.utc):
        raise SessionExpiredError()
    return session