"""Queries against the sessions table."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from walkingdrum.sql.core import IPAddress, QueriesBase, Session

_SESSION_COLUMNS = (
    "id, account_id, token_hash, ip_address, user_agent, created_at, "
    "last_seen_at, expires_at, revoked_at, revoke_reason"
)

_CREATE_SESSION = f"""-- name: CreateSession :one
INSERT INTO sessions (
  id, account_id, token_hash, ip_address, user_agent, expires_at
) VALUES (
  $1, $2, $3, $4, $5, $6
)
RETURNING {_SESSION_COLUMNS}
"""

_GET_SESSION_BY_TOKEN_HASH = f"""-- name: GetSessionByTokenHash :one
SELECT {_SESSION_COLUMNS} FROM sessions
WHERE token_hash = $1
"""

_LIST_ACTIVE_SESSIONS_FOR_ACCOUNT = f"""-- name: ListActiveSessionsForAccount :many
SELECT {_SESSION_COLUMNS} FROM sessions
WHERE account_id = $1
  AND revoked_at IS NULL
  AND expires_at > NOW()
ORDER BY created_at DESC
"""

_REVOKE_SESSION = f"""-- name: RevokeSession :one
UPDATE sessions
SET revoked_at = NOW(), revoke_reason = $2
WHERE id = $1 AND revoked_at IS NULL
RETURNING {_SESSION_COLUMNS}
"""


class SessionQueries(QueriesBase):
    """Session creation, lookup and revocation."""

    def create_session(
        self,
        session_id: uuid.UUID,
        account_id: uuid.UUID,
        token_hash: str,
        expires_at: datetime,
        ip_address: Optional[IPAddress] = None,
        user_agent: Optional[str] = None,
    ) -> Session:
        """Insert a session row and return it."""
        ip_text = None if ip_address is None else str(ip_address)
        return self._one(
            Session.from_row,
            _CREATE_SESSION,
            session_id,
            account_id,
            token_hash,
            ip_text,
            user_agent,
            expires_at,
        )

    def get_session_by_token_hash(self, token_hash: str) -> Session:
        """Find a session by token hash, whatever its state.

        Expiry and revocation are left for the caller to judge.
        """
        return self._one(Session.from_row, _GET_SESSION_BY_TOKEN_HASH, token_hash)

    def list_active_sessions_for_account(self, account_id: uuid.UUID) -> list[Session]:
        """Unrevoked, unexpired sessions of an account, newest first."""
        return self._many(Session.from_row, _LIST_ACTIVE_SESSIONS_FOR_ACCOUNT, account_id)

    def revoke_session(
        self, session_id: uuid.UUID, revoke_reason: Optional[str] = None
    ) -> Session:
        """Revoke a live session; raises NoRowsError if already revoked."""
        return self._one(Session.from_row, _REVOKE_SESSION, session_id, revoke_reason)