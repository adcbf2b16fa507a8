"""Queries against the accounts table."""

from __future__ import annotations

import uuid

from walkingdrum.sql.core import Account, QueriesBase

_ACCOUNT_COLUMNS = (
    "id, email, email_verified, display_name, password_hash, totp_secret, "
    "totp_enabled, status, created_at, last_login_at, deleted_at"
)

_CREATE_ACCOUNT = f"""-- name: CreateAccount :one
INSERT INTO accounts (
  id, email, display_name, password_hash
) VALUES (
  $1, $2, $3, $4
)
RETURNING {_ACCOUNT_COLUMNS}
"""

_GET_ACCOUNT_BY_EMAIL = f"""-- name: GetAccountByEmail :one
SELECT {_ACCOUNT_COLUMNS} FROM accounts
WHERE email = $1 AND deleted_at IS NULL
"""

_GET_ACCOUNT_BY_ID = f"""-- name: GetAccountByID :one
SELECT {_ACCOUNT_COLUMNS} FROM accounts
WHERE id = $1 AND deleted_at IS NULL
"""

_SOFT_DELETE_ACCOUNT = """-- name: SoftDeleteAccount :exec
UPDATE accounts
SET status = 'deleted', deleted_at = NOW()
WHERE id = $1 AND deleted_at IS NULL
"""

_UPDATE_ACCOUNT_STATUS = f"""-- name: UpdateAccountStatus :one
UPDATE accounts
SET status = $2
WHERE id = $1
RETURNING {_ACCOUNT_COLUMNS}
"""


class AccountQueries(QueriesBase):
    """Account creation, lookup and status changes."""

    def create_account(
        self, account_id: uuid.UUID, email: str, display_name: str, password_hash: str
    ) -> Account:
        """Insert an account and return the stored row."""
        return self._one(
            Account.from_row, _CREATE_ACCOUNT, account_id, email, display_name, password_hash
        )

    def get_account_by_email(self, email: str) -> Account:
        """Find a live account by e-mail; raises NoRowsError if none."""
        return self._one(Account.from_row, _GET_ACCOUNT_BY_EMAIL, email)

    def get_account_by_id(self, account_id: uuid.UUID) -> Account:
        """Find a live account by id; raises NoRowsError if none."""
        return self._one(Account.from_row, _GET_ACCOUNT_BY_ID, account_id)

    def soft_delete_account(self, account_id: uuid.UUID) -> None:
        """Mark an account deleted; a no-op if it already is."""
        self._exec(_SOFT_DELETE_ACCOUNT, account_id)

    def update_account_status(self, account_id: uuid.UUID, status: str) -> Account:
        """Set an account's status and return the updated row."""
        return self._one(Account.from_row, _UPDATE_ACCOUNT_STATUS, account_id, status)