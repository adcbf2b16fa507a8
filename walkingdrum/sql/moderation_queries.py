"""Queries against the append-only moderation_actions table."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from walkingdrum.sql.core import ModerationAction, QueriesBase

_COLUMNS = (
    "id",
    "account_id",
    "action_type",
    "reason",
    "details",
    "applied_by",
    "applied_at",
    "expires_at",
)
_SELECT_LIST = ", ".join(_COLUMNS)
_INSERT_COLUMNS = tuple(column for column in _COLUMNS if column != "applied_at")
_INSERT_LIST = ", ".join(_INSERT_COLUMNS)
_PLACEHOLDERS = ", ".join(f"${n}" for n in range(1, len(_INSERT_COLUMNS) + 1))

_APPEND_MODERATION_ACTION = (
    f"INSERT INTO moderation_actions ({_INSERT_LIST}) VALUES ({_PLACEHOLDERS}) "
    f"RETURNING {_SELECT_LIST}"
)

_FIND_ACTIVE_BANS_AND_SUSPENSIONS = (
    "SELECT " + ", ".join(f"act.{column}" for column in _COLUMNS) + " "
    "FROM moderation_actions AS act "
    "WHERE act.account_id = $1 "
    "AND act.action_type IN ('ban', 'suspend') "
    "AND (act.expires_at IS NULL OR act.expires_at > now()) "
    "AND NOT EXISTS ("
    "SELECT 1 FROM moderation_actions AS lift "
    "WHERE lift.account_id = act.account_id "
    "AND lift.action_type = 'unban' "
    "AND lift.applied_at > act.applied_at"
    ") "
    "ORDER BY act.applied_at DESC"
)

_LIST_MODERATION_ACTIONS_FOR_ACCOUNT = (
    f"SELECT {_SELECT_LIST} FROM moderation_actions "
    "WHERE account_id = $1 ORDER BY applied_at DESC"
)


class ModerationQueries(QueriesBase):
    """Recording and reading moderation actions."""

    def append_moderation_action(
        self,
        action_id: uuid.UUID,
        account_id: uuid.UUID,
        action_type: str,
        reason: str,
        details: bytes,
        applied_by: Optional[uuid.UUID] = None,
        expires_at: Optional[datetime] = None,
    ) -> ModerationAction:
        """Append an action; reversing one means appending an 'unban'."""
        return self._one(
            ModerationAction.from_row,
            _APPEND_MODERATION_ACTION,
            action_id,
            account_id,
            action_type,
            reason,
            details,
            applied_by,
            expires_at,
        )

    def find_active_bans_and_suspensions(self, account_id: uuid.UUID) -> list[ModerationAction]:
        """Bans and suspensions still in force, newest first.

        An action is in force if it has not expired and no later 'unban'
        overturned it.
        """
        return self._many(
            ModerationAction.from_row, _FIND_ACTIVE_BANS_AND_SUSPENSIONS, account_id
        )

    def list_moderation_actions_for_account(
        self, account_id: uuid.UUID
    ) -> list[ModerationAction]:
        """Every action recorded against an account, newest first."""
        return self._many(
            ModerationAction.from_row, _LIST_MODERATION_ACTIONS_FOR_ACCOUNT, account_id
        )