import uuid
from datetime import datetime, timedelta, timezone

import pytest

from walkingdrum.sql.moderation_queries import ModerationQueries

ALLOWED_ACTIONS = {"warn", "mute", "suspend", "ban", "unban"}


class CheckViolation(Exception):
    pass


def _name(sql):
    return sql.splitlines()[0].split()[2]


class FakeDB:
    """In-memory stand-in for moderation_actions with a ticking clock."""

    def __init__(self):
        self.rows = []
        self.clock = datetime.now(timezone.utc) - timedelta(minutes=30)

    def execute(self, sql, *args):
        raise AssertionError(sql)

    def query_row(self, sql, *args):
        if _name(sql) == "AppendModerationAction":
            action_id, account_id, action_type, reason, details, applied_by, expires_at = args
            if action_type not in ALLOWED_ACTIONS:
                raise CheckViolation(action_type)
            self.clock += timedelta(seconds=1)
            row = (action_id, account_id, action_type, reason, details,
                   applied_by, self.clock, expires_at)
            self.rows.append(row)
            return row
        raise AssertionError(sql)

    def query(self, sql, *args):
        name = _name(sql)
        account = args[0]
        mine = [r for r in self.rows if r[1] == account]
        newest_first = sorted(mine, key=lambda r: r[6], reverse=True)
        if name == "ListModerationActionsForAccount":
            return newest_first
        if name == "FindActiveBansAndSuspensions":
            now = datetime.now(timezone.utc)
            return [
                r for r in newest_first
                if r[2] in ("ban", "suspend")
                and (r[7] is None or r[7] > now)
                and not any(u[2] == "unban" and u[6] > r[6] for u in mine)
            ]
        raise AssertionError(sql)


@pytest.fixture
def q():
    return ModerationQueries(FakeDB())


def _append(q, account_id, action_type, reason, expires=None):
    return q.append_moderation_action(
        uuid.uuid4(), account_id, action_type, reason, b"{}", None, expires
    )


def test_moderation_append_and_list(q):
    account_id = uuid.uuid4()
    _append(q, account_id, "warn", "language")
    _append(q, account_id, "mute", "spamming chat")

    rows = q.list_moderation_actions_for_account(account_id)
    assert len(rows) == 2
    assert [r.action_type for r in rows] == ["mute", "warn"]
    assert rows[0].details == b"{}"
    assert rows[0].applied_by is None


def test_moderation_action_type_check(q):
    with pytest.raises(CheckViolation):
        q.append_moderation_action(uuid.uuid4(), uuid.uuid4(), "yeet", "n/a", b"{}")


def test_find_active_bans_and_suspensions(q):
    account_id = uuid.uuid4()

    _append(q, account_id, "ban", "cheating")
    active = q.find_active_bans_and_suspensions(account_id)
    assert [a.action_type for a in active] == ["ban"]

    _append(q, account_id, "unban", "appeal granted")
    assert q.find_active_bans_and_suspensions(account_id) == []

    past = datetime.now(timezone.utc) - timedelta(hours=1)
    _append(q, account_id, "suspend", "tilt", past)
    assert q.find_active_bans_and_suspensions(account_id) == []

    future = datetime.now(timezone.utc) + timedelta(hours=1)
    _append(q, account_id, "suspend", "still tilt", future)
    active = q.find_active_bans_and_suspensions(account_id)
    assert [a.action_type for a in active] == ["suspend"]
    assert active[0].expires_at == future

    _append(q, account_id, "warn", "language")
    _append(q, account_id, "mute", "spam")
    assert len(q.find_active_bans_and_suspensions(account_id)) == 1


def test_actions_are_per_account(q):
    first, second = uuid.uuid4(), uuid.uuid4()
    _append(q, first, "ban", "cheating")
    assert q.list_moderation_actions_for_account(second) == []
    assert q.find_active_bans_and_suspensions(second) == []