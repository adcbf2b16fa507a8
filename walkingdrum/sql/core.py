"""Row models and the shared plumbing behind the typed queries.

Queries talk to a :class:`DBTX`: any object offering ``execute``,
``query`` and ``query_row`` for SQL with ``$1``-style positional
placeholders. Values coming back from the driver are normalised into
standard Python types (``uuid.UUID``, aware ``datetime``, ``bytes``).
"""

from __future__ import annotations

import ipaddress
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence, TypeVar, Union

Row = Sequence[Any]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
M = TypeVar("M")


class DBTX(Protocol):
    """A connection or transaction that can run parameterised SQL."""

    def execute(self, sql: str, *args: Any) -> int:
        """Run a statement and return the number of rows affected."""

    def query(self, sql: str, *args: Any) -> Iterable[Row]:
        """Run a query and return every row."""

    def query_row(self, sql: str, *args: Any) -> Optional[Row]:
        """Run a query and return its first row, or None."""


class NoRowsError(LookupError):
    """A single-row query matched nothing."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class QueriesBase:
    """Holds the database handle shared by every query family."""

    def __init__(self, db: DBTX) -> None:
        self.db = db

    def with_tx(self, tx: DBTX) -> "QueriesBase":
        """Return the same kind of query object bound to *tx*."""
        return type(self)(tx)

    def _one(self, model: Callable[[Row], M], sql: str, *args: Any) -> M:
        row = self.db.query_row(sql, *args)
        if row is None:
            raise NoRowsError()
        return model(row)

    def _many(self, model: Callable[[Row], M], sql: str, *args: Any) -> list[M]:
        return [model(row) for row in self.db.query(sql, *args)]

    def _exec(self, sql: str, *args: Any) -> int:
        return self.db.execute(sql, *args)


def _to_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return uuid.UUID(bytes=bytes(value))
    return uuid.UUID(str(value))


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _to_bytes(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _to_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _to_ip(value: Any) -> Optional[IPAddress]:
    if value is None or isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    return ipaddress.ip_interface(str(value)).ip


@dataclass(frozen=True)
class Account:
    id: uuid.UUID
    email: str
    email_verified: bool
    display_name: str
    password_hash: str
    totp_secret: Optional[str]
    totp_enabled: bool
    status: str
    created_at: Optional[datetime]
    last_login_at: Optional[datetime]
    deleted_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Row) -> "Account":
        (id_, email, verified, name, pw_hash, totp_secret, totp_enabled,
         status, created_at, last_login_at, deleted_at) = row
        return cls(
            id=_to_uuid(id_),
            email=email,
            email_verified=bool(verified),
            display_name=name,
            password_hash=pw_hash,
            totp_secret=totp_secret,
            totp_enabled=bool(totp_enabled),
            status=status,
            created_at=_to_datetime(created_at),
            last_login_at=_to_datetime(last_login_at),
            deleted_at=_to_datetime(deleted_at),
        )


@dataclass(frozen=True)
class AccountFlag:
    account_id: uuid.UUID
    flag_type: str
    flag_value: Optional[bytes]
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Row) -> "AccountFlag":
        account_id, flag_type, flag_value, created_at = row
        return cls(
            account_id=_to_uuid(account_id),
            flag_type=flag_type,
            flag_value=_to_bytes(flag_value),
            created_at=_to_datetime(created_at),
        )


@dataclass(frozen=True)
class Component:
    entity_id: uuid.UUID
    component_type: str
    state: bytes
    created_at_tick: int
    updated_at_tick: int

    @classmethod
    def from_row(cls, row: Row) -> "Component":
        entity_id, component_type, state, created, updated = row
        return cls(
            entity_id=_to_uuid(entity_id),
            component_type=component_type,
            state=_to_bytes(state),
            created_at_tick=int(created),
            updated_at_tick=int(updated),
        )


@dataclass(frozen=True)
class Entity:
    id: uuid.UUID
    season_id: int
    entity_type: str
    created_at_tick: int
    destroyed_at_tick: Optional[int]

    @classmethod
    def from_row(cls, row: Row) -> "Entity":
        id_, season_id, entity_type, created, destroyed = row
        return cls(
            id=_to_uuid(id_),
            season_id=int(season_id),
            entity_type=entity_type,
            created_at_tick=int(created),
            destroyed_at_tick=_to_int(destroyed),
        )


@dataclass(frozen=True)
class EntityPosition:
    entity_id: uuid.UUID
    region_id: int
    x: int
    y: int
    updated_at_tick: int

    @classmethod
    def from_row(cls, row: Row) -> "EntityPosition":
        entity_id, region_id, x, y, updated = row
        return cls(
            entity_id=_to_uuid(entity_id),
            region_id=int(region_id),
            x=int(x),
            y=int(y),
            updated_at_tick=int(updated),
        )


@dataclass(frozen=True)
class ModerationAction:
    id: uuid.UUID
    account_id: uuid.UUID
    action_type: str
    reason: str
    details: Optional[bytes]
    applied_by: Optional[uuid.UUID]
    applied_at: Optional[datetime]
    expires_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Row) -> "ModerationAction":
        (id_, account_id, action_type, reason, details,
         applied_by, applied_at, expires_at) = row
        return cls(
            id=_to_uuid(id_),
            account_id=_to_uuid(account_id),
            action_type=action_type,
            reason=reason,
            details=_to_bytes(details),
            applied_by=_to_uuid(applied_by),
            applied_at=_to_datetime(applied_at),
            expires_at=_to_datetime(expires_at),
        )


@dataclass(frozen=True)
class Season:
    id: int
    name: Optional[str]
    status: str
    world_seed: int
    modifiers: Optional[bytes]
    starts_at: Optional[datetime]
    ends_at: Optional[datetime]
    wiped_at: Optional[datetime]
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Row) -> "Season":
        (id_, name, status, world_seed, modifiers,
         starts_at, ends_at, wiped_at, created_at) = row
        return cls(
            id=int(id_),
            name=name,
            status=status,
            world_seed=int(world_seed),
            modifiers=_to_bytes(modifiers),
            starts_at=_to_datetime(starts_at),
            ends_at=_to_datetime(ends_at),
            wiped_at=_to_datetime(wiped_at),
            created_at=_to_datetime(created_at),
        )


@dataclass(frozen=True)
class SeasonParticipation:
    account_id: uuid.UUID
    season_id: int
    characters_made: int
    deaths: int
    deepest_region: Optional[int]
    final_summary: Optional[bytes]

    @classmethod
    def from_row(cls, row: Row) -> "SeasonParticipation":
        account_id, season_id, made, deaths, deepest, summary = row
        return cls(
            account_id=_to_uuid(account_id),
            season_id=int(season_id),
            characters_made=int(made),
            deaths=int(deaths),
            deepest_region=_to_int(deepest),
            final_summary=_to_bytes(summary),
        )


@dataclass(frozen=True)
class Session:
    id: uuid.UUID
    account_id: uuid.UUID
    token_hash: str
    ip_address: Optional[IPAddress]
    user_agent: Optional[str]
    created_at: Optional[datetime]
    last_seen_at: Optional[datetime]
    expires_at: Optional[datetime]
    revoked_at: Optional[datetime]
    revoke_reason: Optional[str]

    @classmethod
    def from_row(cls, row: Row) -> "Session":
        (id_, account_id, token_hash, ip_address, user_agent, created_at,
         last_seen_at, expires_at, revoked_at, revoke_reason) = row
        return cls(
            id=_to_uuid(id_),
            account_id=_to_uuid(account_id),
            token_hash=token_hash,
            ip_address=_to_ip(ip_address),
            user_agent=user_agent,
            created_at=_to_datetime(created_at),
            last_seen_at=_to_datetime(last_seen_at),
            expires_at=_to_datetime(expires_at),
            revoked_at=_to_datetime(revoked_at),
            revoke_reason=revoke_reason,
        )