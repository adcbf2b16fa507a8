# walkingdrum

The data layer of a seasonal multiplayer world: typed queries for
accounts, sessions, seasons, entities, entity positions, components and
moderation actions; a small game model on top of them; and the password
and session-token primitives that tie sessions to accounts.

## Layout

- `walkingdrum.envfile` reads `KEY=VALUE` files into the process
  environment.
- `walkingdrum.sql.core` holds the row types (`Account`, `AccountFlag`,
  `Session`, `Season`, `SeasonParticipation`, `Entity`, `EntityPosition`,
  `Component`, `ModerationAction`), the `DBTX` protocol, `QueriesBase`
  and `NoRowsError`.
- `walkingdrum.sql` has one query class per table group:
  `AccountQueries`, `SessionQueries`, `SeasonQueries`,
  `ComponentQueries`, `EntityQueries`, `PositionQueries` and
  `ModerationQueries`. `walkingdrum.sql.queries.Queries` combines them
  all over one database handle.
- `walkingdrum.game.model` holds `EntityType`, `Entity`, `Position`, the
  `Component` protocol, `is_valid_entity_type` and `new_entity_id`
  (a time-ordered version 7 UUID).
- `walkingdrum.game.components` holds the `Hidden` marker component and
  the JSON encoding of components.
- `walkingdrum.game.entities` holds the transactional `create_entity`
  helper; `walkingdrum.game.sweep` the soft-delete sweep.
- `walkingdrum.auth` holds password hashing and session-token handling.

## Talking to the database

Every query class is built on an object satisfying the `DBTX` protocol:

- `execute(sql, *args)` runs a statement and returns the number of rows
  affected;
- `query(sql, *args)` returns every row;
- `query_row(sql, *args)` returns the first row, or `None`.

The SQL uses PostgreSQL's `$1`, `$2`, … positional placeholders. Values
returned by the driver are normalised into `uuid.UUID`, timezone-aware
`datetime` (naive values are taken as UTC), `bytes` and `ipaddress`
objects.

```python
from walkingdrum.sql.queries import Queries

q = Queries(connection)            # connection: your DBTX adapter
account = q.get_account_by_email("someone@example.com")
in_tx = q.with_tx(transaction)     # same query class, bound to a transaction
```

A query that expects exactly one row and finds none raises `NoRowsError`
(a `LookupError`). Some notable behaviours:

- `get_account_by_email` and `get_account_by_id` ignore soft-deleted
  accounts; `soft_delete_account` is a no-op on an already deleted one.
- `list_active_sessions_for_account` returns unrevoked, unexpired
  sessions, newest first; `revoke_session` raises `NoRowsError` on a
  session that is already revoked.
- `soft_delete_entity` raises `NoRowsError` if the entity is absent or
  already destroyed; `get_entity_by_id` still finds soft-deleted
  entities; `list_entities_by_type_in_season` skips them.
- `set_entity_position` and `set_component` are upserts. On conflict
  `set_component` keeps the original `created_at_tick` and replaces the
  state and `updated_at_tick`.
- `list_entities_with_component` returns only components on live
  entities.
- `find_active_bans_and_suspensions` returns bans and suspensions that
  have not expired and have not been overturned by a later `unban`,
  newest first.

## Loading a `.env` file

```python
from walkingdrum.envfile import EnvFileError, load, parse

try:
    load(".env")
except FileNotFoundError:
    pass  # no file is fine; the environment may already be set
```

Blank lines and lines starting with `#` are skipped. Every other line
must contain `=` and a non-empty key; otherwise `EnvFileError` (a
`ValueError`) is raised naming the line number. Keys and values are
stripped of surrounding whitespace, and a later occurrence of a key
replaces an earlier one. Variables already present in the environment
are never overwritten. `parse` takes any iterable of lines, such as an
open text file, and returns the pairs as a `dict` without touching the
environment.

## Passwords and sessions

```python
from walkingdrum.auth import (
    PasswordMismatchError,
    create_session_for_account,
    generate_session_token,
    hash_password,
    hash_token,
    validate_session_token,
    verify_password,
)

hashed = hash_password("password")
verify_password(hashed, "password")      # returns quietly on a match
# verify_password(hashed, "secret")      # raises PasswordMismatchError
```

`hash_password` uses bcrypt at cost 10 and raises `ValueError` for a
password longer than 72 bytes. `verify_password` raises
`PasswordMismatchError` on a mismatch and `ValueError` on a malformed
hash.

`generate_session_token()` returns a pair: the raw token, which is handed
to the client once and never stored, and its SHA-256 hex digest, which is
what the `sessions` table keeps. `hash_token` computes the same digest
from a raw token.

`create_session_for_account(q, account_id, ttl=None)` stores a new
session and returns the raw token together with the stored `Session`; a
missing or non-positive `ttl` (a `timedelta`) falls back to thirty days.
`validate_session_token(q, raw_token)` returns the session row, or raises
`SessionNotFoundError`, `SessionRevokedError` or `SessionExpiredError`,
all subclasses of `SessionError`.

## Entities and components

```python
from walkingdrum.game.components import Hidden
from walkingdrum.game.entities import CreateEntityInput, PositionSpec, create_entity
from walkingdrum.game.model import EntityType

entity_id = create_entity(
    pool,
    CreateEntityInput(
        season_id=1,
        entity_type=EntityType.CHARACTER,
        tick=100,
        position=PositionSpec(region_id=3, x=10, y=20),
        initial_components=[Hidden()],
    ),
)
```

`create_entity(tb, entity_input)` takes anything with a `begin()` method
returning a transaction that offers the `DBTX` methods plus `commit()`
and `rollback()` (the `TxBeginner` protocol). It inserts the entity row,
the optional position (stamped with the entity's tick) and every initial
component in that transaction, and returns the new entity id. An
unknown entity type or a `None` component raises `ValueError`; any
failure rolls the whole creation back.

Components are dataclasses with a `component_type` name.
`encode_component` turns one into compact JSON bytes and
`decode_component(raw, cls)` builds an instance of `cls`, ignoring keys
it has no field for. `Hidden` encodes to `{}`. Problems raise
`ComponentError`.

## Sweeping destroyed entities

`sweep_destroyed_entities(q, current_tick, cfg=None)` hard-deletes
entities whose destroyed tick lies before `current_tick` minus
`cfg.retention_ticks`, and returns how many rows went. `SweepConfig` is
disabled by default; while disabled the sweep deletes nothing and
returns 0. A negative retention window raises `ValueError`.

## What this package does not do

- It ships no database driver and no connection pool: you supply the
  `DBTX` and `TxBeginner` objects around the PostgreSQL library of your
  choice.
- It does not create or migrate the database schema; the tables, the
  check constraints and the cascading deletes the queries rely on must
  already exist.
- It has no command-line program and no HTTP layer; it is a library for
  a server that brings its own.

## Tests

The test suite uses pytest and is installed with the `test` extra.