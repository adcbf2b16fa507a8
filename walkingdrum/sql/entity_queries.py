"""Queries against the entities table."""

from __future__ import annotations

import uuid
from typing import Optional

from walkingdrum.sql.core import Entity, QueriesBase

_ENTITY_COLUMNS = "id, season_id, entity_type, created_at_tick, destroyed_at_tick"

_CREATE_ENTITY = f"""-- name: CreateEntity :one
INSERT INTO entities (
  id, season_id, entity_type, created_at_tick
) VALUES (
  $1, $2, $3, $4
)
RETURNING {_ENTITY_COLUMNS}
"""

_GET_ENTITY_BY_ID = f"""-- name: GetEntityByID :one
SELECT {_ENTITY_COLUMNS} FROM entities
WHERE id = $1
"""

_LIST_ENTITIES_BY_TYPE_IN_SEASON = f"""-- name: ListEntitiesByTypeInSeason :many
SELECT {_ENTITY_COLUMNS} FROM entities
WHERE season_id = $1
  AND entity_type = $2
  AND destroyed_at_tick IS NULL
"""

_SOFT_DELETE_ENTITY = f"""-- name: SoftDeleteEntity :one
UPDATE entities
SET destroyed_at_tick = $2
WHERE id = $1 AND destroyed_at_tick IS NULL
RETURNING {_ENTITY_COLUMNS}
"""

_SWEEP_DESTROYED_ENTITIES = """-- name: SweepDestroyedEntities :execrows
DELETE FROM entities
WHERE destroyed_at_tick IS NOT NULL
  AND destroyed_at_tick < $1
"""


class EntityQueries(QueriesBase):
    """Entity rows: creation, lookup, soft and hard deletion."""

    def create_entity(
        self, entity_id: uuid.UUID, season_id: int, entity_type: str, created_at_tick: int
    ) -> Entity:
        """Insert just the entities row and return it."""
        return self._one(
            Entity.from_row, _CREATE_ENTITY, entity_id, season_id, entity_type, created_at_tick
        )

    def get_entity_by_id(self, entity_id: uuid.UUID) -> Entity:
        """Return an entity, soft-deleted or not; raises NoRowsError if absent."""
        return self._one(Entity.from_row, _GET_ENTITY_BY_ID, entity_id)

    def list_entities_by_type_in_season(self, season_id: int, entity_type: str) -> list[Entity]:
        """Live entities of one type in one season."""
        return self._many(
            Entity.from_row, _LIST_ENTITIES_BY_TYPE_IN_SEASON, season_id, entity_type
        )

    def soft_delete_entity(
        self, entity_id: uuid.UUID, destroyed_at_tick: Optional[int]
    ) -> Entity:
        """Mark a live entity destroyed.

        Raises NoRowsError if the entity is absent or already destroyed.
        """
        return self._one(Entity.from_row, _SOFT_DELETE_ENTITY, entity_id, destroyed_at_tick)

    def sweep_destroyed_entities(self, destroyed_at_tick: Optional[int]) -> int:
        """Hard-delete entities destroyed before the given tick; return the count."""
        return self._exec(_SWEEP_DESTROYED_ENTITIES, destroyed_at_tick)