"""Queries against the entity_positions table."""

from __future__ import annotations

import uuid

from walkingdrum.sql.core import EntityPosition, QueriesBase

_POSITION_COLUMNS = "entity_id, region_id, x, y, updated_at_tick"

_DELETE_ENTITY_POSITION = """-- name: DeleteEntityPosition :exec
DELETE FROM entity_positions
WHERE entity_id = $1
"""

_GET_ENTITIES_AT_POSITION = f"""-- name: GetEntitiesAtPosition :many
SELECT {_POSITION_COLUMNS} FROM entity_positions
WHERE region_id = $1
  AND x = $2
  AND y = $3
"""

_GET_ENTITIES_IN_REGION = f"""-- name: GetEntitiesInRegion :many
SELECT {_POSITION_COLUMNS} FROM entity_positions
WHERE region_id = $1
"""

_GET_ENTITY_POSITION = f"""-- name: GetEntityPosition :one
SELECT {_POSITION_COLUMNS} FROM entity_positions
WHERE entity_id = $1
"""

_SET_ENTITY_POSITION = f"""-- name: SetEntityPosition :one
INSERT INTO entity_positions (
  entity_id, region_id, x, y, updated_at_tick
) VALUES (
  $1, $2, $3, $4, $5
)
ON CONFLICT (entity_id) DO UPDATE
SET region_id = EXCLUDED.region_id,
    x = EXCLUDED.x,
    y = EXCLUDED.y,
    updated_at_tick = EXCLUDED.updated_at_tick
RETURNING {_POSITION_COLUMNS}
"""


class PositionQueries(QueriesBase):
    """Where entities are in the world."""

    def delete_entity_position(self, entity_id: uuid.UUID) -> None:
        """Take an entity out of the world; a no-op if it has no position."""
        self._exec(_DELETE_ENTITY_POSITION, entity_id)

    def get_entities_at_position(self, region_id: int, x: int, y: int) -> list[EntityPosition]:
        """Every positioned entity on one tile of a region."""
        return self._many(EntityPosition.from_row, _GET_ENTITIES_AT_POSITION, region_id, x, y)

    def get_entities_in_region(self, region_id: int) -> list[EntityPosition]:
        """Every positioned entity in a region."""
        return self._many(EntityPosition.from_row, _GET_ENTITIES_IN_REGION, region_id)

    def get_entity_position(self, entity_id: uuid.UUID) -> EntityPosition:
        """Return an entity's position; raises NoRowsError if it has none."""
        return self._one(EntityPosition.from_row, _GET_ENTITY_POSITION, entity_id)

    def set_entity_position(
        self, entity_id: uuid.UUID, region_id: int, x: int, y: int, updated_at_tick: int
    ) -> EntityPosition:
        """Place or move an entity and return its stored position."""
        return self._one(
            EntityPosition.from_row,
            _SET_ENTITY_POSITION,
            entity_id,
            region_id,
            x,
            y,
            updated_at_tick,
        )