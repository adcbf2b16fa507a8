"""Queries against the components table."""

from __future__ import annotations

import uuid

from walkingdrum.sql.core import Component, QueriesBase

_COLUMNS = ("entity_id", "component_type", "state", "created_at_tick", "updated_at_tick")
_SELECT_LIST = ", ".join(_COLUMNS)
_ALIASED_SELECT_LIST = ", ".join(f"c.{column}" for column in _COLUMNS)
_PLACEHOLDERS = ", ".join(f"${n}" for n in range(1, len(_COLUMNS) + 1))

_DELETE_COMPONENT = (
    "DELETE FROM components "
    "WHERE component_type = $2 AND entity_id = $1"
)

_GET_COMPONENT = (
    f"SELECT {_SELECT_LIST} FROM components "
    "WHERE component_type = $2 AND entity_id = $1"
)

# Joined to entities so that soft-deleted entities are left out.
_LIST_ENTITIES_WITH_COMPONENT = (
    f"SELECT {_ALIASED_SELECT_LIST} "
    "FROM components AS c INNER JOIN entities AS e ON c.entity_id = e.id "
    "WHERE e.destroyed_at_tick IS NULL AND c.component_type = $1"
)

# created_at_tick is deliberately absent from the update list.
_SET_COMPONENT = (
    f"INSERT INTO components ({_SELECT_LIST}) VALUES ({_PLACEHOLDERS}) "
    "ON CONFLICT (entity_id, component_type) DO UPDATE "
    "SET updated_at_tick = EXCLUDED.updated_at_tick, state = EXCLUDED.state "
    f"RETURNING {_SELECT_LIST}"
)


class ComponentQueries(QueriesBase):
    """Reading and writing per-entity component state."""

    def delete_component(self, entity_id: uuid.UUID, component_type: str) -> None:
        """Remove one component from an entity; a no-op if it is absent."""
        self._exec(_DELETE_COMPONENT, entity_id, component_type)

    def get_component(self, entity_id: uuid.UUID, component_type: str) -> Component:
        """Return one component row; raises NoRowsError if absent."""
        return self._one(Component.from_row, _GET_COMPONENT, entity_id, component_type)

    def list_entities_with_component(self, component_type: str) -> list[Component]:
        """Component rows of one type belonging to live entities."""
        return self._many(Component.from_row, _LIST_ENTITIES_WITH_COMPONENT, component_type)

    def set_component(
        self,
        entity_id: uuid.UUID,
        component_type: str,
        state: bytes,
        created_at_tick: int,
        updated_at_tick: int,
    ) -> Component:
        """Upsert a component.

        On conflict the original ``created_at_tick`` is kept while the
        state and ``updated_at_tick`` are replaced.
        """
        return self._one(
            Component.from_row,
            _SET_COMPONENT,
            entity_id,
            component_type,
            state,
            created_at_tick,
            updated_at_tick,
        )