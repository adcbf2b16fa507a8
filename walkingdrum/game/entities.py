"""Transactional creation of entities with their position and components."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Union

from walkingdrum.game.components import encode_component
from walkingdrum.game.model import Component, EntityType, is_valid_entity_type, new_entity_id
from walkingdrum.sql.core import DBTX
from walkingdrum.sql.queries import Queries


class Transaction(DBTX, Protocol):
    """A database transaction that can be committed or rolled back."""

    def commit(self) -> None:
        """Make the transaction's changes permanent."""

    def rollback(self) -> None:
        """Discard the transaction's changes; harmless after commit."""


class TxBeginner(Protocol):
    """Anything that can open a transaction: a pool, or an open transaction."""

    def begin(self) -> Transaction:
        """Open a transaction (or a savepoint inside one)."""


@dataclass(frozen=True)
class PositionSpec:
    """Where a new entity is placed; its tick is the entity's."""

    region_id: int
    x: int
    y: int


@dataclass(frozen=True)
class CreateEntityInput:
    """Everything needed to create one entity."""

    season_id: int
    entity_type: Union[EntityType, str]
    tick: int
    position: Optional[PositionSpec] = None
    initial_components: Sequence[Optional[Component]] = field(default_factory=tuple)


def create_entity(tb: TxBeginner, entity_input: CreateEntityInput) -> uuid.UUID:
    """Insert an entity, its optional position and components atomically.

    Returns the new entity's id. Any failure rolls the whole creation back.
    """
    if not is_valid_entity_type(entity_input.entity_type):
        raise ValueError(f"create entity: invalid type {entity_input.entity_type!r}")
    type_value = EntityType(entity_input.entity_type).value
    entity_id = new_entity_id()
    tick = entity_input.tick

    tx = tb.begin()
    try:
        q = Queries(tx)
        q.create_entity(entity_id, entity_input.season_id, type_value, tick)

        position = entity_input.position
        if position is not None:
            q.set_entity_position(entity_id, position.region_id, position.x, position.y, tick)

        for component in entity_input.initial_components:
            if component is None:
                raise ValueError("create entity: nil component in initial_components")
            raw = encode_component(component)
            q.set_component(entity_id, component.component_type, raw, tick, tick)

        tx.commit()
    except BaseException:
        tx.rollback()
        raise
    return entity_id