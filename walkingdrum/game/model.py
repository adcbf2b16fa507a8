"""In-process model types for the world: entities, positions, components."""

from __future__ import annotations

import secrets
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class EntityType(str, Enum):
    """The six kinds of entity the entities table accepts."""

    CHARACTER = "character"
    NPC = "npc"
    ITEM = "item"
    CORPSE = "corpse"
    PROJECTILE = "projectile"
    WORLD_OBJECT = "world_object"


_ENTITY_TYPE_VALUES = frozenset(member.value for member in EntityType)


def is_valid_entity_type(value: Any) -> bool:
    """Report whether *value* names one of the allowed entity types."""
    if isinstance(value, EntityType):
        return True
    return isinstance(value, str) and value in _ENTITY_TYPE_VALUES


@dataclass(frozen=True)
class Entity:
    """One entity; ``destroyed_at_tick`` is 0 while the entity is live."""

    id: uuid.UUID
    season_id: int
    type: EntityType
    created_at_tick: int
    destroyed_at_tick: int = 0
    is_destroyed: bool = False


@dataclass(frozen=True)
class Position:
    """Where a positioned entity stands in the world."""

    entity_id: uuid.UUID
    region_id: int
    x: int
    y: int
    updated_at_tick: int


@runtime_checkable
class Component(Protocol):
    """A typed component: its ``component_type`` names the stored row."""

    @property
    def component_type(self) -> str:
        """The value stored in components.component_type."""


_TIMESTAMP_MASK = (1 << 48) - 1
_RAND_B_BITS = 62


def new_entity_id() -> uuid.UUID:
    """Return a fresh time-ordered version 7 UUID."""
    millis = time.time_ns() // 1_000_000
    bits = secrets.randbits(12 + _RAND_B_BITS)
    rand_a = bits >> _RAND_B_BITS
    rand_b = bits & ((1 << _RAND_B_BITS) - 1)
    value = (
        (millis & _TIMESTAMP_MASK) << 80
        | 0x7 << 76
        | rand_a << 64
        | 0b10 << _RAND_B_BITS
        | rand_b
    )
    return uuid.UUID(int=value)