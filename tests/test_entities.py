import copy
import re

import pytest

from walkingdrum.game.components import COMPONENT_HIDDEN, Hidden, decode_component
from walkingdrum.game.entities import CreateEntityInput, PositionSpec, create_entity
from walkingdrum.game.model import EntityType
from walkingdrum.sql.core import NoRowsError
from walkingdrum.sql.queries import Queries


def _query_name(sql):
    return re.search(r"-- name: (\w+)", sql).group(1)


class FakeDB:
    """In-memory stand-in for the entity tables with savepoint semantics."""

    def __init__(self, state=None, parent=None):
        self.state = state if state is not None else {
            "entities": {}, "positions": {}, "components": {},
        }
        self.parent = parent
        self.transactions = []
        self.committed = False
        self.rolled_back = False

    def begin(self):
        tx = FakeDB(copy.deepcopy(self.state), self)
        self.transactions.append(tx)
        return tx

    def commit(self):
        self.parent.state = self.state
        self.committed = True

    def rollback(self):
        if not self.committed:
            self.rolled_back = True

    def query_row(self, sql, *args):
        name = _query_name(sql)
        ents = self.state["entities"]
        positions = self.state["positions"]
        comps = self.state["components"]
        if name == "CreateEntity":
            eid, season, etype, tick = args
            ents[eid] = (eid, season, etype, tick, None)
            return ents[eid]
        if name == "GetEntityByID":
            return ents.get(args[0])
        if name == "SoftDeleteEntity":
            eid, tick = args
            row = ents.get(eid)
            if row is None or row[4] is not None:
                return None
            ents[eid] = row[:4] + (tick,)
            return ents[eid]
        if name == "SetEntityPosition":
            positions[args[0]] = tuple(args)
            return positions[args[0]]
        if name == "GetEntityPosition":
            return positions.get(args[0])
        if name == "SetComponent":
            eid, ctype, state, created, updated = args
            old = comps.get((eid, ctype))
            if old is not None:
                created = old[3]
            comps[(eid, ctype)] = (eid, ctype, state, created, updated)
            return comps[(eid, ctype)]
        if name == "GetComponent":
            return comps.get(tuple(args))
        raise AssertionError(f"unexpected query {name}")

    def query(self, sql, *args):
        name = _query_name(sql)
        if name == "ListEntitiesByTypeInSeason":
            season, etype = args
            return [
                row for row in self.state["entities"].values()
                if row[1] == season and row[2] == etype and row[4] is None
            ]
        raise AssertionError(f"unexpected query {name}")

    def execute(self, sql, *args):
        name = _query_name(sql)
        if name == "DeleteEntityPosition":
            return 1 if self.state["positions"].pop(args[0], None) else 0
        raise AssertionError(f"unexpected query {name}")


def test_create_entity_bare_minimum():
    db = FakeDB()
    entity_id = create_entity(
        db, CreateEntityInput(season_id=1, entity_type=EntityType.WORLD_OBJECT, tick=42)
    )
    q = Queries(db)
    entity = q.get_entity_by_id(entity_id)
    assert entity.entity_type == "world_object"
    assert entity.created_at_tick == 42
    assert entity.destroyed_at_tick is None
    with pytest.raises(NoRowsError):
        q.get_entity_position(entity_id)
    assert db.transactions[0].committed is True


def test_create_entity_accepts_plain_string_type():
    db = FakeDB()
    entity_id = create_entity(db, CreateEntityInput(season_id=1, entity_type="npc", tick=1))
    assert Queries(db).get_entity_by_id(entity_id).entity_type == "npc"


def test_create_entity_with_position_and_components():
    db = FakeDB()
    entity_id = create_entity(
        db,
        CreateEntityInput(
            season_id=1,
            entity_type=EntityType.CHARACTER,
            tick=100,
            position=PositionSpec(region_id=3, x=10, y=20),
            initial_components=[Hidden()],
        ),
    )
    q = Queries(db)
    pos = q.get_entity_position(entity_id)
    assert (pos.region_id, pos.x, pos.y) == (3, 10, 20)
    assert pos.updated_at_tick == 100

    comp = q.get_component(entity_id, COMPONENT_HIDDEN)
    assert decode_component(comp.state, Hidden) == Hidden()
    assert comp.created_at_tick == 100


def test_create_entity_rejects_bad_type():
    db = FakeDB()
    with pytest.raises(ValueError, match="dragon"):
        create_entity(db, CreateEntityInput(season_id=1, entity_type="dragon", tick=1))
    assert db.transactions == []


def test_create_entity_atomic_on_component_failure():
    db = FakeDB()
    with pytest.raises(ValueError, match="nil component"):
        create_entity(
            db,
            CreateEntityInput(
                season_id=1,
                entity_type=EntityType.CHARACTER,
                tick=1,
                position=PositionSpec(region_id=1, x=0, y=0),
                initial_components=[Hidden(), None],
            ),
        )
    assert db.transactions[0].rolled_back is True
    assert Queries(db).list_entities_by_type_in_season(1, "character") == []
    assert db.state["positions"] == {}


def test_phase2_done_when():
    db = FakeDB()
    q = Queries(db)

    entity_id = create_entity(
        db,
        CreateEntityInput(
            season_id=1,
            entity_type=EntityType.WORLD_OBJECT,
            tick=100,
            position=PositionSpec(region_id=4, x=11, y=22),
            initial_components=[Hidden()],
        ),
    )

    assert q.get_entity_by_id(entity_id).id == entity_id
    pos = q.get_entity_position(entity_id)
    assert (pos.region_id, pos.x, pos.y) == (4, 11, 22)
    assert q.get_component(entity_id, COMPONENT_HIDDEN).component_type == "hidden"

    updated = q.set_component(entity_id, COMPONENT_HIDDEN, b'{"reason":"gm"}', 999, 200)
    assert updated.created_at_tick == 100
    assert updated.updated_at_tick == 200

    destroyed = 300
    q.soft_delete_entity(entity_id, destroyed)
    q.delete_entity_position(entity_id)

    entity = q.get_entity_by_id(entity_id)
    assert entity.destroyed_at_tick == destroyed
    with pytest.raises(NoRowsError):
        q.get_entity_position(entity_id)