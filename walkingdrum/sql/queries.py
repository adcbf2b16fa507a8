"""All query families bound to a single database handle."""

from __future__ import annotations

from walkingdrum.sql.account_queries import AccountQueries
from walkingdrum.sql.component_queries import ComponentQueries
from walkingdrum.sql.entity_queries import EntityQueries
from walkingdrum.sql.moderation_queries import ModerationQueries
from walkingdrum.sql.position_queries import PositionQueries
from walkingdrum.sql.season_queries import SeasonQueries
from walkingdrum.sql.session_queries import SessionQueries


class Queries(
    AccountQueries,
    SessionQueries,
    SeasonQueries,
    ComponentQueries,
    EntityQueries,
    PositionQueries,
    ModerationQueries,
):
    """Every typed query, run against one connection or transaction."""