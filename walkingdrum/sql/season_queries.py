"""Queries against the seasons table."""

from __future__ import annotations

from walkingdrum.sql.core import QueriesBase, Season

_SEASON_COLUMNS = (
    "id, name, status, world_seed, modifiers, starts_at, ends_at, wiped_at, created_at"
)

_GET_ACTIVE_SEASON = f"""-- name: GetActiveSeason :one
SELECT {_SEASON_COLUMNS} FROM seasons
WHERE status = 'active'
"""

_GET_SEASON_BY_ID = f"""-- name: GetSeasonByID :one
SELECT {_SEASON_COLUMNS} FROM seasons
WHERE id = $1
"""

_UPDATE_SEASON_STATUS = f"""-- name: UpdateSeasonStatus :one
UPDATE seasons
SET status = $2
WHERE id = $1
RETURNING {_SEASON_COLUMNS}
"""


class SeasonQueries(QueriesBase):
    """Season lookup and status transitions."""

    def get_active_season(self) -> Season:
        """Return the active season; raises NoRowsError if there is none."""
        return self._one(Season.from_row, _GET_ACTIVE_SEASON)

    def get_season_by_id(self, season_id: int) -> Season:
        """Return one season by id; raises NoRowsError if absent."""
        return self._one(Season.from_row, _GET_SEASON_BY_ID, season_id)

    def update_season_status(self, season_id: int, status: str) -> Season:
        """Set a season's status; transition validity is the caller's job."""
        return self._one(Season.from_row, _UPDATE_SEASON_STATUS, season_id, status)