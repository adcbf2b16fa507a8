"""Hard-deletion of entities that have been soft-deleted long enough."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class SweepConfig:
    """Sweep settings; disabled by default.

    An entity becomes eligible once its destroyed_at_tick is older than
    ``current_tick - retention_ticks``.
    """

    enabled: bool = False
    retention_ticks: int = 0


class Querier(Protocol):
    """The one query the sweep needs."""

    def sweep_destroyed_entities(self, destroyed_at_tick: Optional[int]) -> int:
        """Delete entities destroyed before the tick; return the count."""


def sweep_destroyed_entities(
    q: Querier, current_tick: int, cfg: Optional[SweepConfig] = None
) -> int:
    """Hard-delete entities past the retention window; return rows deleted.

    Does nothing and returns 0 when the sweep is disabled.
    """
    cfg = cfg if cfg is not None else SweepConfig()
    if not cfg.enabled:
        return 0
    if cfg.retention_ticks < 0:
        raise ValueError(f"sweep: negative retention ({cfg.retention_ticks})")
    cutoff = current_tick - cfg.retention_ticks
    return q.sweep_destroyed_entities(cutoff)