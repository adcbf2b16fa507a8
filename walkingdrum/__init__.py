"""Data layer for a seasonal multiplayer world: queries, game model and auth."""

__version__ = "0.1.0"