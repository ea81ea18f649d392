"""Tile store abstractions and request models.

``tile_api.db.database`` holds the tile store protocol with its PostGIS and
in-memory implementations; ``tile_api.db.models`` holds the validated
request and query dataclasses passed between services and stores.

Example:
    Use in a FastAPI dependency:
        >>> from tile_api.db import database
        >>> store = database.get_tile_store(settings)
"""
