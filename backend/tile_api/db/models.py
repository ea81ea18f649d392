"""Data models for tile requests and tile queries.

``QueryRequest`` is the validated form of an incoming tile request. It is
only built by ``tile_api.services.validation.build_query_request`` so the
identifier fields it carries (table, geometry column, field paths) are
always members of the static allow-lists.

``TileQuery`` is what the query builder hands to a tile store: SQL text plus
the named parameters psycopg2 binds into it.

Example:
    Build a validated request:
        >>> from tile_api.services.validation import build_query_request
        >>> request = build_query_request("odhactivitypoi", 14, 2621, 6333)
        >>> request.table
        'smgpois'
        >>> request.geometry_column
        'geo'
"""

from __future__ import annotations

import dataclasses
from typing import Any

from tile_api.services import tile_math


@dataclasses.dataclass(frozen=True)
class QueryRequest:
    """A tile request that passed validation.

    Attributes:
        entity_type: Logical Open Data Hub type name, also used as the MVT
            layer name.
        table: PostGIS table resolved from ``entity_type``.
        tile: Requested tile address.
        geometry_column: Allow-listed geometry column to render.
        field_paths: Allow-listed dotted jsonb paths to project, empty for
            the default projection.
        source: Optional ``gen_source`` value to filter on.
        ids: Optional ordered list of ids to restrict the tile to.
    """

    entity_type: str
    table: str
    tile: tile_math.TileAddress
    geometry_column: str
    field_paths: tuple[str, ...] = ()
    source: str | None = None
    ids: tuple[str, ...] | None = None


@dataclasses.dataclass(frozen=True)
class TileQuery:
    """SQL text and bound parameters for one tile."""

    sql: str
    params: dict[str, Any]
