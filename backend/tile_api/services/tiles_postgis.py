"""PostGIS MVT (Mapbox Vector Tiles) SQL query builder.

This module assembles the ``ST_AsMVT`` query for one tile. PostGIS does the
heavy lifting (reprojection, clipping, simplification and protobuf
encoding); the builder only decides which table, columns and filters take
part.

Inputs are kept in two separate categories:

- ``QueryIdentifiers``: table name, geometry column and jsonb field paths.
  These are written into the SQL text, so they may only come from a
  validated ``QueryRequest`` whose values are members of the static
  allow-lists in ``tile_api.services.registry``.
- Query values: the tile envelope, MVT layer name, ``source`` filter and id
  list. These are always bound as psycopg2 named parameters (``%(name)s``)
  and never formatted into the text.

Example:
    Build the query for a validated request:
        >>> from tile_api.services import tiles_postgis, validation
        >>> request = validation.build_query_request(
        ...     "odhactivitypoi", 14, 2621, 6333
        ... )
        >>> query = tiles_postgis.build_tile_query(request)
        >>> "FROM smgpois" in query.sql
        True
        >>> sorted(query.params)
        ['layer_name', 'xmax', 'xmin', 'ymax', 'ymin']
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from tile_api.db import models

if TYPE_CHECKING:
    from tile_api.services import tile_math

MVT_EXTENT = 4096
MVT_BUFFER = 256
TILE_SRID = 3857

DEFAULT_PROJECTION = "data#>>'{Shortname}' AS data"


@dataclasses.dataclass(frozen=True)
class QueryIdentifiers:
    """Allow-listed names that are interpolated into the SQL text."""

    table: str
    geometry_column: str
    field_paths: tuple[str, ...] = ()

    @classmethod
    def from_request(cls, request: models.QueryRequest) -> QueryIdentifiers:
        return cls(
            table=request.table,
            geometry_column=request.geometry_column,
            field_paths=request.field_paths,
        )


def _json_path_projection(path: str) -> str:
    """Project a dotted path out of the ``data`` jsonb column.

    ``Detail.de.Title`` becomes ``data#>>'{Detail,de,Title}' AS
    "Detail.de.Title"``.
    """
    segments = ",".join(path.split("."))
    return f"data#>>'{{{segments}}}' AS \"{path}\""


def _projection(field_paths: tuple[str, ...]) -> str:
    if not field_paths:
        return DEFAULT_PROJECTION

    return ",\n        ".join(_json_path_projection(p) for p in field_paths)


def build_mvt_sql(
    identifiers: QueryIdentifiers,
    *,
    with_source: bool = False,
    with_ids: bool = False,
) -> str:
    """Return the ``ST_AsMVT`` query text for one table.

    The query expects the named parameters ``xmin``, ``ymin``, ``xmax``,
    ``ymax`` and ``layer_name``, plus ``source`` when ``with_source`` and
    ``ids`` when ``with_ids``.

    Rows are filtered with ``ST_Intersects`` after transforming the tile
    envelope into the SRID of the stored geometry, so the spatial index on
    the geometry column stays usable. Only rows whose clipped geometry is
    not NULL end up in the tile.

    Note: ``identifiers`` must come from a validated request. Its values
    are inserted into the SQL string verbatim.

    Args:
        identifiers: Allow-listed table, geometry column and field paths.
        with_source: Add the ``gen_source`` equality predicate.
        with_ids: Add the ``id = ANY(...)`` predicate.

    Returns:
        SQL query string ready for psycopg2 with named parameters.
    """
    geo = identifiers.geometry_column
    envelope = (
        f"ST_MakeEnvelope(%(xmin)s, %(ymin)s, %(xmax)s, %(ymax)s, {TILE_SRID})"
    )

    filters = ""
    if with_source:
        filters += "\n      AND gen_source = %(source)s"
    if with_ids:
        filters += "\n      AND id = ANY(%(ids)s)"

    return f"""
WITH mvtgeom AS (
    SELECT
        id,
        {_projection(identifiers.field_paths)},
        ST_AsMVTGeom(
            ST_Transform({geo}, {TILE_SRID}),
            {envelope},
            {MVT_EXTENT},
            {MVT_BUFFER},
            true
        ) AS geom
    FROM {identifiers.table}
    WHERE ST_Intersects(
        {geo},
        ST_Transform({envelope}, ST_SRID({geo}))
    ){filters}
)
SELECT ST_AsMVT(mvtgeom.*, %(layer_name)s, {MVT_EXTENT}, 'geom')
FROM mvtgeom
WHERE geom IS NOT NULL;
""".strip()


def build_query_values(
    request: models.QueryRequest,
    bounds: tile_math.BoundingBox,
) -> dict[str, Any]:
    """Collect the bound parameter values for a request.

    Args:
        request: Validated tile request.
        bounds: Envelope of ``request.tile`` in EPSG:3857.

    Returns:
        Mapping of placeholder name to value.
    """
    params: dict[str, Any] = {
        "xmin": bounds.xmin,
        "ymin": bounds.ymin,
        "xmax": bounds.xmax,
        "ymax": bounds.ymax,
        "layer_name": request.entity_type,
    }
    if request.source is not None:
        params["source"] = request.source
    if request.ids is not None:
        # psycopg2 adapts a list to an ARRAY literal.
        params["ids"] = list(request.ids)
    return params


def build_tile_query(
    request: models.QueryRequest,
    bounds: tile_math.BoundingBox | None = None,
) -> models.TileQuery:
    """Build the complete tile query for a validated request.

    Args:
        request: Validated tile request.
        bounds: Precomputed tile envelope. Derived from ``request.tile``
            when omitted.

    Returns:
        TileQuery with SQL text and named parameters.
    """
    if bounds is None:
        bounds = request.tile.bounds()

    sql = build_mvt_sql(
        QueryIdentifiers.from_request(request),
        with_source=request.source is not None,
        with_ids=request.ids is not None,
    )
    return models.TileQuery(sql=sql, params=build_query_values(request, bounds))
