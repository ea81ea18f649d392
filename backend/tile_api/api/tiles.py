"""XYZ vector tile endpoints for Open Data Hub entity types.

Tiles are produced by PostGIS (``ST_AsMVT``) from the table mapped to the
requested entity type and returned unchanged as Mapbox Vector Tiles
(``application/x-protobuf``). All tiles use EPSG:3857 (Web Mercator).

Optional query parameters:
    source: Only include rows whose ``gen_source`` equals this value.
    fieldselector: Comma separated dotted paths into the ``data`` jsonb
        column to include as feature attributes (allow-listed).
    geocolumn: Geometry column to render (``geo``, ``gen_position`` or
        ``geometry``; defaults to ``geo``).

Example:
    Request a tile of POIs:
        >>> response = client.get("/api/tiles/odhactivitypoi/14/8719/5845.pbf")
        >>> # 200 with MVT bytes, or 204 when the tile is empty

    Request a tile restricted to some ids:
        >>> response = client.post(
        ...     "/api/tiles/odhactivitypoi/14/8719/5845.pbf",
        ...     json=["SMGPOI1", "SMGPOI2"],
        ... )

    Use in MapLibre GL JS (the MVT layer name is the entity type):
        >>> map.addSource('pois', {
        ...     type: 'vector',
        ...     tiles: ['http://api/api/tiles/odhactivitypoi/{z}/{x}/{y}.pbf']
        ... });
"""

from __future__ import annotations

import logging

import fastapi
from fastapi import concurrency, responses

from tile_api.core import config
from tile_api.db import database
from tile_api.services import exceptions, registry, tiles, validation

logger = logging.getLogger(__name__)

MVT_MEDIA_TYPE = "application/x-protobuf"

router = fastapi.APIRouter(prefix="/api/tiles", tags=["tiles"])


def _get_store(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> database.TileStoreProtocol:
    """Resolve the tile store dependency.

    Args:
        settings: Application settings (injected via FastAPI Depends).

    Returns:
        TileStoreProtocol implementation (PostgresTileStore in production).
    """
    return database.get_tile_store(settings)


async def _serve_tile(
    entity_type: str,
    z: int,
    x: int,
    y: int,
    source: str | None,
    fieldselector: str | None,
    geocolumn: str | None,
    ids: list[str] | None,
    store: database.TileStoreProtocol,
    settings: config.Settings,
) -> responses.Response:
    """Validate, fetch and wrap one tile into an HTTP response."""
    try:
        request = validation.build_query_request(
            entity_type,
            z,
            x,
            y,
            source=source,
            field_selector=fieldselector,
            geometry_column=geocolumn,
            ids=ids,
        )
    except exceptions.TileRequestError as exc:
        logger.debug(
            "Rejected tile %s/%s/%s/%s: %s", entity_type, z, x, y, exc
        )
        raise fastapi.HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        tile = await concurrency.run_in_threadpool(
            tiles.get_vector_tile,
            request,
            store,
        )
    except exceptions.StoreExecutionError as exc:
        raise fastapi.HTTPException(
            status_code=500,
            detail="Error generating vector tile",
        ) from exc

    if not tile:
        return responses.Response(status_code=204)

    return responses.Response(
        content=tile,
        media_type=MVT_MEDIA_TYPE,
        headers={"Cache-Control": settings.tile_cache_control},
    )


@router.get("/types")
async def list_types() -> list[str]:
    """List the entity types that can be requested as tiles."""
    return registry.entity_types()


@router.get(
    "/{entity_type}/{z}/{x}/{y}.pbf",
    response_class=responses.Response,
    responses={
        200: {"content": {MVT_MEDIA_TYPE: {}}},
        204: {"description": "No feature intersects the tile"},
        400: {"description": "Invalid tile request"},
    },
)
async def get_vector_tile(
    entity_type: str,
    z: int,
    x: int,
    y: int,
    source: str | None = None,
    fieldselector: str | None = None,
    geocolumn: str | None = None,
    store: database.TileStoreProtocol = fastapi.Depends(_get_store),  # noqa: B008
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> responses.Response:
    """Return a Mapbox Vector Tile for an entity type.

    Args:
        entity_type: Open Data Hub type, e.g. ``odhactivitypoi``.
        z: Zoom level (0-22).
        x: Tile X coordinate.
        y: Tile Y coordinate.
        source: Optional ``gen_source`` filter.
        fieldselector: Optional comma separated jsonb paths.
        geocolumn: Optional geometry column.
        store: Tile store (injected via FastAPI Depends).
        settings: Application settings (injected via FastAPI Depends).

    Returns:
        MVT bytes with ``application/x-protobuf``, or 204 for an empty tile.

    Raises:
        HTTPException: 400 for invalid input, 500 if PostGIS fails.
    """
    return await _serve_tile(
        entity_type,
        z,
        x,
        y,
        source=source,
        fieldselector=fieldselector,
        geocolumn=geocolumn,
        ids=None,
        store=store,
        settings=settings,
    )


@router.post(
    "/{entity_type}/{z}/{x}/{y}.pbf",
    response_class=responses.Response,
    responses={
        200: {"content": {MVT_MEDIA_TYPE: {}}},
        204: {"description": "No feature intersects the tile"},
        400: {"description": "Invalid tile request"},
    },
)
async def get_vector_tile_by_ids(
    entity_type: str,
    z: int,
    x: int,
    y: int,
    ids: list[str] = fastapi.Body(...),  # noqa: B008
    source: str | None = None,
    fieldselector: str | None = None,
    geocolumn: str | None = None,
    store: database.TileStoreProtocol = fastapi.Depends(_get_store),  # noqa: B008
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> responses.Response:
    """Return a Mapbox Vector Tile restricted to the ids in the body.

    The JSON body is an ordered list of id strings. Query parameters are
    the same as for the GET endpoint.
    """
    return await _serve_tile(
        entity_type,
        z,
        x,
        y,
        source=source,
        fieldselector=fieldselector,
        geocolumn=geocolumn,
        ids=ids,
        store=store,
        settings=settings,
    )
