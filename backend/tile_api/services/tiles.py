"""Vector tile retrieval.

Glues the pieces together for one validated request: compute the tile
envelope, build the MVT query, run it on a tile store and normalize the
result. The tile bytes are passed through untouched.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from tile_api.services import exceptions, tiles_postgis

if TYPE_CHECKING:
    from tile_api.db import database
    from tile_api.db import models

logger = logging.getLogger(__name__)


def get_vector_tile(
    request: models.QueryRequest,
    store: database.TileStoreProtocol,
) -> bytes:
    """Fetch the encoded tile for a validated request.

    Args:
        request: Request produced by ``validation.build_query_request``.
        store: Tile store that executes the query.

    Returns:
        Encoded MVT bytes. An empty bytes object means no feature
        intersects the tile.

    Raises:
        StoreExecutionError: The store failed to execute the query.
    """
    bounds = request.tile.bounds()
    query = tiles_postgis.build_tile_query(request, bounds)

    started = time.perf_counter()
    try:
        tile = store.fetch_tile(query)
    except exceptions.StoreExecutionError:
        logger.exception(
            "Error generating vector tile for table %s at z:%s x:%s y:%s",
            request.table,
            request.tile.zoom,
            request.tile.x,
            request.tile.y,
        )
        raise

    logger.debug(
        "Tile %s/%s built in %.1f ms (%d bytes)",
        request.entity_type,
        request.tile,
        (time.perf_counter() - started) * 1000,
        len(tile or b""),
    )
    return tile or b""
