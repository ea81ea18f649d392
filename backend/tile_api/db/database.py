"""Tile stores that execute MVT queries against PostGIS."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

import psycopg2
import psycopg2.extensions

from tile_api.services import exceptions

if TYPE_CHECKING:
    from tile_api.core import config
    from tile_api.db import models

logger = logging.getLogger(__name__)


class TileStoreProtocol(Protocol):
    """Protocol interface for running a tile query.

    Implementations return the encoded tile, or ``None`` when no feature
    intersects the tile. Failures surface as ``StoreExecutionError``.
    """

    def fetch_tile(self, query: models.TileQuery) -> bytes | None: ...


class InMemoryTileStore(TileStoreProtocol):
    """Canned tiles for tests and local development.

    Tiles are looked up by table name, so any address of a table returns
    the same bytes. Every executed query is kept in ``queries``.
    """

    def __init__(self, tiles: dict[str, bytes] | None = None) -> None:
        """Initialize the store.

        Args:
            tiles: Mapping of table name to tile bytes.
        """
        self._tiles: dict[str, bytes] = dict(tiles or {})
        self.queries: list[models.TileQuery] = []

    def add(self, table: str, tile: bytes) -> None:
        self._tiles[table] = tile

    def fetch_tile(self, query: models.TileQuery) -> bytes | None:
        self.queries.append(query)
        return self._tiles.get(_table_from_sql(query))


def _table_from_sql(query: models.TileQuery) -> str:
    """Return the relation named in the first ``FROM`` clause."""
    for line in query.sql.splitlines():
        stripped = line.strip()
        if stripped.startswith("FROM "):
            return stripped.removeprefix("FROM ").split()[0]
    return ""


class PostgresTileStore(TileStoreProtocol):
    """PostgreSQL/PostGIS-backed tile store.

    Opens one connection per tile request. Connection timeout and the
    server side ``statement_timeout`` come from settings; pooling and
    retries are left to the deployment.
    """

    def __init__(self, settings: config.Settings) -> None:
        """Initialize the store with database settings.

        Args:
            settings: Application settings containing the connection URL
                and timeouts.
        """
        self.settings = settings

    def _connection(self) -> psycopg2.extensions.connection:
        return get_connection(self.settings)

    def fetch_tile(self, query: models.TileQuery) -> bytes | None:
        """Execute ``query`` and return its single scalar result.

        Args:
            query: SQL text and named parameters from the query builder.

        Returns:
            Tile bytes, or ``None`` if PostGIS returned NULL.

        Raises:
            StoreExecutionError: Connection, parameter adaptation, syntax or
                server side failure.
        """
        try:
            with (
                contextlib.closing(self._connection()) as conn,
                conn,
                conn.cursor() as cur,
            ):
                cur.execute(query.sql, query.params)
                row = cur.fetchone()
        except (psycopg2.Error, ValueError) as exc:
            # psycopg2 raises ValueError while adapting strings with NUL bytes.
            raise exceptions.StoreExecutionError(str(exc).strip()) from exc

        if row is None or row[0] is None:
            return None

        return bytes(row[0])


def get_tile_store(settings: config.Settings) -> TileStoreProtocol:
    """Factory function to create a tile store.

    Args:
        settings: Application settings for database connection.

    Returns:
        PostgresTileStore instance for production use.
    """
    return PostgresTileStore(settings)


def get_connection(
    settings: config.Settings,
) -> psycopg2.extensions.connection:
    """Create a synchronous psycopg2 connection with timeouts applied.

    Args:
        settings: Application settings containing database connection URL.

    Returns:
        psycopg2 extensions connection object for direct database access.
    """
    logger.debug("Opening PostGIS connection")
    return psycopg2.connect(
        settings.database_url,
        connect_timeout=settings.connect_timeout_seconds,
        options=f"-c statement_timeout={settings.statement_timeout_ms}",
    )
