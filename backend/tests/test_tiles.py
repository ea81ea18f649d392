"""Endpoint tests for the vector tile API.

This module includes tests for:
    - GET and POST tile endpoints under /api/tiles,
    - Mapping of validation failures to 400 responses,
    - 204 responses for empty tiles and verbatim MVT bytes otherwise,
    - 500 responses when PostGIS fails,
    - Passing query parameters and the id body through to the SQL.

The tile store is always replaced through FastAPI dependency overrides, so
no database is needed.

See Also:
    - backend/tile_api/api/tiles.py for the endpoints,
    - backend/tile_api/db/database.py for the tile store protocol.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import testclient

from tile_api import main
from tile_api.api import tiles as api_tiles
from tile_api.db import database, models
from tile_api.services import exceptions

TILE_BYTES = b"\x1a\x2b\x78\x02\x0a\x0eodhactivitypoi"


class FailingStore:
    """Tile store that simulates a PostGIS failure."""

    def fetch_tile(self, query: models.TileQuery) -> bytes | None:
        raise exceptions.StoreExecutionError("statement timeout")


@pytest.fixture
def store() -> database.InMemoryTileStore:
    return database.InMemoryTileStore({"smgpois": TILE_BYTES})


@pytest.fixture
def client(
    store: database.InMemoryTileStore,
) -> Iterator[testclient.TestClient]:
    app = main.create_app()
    app.dependency_overrides[api_tiles._get_store] = lambda: store
    try:
        yield testclient.TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_get_tile_returns_mvt(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
) -> None:
    """Test that a tile is returned verbatim with the MVT media type."""
    response = client.get("/api/tiles/odhactivitypoi/14/2621/6333.pbf")

    assert response.status_code == 200
    assert response.content == TILE_BYTES
    assert response.headers["content-type"] == "application/x-protobuf"
    assert response.headers["cache-control"] == "public, max-age=60"

    (query,) = store.queries
    assert "FROM smgpois" in query.sql
    assert "ST_Transform(geo, 3857)" in query.sql


def test_get_empty_tile_returns_no_content(
    client: testclient.TestClient,
) -> None:
    """Test that an empty tile maps to 204."""
    response = client.get("/api/tiles/event/3/4/2.pbf")
    assert response.status_code == 204
    assert response.content == b""


@pytest.mark.parametrize(
    ("path", "detail"),
    [
        ("/api/tiles/odhactivitypoi/1/2/0.pbf", "Invalid tile coordinates"),
        ("/api/tiles/odhactivitypoi/0/0/-1.pbf", "Invalid tile coordinates"),
        ("/api/tiles/odhactivitypoi/23/0/0.pbf", "Invalid zoom level"),
        ("/api/tiles/smgpois/0/0/0.pbf", "Unknown type 'smgpois'"),
        (
            "/api/tiles/odhactivitypoi/0/0/0.pbf?geocolumn=other",
            "Invalid geocolumn 'other'",
        ),
        (
            "/api/tiles/odhactivitypoi/0/0/0.pbf?fieldselector=Secret",
            "Invalid fieldselector 'Secret'",
        ),
    ],
)
def test_invalid_requests_rejected(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
    path: str,
    detail: str,
) -> None:
    """Test that validation failures are 400s and never reach the store."""
    response = client.get(path)
    assert response.status_code == 400
    assert response.json() == {"detail": detail}
    assert store.queries == []


def test_zoom_22_accepted(client: testclient.TestClient) -> None:
    """Test the highest supported zoom level."""
    response = client.get("/api/tiles/odhactivitypoi/22/0/0.pbf")
    assert response.status_code == 200


def test_non_integer_coordinates_rejected(
    client: testclient.TestClient,
) -> None:
    """Test that FastAPI rejects non-numeric path segments."""
    response = client.get("/api/tiles/odhactivitypoi/a/0/0.pbf")
    assert response.status_code == 422


def test_query_parameters_passed_through(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
) -> None:
    """Test that source, fieldselector and geocolumn shape the query."""
    response = client.get(
        "/api/tiles/odhactivitypoi/14/2621/6333.pbf",
        params={
            "source": "lts",
            "fieldselector": "Shortname,Detail.de.Title",
            "geocolumn": "gen_position",
        },
    )
    assert response.status_code == 200

    (query,) = store.queries
    assert "ST_Transform(gen_position, 3857)" in query.sql
    assert "AND gen_source = %(source)s" in query.sql
    assert "data#>>'{Detail,de,Title}' AS \"Detail.de.Title\"" in query.sql
    assert query.params["source"] == "lts"
    assert query.params["layer_name"] == "odhactivitypoi"


def test_post_tile_filters_ids(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
) -> None:
    """Test that the POST body becomes the bound id list."""
    response = client.post(
        "/api/tiles/odhactivitypoi/14/2621/6333.pbf",
        json=["SMG2", "SMG1"],
    )
    assert response.status_code == 200
    assert response.content == TILE_BYTES

    (query,) = store.queries
    assert "AND id = ANY(%(ids)s)" in query.sql
    assert query.params["ids"] == ["SMG2", "SMG1"]


def test_post_tile_empty_id_list_kept_as_filter(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
) -> None:
    """Test that an empty POST body still filters by id."""
    response = client.post(
        "/api/tiles/odhactivitypoi/14/2621/6333.pbf",
        json=[],
    )
    assert response.status_code == 200

    (query,) = store.queries
    assert "AND id = ANY(%(ids)s)" in query.sql
    assert query.params["ids"] == []



def test_post_tile_validates_first(
    client: testclient.TestClient,
    store: database.InMemoryTileStore,
) -> None:
    """Test that the POST endpoint applies the same validation."""
    response = client.post(
        "/api/tiles/unknown/0/0/0.pbf",
        json=["a"],
    )
    assert response.status_code == 400
    assert store.queries == []


def test_post_tile_requires_id_list(client: testclient.TestClient) -> None:
    """Test that the body must be a list of strings."""
    response = client.post(
        "/api/tiles/odhactivitypoi/0/0/0.pbf",
        json={"ids": "a"},
    )
    assert response.status_code == 422


def test_store_failure_returns_server_error() -> None:
    """Test that PostGIS failures surface as a generic 500."""
    app = main.create_app()
    app.dependency_overrides[api_tiles._get_store] = FailingStore
    client = testclient.TestClient(app)
    try:
        response = client.get("/api/tiles/odhactivitypoi/14/2621/6333.pbf")
        assert response.status_code == 500
        assert response.json() == {"detail": "Error generating vector tile"}
    finally:
        app.dependency_overrides.clear()


def test_list_types(client: testclient.TestClient) -> None:
    """Test the entity type listing endpoint."""
    response = client.get("/api/tiles/types")
    assert response.status_code == 200
    types = response.json()
    assert "odhactivitypoi" in types
    assert types == sorted(types)
