"""Tests for the FastAPI main application factory and health checks.

This module validates that:
    - The FastAPI app is correctly instantiated via main.create_app,
    - OpenAPI metadata (title, version) matches the project contract,
    - The tile routes and health route are registered,
    - The /health endpoint returns the expected response,
    - CORS headers are sent to browser clients.

See Also:
    - backend/tile_api/main.py for the application factory.
"""

from __future__ import annotations

import datetime
from typing import cast

from fastapi import testclient

from tile_api import main


def test_create_app() -> None:
    """Test that create_app returns a configured FastAPI instance."""
    app = main.create_app()
    assert app is not None
    assert app.title == "Open Data Hub Vector Tile API"
    assert app.version == "0.1.0"


def test_health_endpoint() -> None:
    """Test the health check endpoint returns healthy status."""
    app = main.create_app()
    client = testclient.TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    timestamp = datetime.datetime.fromisoformat(body["timestamp"])
    assert timestamp.tzinfo is not None


def test_app_includes_routers() -> None:
    """Test that the tile routes are included in the app."""
    app = main.create_app()
    routes: list[str] = [
        cast(str, getattr(route, "path", ""))
        for route in app.routes  # type: ignore[attr-defined]
        if hasattr(route, "path")
    ]
    assert "/health" in routes
    assert "/api/tiles/{entity_type}/{z}/{x}/{y}.pbf" in routes
    assert "/api/tiles/types" in routes


def test_cors_allows_any_origin() -> None:
    """Test that tile responses carry CORS headers by default."""
    app = main.create_app()
    client = testclient.TestClient(app)
    response = client.get(
        "/health",
        headers={"Origin": "https://maps.example.org"},
    )
    assert response.headers["access-control-allow-origin"] == "*"
