"""Exceptions raised while serving vector tiles.

Two families exist:

- ``TileRequestError`` and its subclasses describe bad client input. They
  are raised before any database call and map to HTTP 400.
- ``StoreExecutionError`` wraps any failure reported by the database while
  running a tile query. It maps to HTTP 500 and is never retried.
"""


class TileRequestError(ValueError):
    """Base class for rejected tile requests."""


class InvalidCoordinatesError(TileRequestError):
    """Raised when x or y falls outside ``[0, 2**zoom - 1]``."""


class InvalidZoomError(TileRequestError):
    """Raised when the zoom level is outside ``[0, 22]``."""


class UnknownEntityTypeError(TileRequestError):
    """Raised when the requested type has no allow-listed table."""


class InvalidGeometryColumnError(TileRequestError):
    """Raised when the requested geometry column is not allow-listed."""


class InvalidFieldSelectorError(TileRequestError):
    """Raised when a requested field path is not allow-listed."""


class StoreExecutionError(RuntimeError):
    """Raised when PostGIS fails to execute a tile query.

    The original driver exception is kept as ``__cause__``.
    """
