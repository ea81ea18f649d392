"""Validation of incoming tile requests.

All checks run before any SQL is assembled or any database call is made.
The order of the checks is fixed and the first failing check wins:

1. tile coordinates within ``[0, 2**zoom - 1]``
2. zoom within ``[0, 22]``
3. entity type allow-listed
4. geometry column allow-listed (when given)
5. every field selector path allow-listed (when given)

Example:
    >>> from tile_api.services import validation
    >>> validation.validate_tile_request("odhactivitypoi", 14, 2621, 6333)
    >>> validation.validate_tile_request("odhactivitypoi", 1, 2, 0)
    Traceback (most recent call last):
        ...
    tile_api.services.exceptions.InvalidCoordinatesError: Invalid tile coordinates
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tile_api.db import models
from tile_api.services import exceptions, registry, tile_math

if TYPE_CHECKING:
    from collections.abc import Sequence


def _in_tile_range(index: int, zoom: int) -> bool:
    """Return True when ``0 <= index <= 2**zoom - 1``.

    Compares bit lengths so an absurd zoom never builds a huge integer.
    A negative zoom leaves no valid index.
    """
    return index >= 0 and zoom >= 0 and index.bit_length() <= zoom


def parse_field_selector(field_selector: str) -> tuple[str, ...]:
    """Split a comma separated selector into stripped dotted paths.

    Args:
        field_selector: Raw selector, e.g. ``"Shortname,Detail.de.Title"``.

    Returns:
        Tuple of distinct paths in first-seen request order.

    Raises:
        InvalidFieldSelectorError: If any path is empty.
    """
    paths = tuple(part.strip() for part in field_selector.split(","))
    if any(not path for path in paths):
        raise exceptions.InvalidFieldSelectorError("Invalid fieldselector")
    return tuple(dict.fromkeys(paths))


def validate_tile_request(
    entity_type: str,
    zoom: int,
    x: int,
    y: int,
    source: str | None = None,
    field_selector: str | None = None,
    geometry_column: str | None = None,
) -> None:
    """Check a tile request against the static allow-lists.

    ``source`` is accepted for signature symmetry only. It is always bound
    as a query parameter, so any value is acceptable.

    Raises:
        InvalidCoordinatesError: x or y out of range for ``zoom``.
        InvalidZoomError: zoom outside ``[0, 22]``.
        UnknownEntityTypeError: entity type not allow-listed.
        InvalidGeometryColumnError: geometry column not allow-listed.
        InvalidFieldSelectorError: a field path not allow-listed.
    """
    if not (_in_tile_range(x, zoom) and _in_tile_range(y, zoom)):
        raise exceptions.InvalidCoordinatesError("Invalid tile coordinates")

    if zoom < 0 or zoom > tile_math.MAX_ZOOM:
        raise exceptions.InvalidZoomError("Invalid zoom level")

    if entity_type not in registry.ENTITY_TABLES:
        raise exceptions.UnknownEntityTypeError(f"Unknown type '{entity_type}'")

    if (
        geometry_column is not None
        and geometry_column not in registry.GEOMETRY_COLUMNS
    ):
        raise exceptions.InvalidGeometryColumnError(
            f"Invalid geocolumn '{geometry_column}'"
        )

    if field_selector is not None:
        for path in parse_field_selector(field_selector):
            if path not in registry.FIELD_SELECTORS:
                raise exceptions.InvalidFieldSelectorError(
                    f"Invalid fieldselector '{path}'"
                )


def build_query_request(
    entity_type: str,
    zoom: int,
    x: int,
    y: int,
    source: str | None = None,
    field_selector: str | None = None,
    geometry_column: str | None = None,
    ids: Sequence[str] | None = None,
) -> models.QueryRequest:
    """Validate a tile request and return its ``QueryRequest`` form.

    Args:
        entity_type: Logical Open Data Hub type name.
        zoom: Zoom level.
        x: Tile column.
        y: Tile row.
        source: Optional ``gen_source`` filter value.
        field_selector: Optional comma separated dotted jsonb paths.
        geometry_column: Optional geometry column, ``geo`` when omitted.
        ids: Optional ordered id list.

    Returns:
        Validated request with the table resolved and defaults applied.

    Raises:
        TileRequestError: Any of the validation failures listed in
            ``validate_tile_request``.
    """
    validate_tile_request(
        entity_type,
        zoom,
        x,
        y,
        source=source,
        field_selector=field_selector,
        geometry_column=geometry_column,
    )

    return models.QueryRequest(
        entity_type=entity_type,
        table=registry.resolve_table(entity_type),
        tile=tile_math.TileAddress(zoom=zoom, x=x, y=y),
        geometry_column=geometry_column or registry.DEFAULT_GEOMETRY_COLUMN,
        field_paths=(
            parse_field_selector(field_selector)
            if field_selector is not None
            else ()
        ),
        source=source,
        ids=tuple(ids) if ids is not None else None,
    )
