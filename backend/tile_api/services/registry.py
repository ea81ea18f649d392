"""Static allow-lists for tile requests.

Everything here is defined once at import time and never changes while the
process runs. These are the only values that may end up inside generated
SQL text, so nothing in the application registers new entries at runtime.

Attributes:
    ENTITY_TABLES: Open Data Hub type name -> PostGIS relation name.
    GEOMETRY_COLUMNS: Geometry columns a client may ask to render.
    DEFAULT_GEOMETRY_COLUMN: Column used when the client does not choose one.
    FIELD_SELECTORS: Dotted paths into the ``data`` jsonb column that a
        client may project into the tile attributes.
"""

from __future__ import annotations

import types

from tile_api.services import exceptions

ENTITY_TABLES = types.MappingProxyType(
    {
        "accommodation": "accommodations",
        "odhactivitypoi": "smgpois",
        "event": "events",
        "venue": "venues_v2",
        "webcaminfo": "webcams",
        "measuringpoint": "measuringpoints",
        "skiarea": "skiareas",
        "region": "regions",
        "municipality": "municipalities",
        "district": "districts",
        "tourismassociation": "tvs",
        "area": "areas",
        "geoshape": "geoshapes",
    }
)

GEOMETRY_COLUMNS = frozenset({"geo", "gen_position", "geometry"})
DEFAULT_GEOMETRY_COLUMN = "geo"

FIELD_SELECTORS = frozenset(
    {
        "Id",
        "Shortname",
        "Active",
        "Source",
        "Type",
        "Detail.de.Title",
        "Detail.it.Title",
        "Detail.en.Title",
        "ContactInfos.de.City",
        "ContactInfos.it.City",
        "ContactInfos.en.City",
    }
)


def resolve_table(entity_type: str) -> str:
    """Map an Open Data Hub type name to its PostGIS table.

    Args:
        entity_type: Logical type name from the request path.

    Returns:
        Physical table name.

    Raises:
        UnknownEntityTypeError: If the type is not allow-listed.
    """
    try:
        return ENTITY_TABLES[entity_type]
    except KeyError:
        raise exceptions.UnknownEntityTypeError(
            f"Unknown type '{entity_type}'"
        ) from None


def entity_types() -> list[str]:
    """Return the allow-listed type names in alphabetical order."""
    return sorted(ENTITY_TABLES)
