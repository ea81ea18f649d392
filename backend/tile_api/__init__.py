"""Open Data Hub vector tile API.

A small FastAPI service that serves Mapbox Vector Tiles straight out of
PostGIS. A request names an Open Data Hub entity type and an XYZ tile
address; the service maps the type to its table, validates the request
against static allow-lists, computes the EPSG:3857 tile envelope and lets
``ST_AsMVT`` encode the tile.

- Tile addressing and envelopes: ``tile_api.services.tile_math``
- Allow-lists and type mapping: ``tile_api.services.registry``
- Request validation: ``tile_api.services.validation``
- SQL assembly: ``tile_api.services.tiles_postgis``
- Query execution: ``tile_api.db.database``
- HTTP surface: ``tile_api.api.tiles``
"""
