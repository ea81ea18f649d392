"""API router subpackage for the vector tile service.

Submodules:
    - tiles: XYZ vector tile endpoints keyed by Open Data Hub entity type.
"""
