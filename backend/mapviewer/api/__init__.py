"""API router subpackage for the map viewer.

Submodules:
    - viewer: The composed map page and the health check.
    - layers: Registered layers, failed entries and per-layer bounds.
"""
