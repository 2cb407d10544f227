# =============================================================================
# Spatial Utils Library
# =============================================================================
# Thin wrappers around geopandas/pyproj for the spatial analysis tutorial.
# =============================================================================

"""
Spatial utilities for the tutorial workflows.

This library provides:
- Vector I/O: read_vector, read_points_csv, points_from_table, write_vector
- CRS utilities: reproject, ensure_same_crs, CRSMismatchError
- Spatial joins: spatial_join (point-in-polygon and other predicates)
- Aggregation: summarize_by, attach_summary, add_area, add_density, dissolve_by
"""

from .crs import (
    CRSMismatchError,
    crs_label,
    ensure_same_crs,
    reproject,
    require_projected,
    same_crs,
    to_proj_crs,
)
from .io import points_from_table, read_points_csv, read_vector, write_vector
from .joins import spatial_join
from .aggregation import (
    add_area,
    add_density,
    attach_summary,
    dissolve_by,
    summarize_by,
)

__all__ = [
    "CRSMismatchError",
    "crs_label",
    "ensure_same_crs",
    "reproject",
    "require_projected",
    "same_crs",
    "to_proj_crs",
    "points_from_table",
    "read_points_csv",
    "read_vector",
    "write_vector",
    "spatial_join",
    "add_area",
    "add_density",
    "attach_summary",
    "dissolve_by",
    "summarize_by",
]
