# =============================================================================
# Vector Transformation Steps
# =============================================================================
# Concrete vector transformation step implementations.
# =============================================================================

from typing import Union

import geopandas as gpd

from geotutor.spatial_utils.crs import reproject, to_proj_crs
from .base import VectorStep

__all__ = [
    "NormalizeCRSStep",
    "SimplifyGeometryStep",
    "MakeValidStep",
    "CreateSpatialIndexStep",
]


class NormalizeCRSStep(VectorStep):
    """
    Transform geometries to a target CRS (default: EPSG:4326).

    Returns a new layer; attribute columns are carried through untouched.
    """

    def __init__(self, target_crs: Union[int, str] = 4326):
        """
        Initialize CRS normalization step.

        Args:
            target_crs: Target EPSG code or any CRS string pyproj accepts

        Raises:
            ValueError: If the target CRS cannot be interpreted
        """
        to_proj_crs(target_crs)
        self.target_crs = target_crs

    def apply(self, gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        return reproject(gdf, self.target_crs)


class SimplifyGeometryStep(VectorStep):
    """
    Simplify geometries, preserving topology by default.

    The tolerance is in the units of the layer's CRS: degrees for
    EPSG:4326, metres for most projected CRSs.
    """

    def __init__(self, tolerance: float = 0.0001, preserve_topology: bool = True):
        """
        Initialize geometry simplification step.

        Args:
            tolerance: Simplification tolerance in CRS units (must be >= 0)
            preserve_topology: Avoid creating invalid geometries (default: True)

        Raises:
            ValueError: If tolerance is negative
        """
        if tolerance < 0:
            raise ValueError(f"Invalid tolerance: {tolerance}. Must be >= 0")
        self.tolerance = tolerance
        self.preserve_topology = preserve_topology

    def apply(self, gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        result = gdf.copy()
        result[result.geometry.name] = result.geometry.simplify(
            self.tolerance, preserve_topology=self.preserve_topology
        )
        return result


class MakeValidStep(VectorStep):
    """
    Repair invalid geometries (self-intersections, bow-ties).

    Valid geometries are left as they are.
    """

    def apply(self, gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        invalid = ~gdf.geometry.is_valid
        if not invalid.any():
            return gdf.copy()
        result = gdf.copy()
        geom_name = result.geometry.name
        result.loc[invalid, geom_name] = result.geometry[invalid].make_valid()
        return result


class CreateSpatialIndexStep(VectorStep):
    """
    Build the layer's STRtree spatial index up front.

    This step does not change the data; it returns the input unchanged
    after the index is materialized so later joins reuse it.
    """

    def apply(self, gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        _ = gdf.sindex
        return gdf
