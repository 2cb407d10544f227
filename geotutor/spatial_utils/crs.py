# =============================================================================
# CRS Utilities
# =============================================================================
# Coordinate reference system checks and reprojection for GeoDataFrames.
# =============================================================================

import logging
from typing import Any, Optional

import geopandas as gpd
from pyproj import CRS as ProjCRS
from pyproj.exceptions import CRSError

__all__ = [
    "CRSMismatchError",
    "to_proj_crs",
    "crs_label",
    "same_crs",
    "ensure_same_crs",
    "reproject",
    "require_projected",
]

logger = logging.getLogger(__name__)


class CRSMismatchError(ValueError):
    """
    Raised when two layers must share a CRS but do not.

    Geometric predicates compare raw coordinates, so a point in degrees
    is never "within" a polygon in metres. Reproject one side first.

    Attributes:
        left_crs: Label of the left layer's CRS (or None)
        right_crs: Label of the right layer's CRS (or None)
    """

    def __init__(self, left_crs: Optional[str], right_crs: Optional[str]):
        self.left_crs = left_crs
        self.right_crs = right_crs
        super().__init__(
            f"CRS mismatch: left layer is {left_crs or 'undefined'}, "
            f"right layer is {right_crs or 'undefined'}. "
            f"Reproject one layer with reproject() before joining."
        )


def to_proj_crs(crs: Any) -> ProjCRS:
    """
    Coerce any CRS-like input (EPSG int, "EPSG:3338", WKT, PROJ) to a pyproj CRS.

    Raises:
        ValueError: If pyproj cannot interpret the input
    """
    try:
        return ProjCRS.from_user_input(crs)
    except (CRSError, TypeError) as e:
        raise ValueError(f"Unrecognized CRS {crs!r}: {e}") from e


def crs_label(crs: Any) -> Optional[str]:
    """Short human label: "EPSG:nnnn" when an authority code exists, else the CRS name."""
    if crs is None:
        return None
    proj = to_proj_crs(crs)
    authority = proj.to_authority()
    if authority:
        return f"{authority[0]}:{authority[1]}"
    return proj.name


def same_crs(left: Any, right: Any) -> bool:
    """True when both CRSs are defined and equivalent."""
    if left is None or right is None:
        return False
    return to_proj_crs(left) == to_proj_crs(right)


def ensure_same_crs(left: gpd.GeoDataFrame, right: gpd.GeoDataFrame) -> None:
    """
    Check that two GeoDataFrames share a defined CRS.

    Raises:
        CRSMismatchError: If either CRS is missing or they differ
    """
    if not same_crs(left.crs, right.crs):
        raise CRSMismatchError(crs_label(left.crs), crs_label(right.crs))


def reproject(gdf: gpd.GeoDataFrame, target_crs: Any) -> gpd.GeoDataFrame:
    """
    Transform a GeoDataFrame to ``target_crs``.

    Args:
        gdf: Input layer (must have a CRS)
        target_crs: Any CRS-like input accepted by pyproj

    Returns:
        New GeoDataFrame in the target CRS (a copy when already there)

    Raises:
        ValueError: If the input has no CRS
    """
    if gdf.crs is None:
        raise ValueError(
            "Cannot reproject a layer without a CRS. "
            "Assign the source CRS with GeoDataFrame.set_crs() first."
        )
    target = to_proj_crs(target_crs)
    if gdf.crs == target:
        return gdf.copy()

    logger.info(f"Reprojecting {len(gdf)} features: {crs_label(gdf.crs)} -> {crs_label(target)}")
    return gdf.to_crs(target)


def require_projected(gdf: gpd.GeoDataFrame, purpose: str = "this operation") -> None:
    """
    Check that a layer uses a projected (planar) CRS.

    Raises:
        ValueError: If the CRS is missing or geographic
    """
    if gdf.crs is None:
        raise ValueError(f"A CRS is required for {purpose}")
    if not to_proj_crs(gdf.crs).is_projected:
        raise ValueError(
            f"{purpose} needs a projected CRS, got geographic {crs_label(gdf.crs)}. "
            f"Reproject to an equal-area CRS first."
        )
