# =============================================================================
# Spatial Joins
# =============================================================================
# Predicate-based joins between vector layers (e.g. point-in-polygon).
# =============================================================================

import logging
from typing import Optional

import geopandas as gpd

from geotutor.models import SpatialJoinConfig
from .crs import crs_label, ensure_same_crs

__all__ = ["spatial_join"]

logger = logging.getLogger(__name__)


def spatial_join(
    left: gpd.GeoDataFrame,
    right: gpd.GeoDataFrame,
    config: Optional[SpatialJoinConfig] = None,
) -> gpd.GeoDataFrame:
    """
    Join the attributes of ``right`` onto ``left`` where the predicate holds.

    With the default config this is a point-in-polygon join: each point in
    ``left`` receives the attributes of the polygon it falls within, and
    points outside every polygon are dropped.

    Args:
        left: Layer whose geometries are kept (e.g. population points)
        right: Layer whose attributes are attached (e.g. region polygons)
        config: Predicate / how settings (default: within, inner)

    Returns:
        Joined GeoDataFrame with left's geometry

    Raises:
        CRSMismatchError: If the layers are not in the same CRS
    """
    config = config or SpatialJoinConfig()
    ensure_same_crs(left, right)

    joined = gpd.sjoin(left, right, how=config.how, predicate=config.predicate)
    if config.drop_index_right and "index_right" in joined.columns:
        joined = joined.drop(columns=["index_right"])

    logger.info(
        f"Spatial join ({config.predicate}, {config.how}) in {crs_label(left.crs)}: "
        f"{len(left)} left x {len(right)} right -> {len(joined)} rows"
    )
    return joined
