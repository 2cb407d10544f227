# =============================================================================
# Attribute Aggregation
# =============================================================================
# Group-by/summarize helpers plus area and density attributes for polygons.
# =============================================================================

import logging
from typing import Literal, Optional, Sequence

import geopandas as gpd
import pandas as pd

from geotutor.models import AggregationSpec
from .crs import require_projected

__all__ = [
    "summarize_by",
    "attach_summary",
    "add_area",
    "add_density",
    "dissolve_by",
]

logger = logging.getLogger(__name__)

_AREA_DIVISORS = {"m2": 1.0, "km2": 1_000_000.0}


def summarize_by(df: pd.DataFrame, spec: AggregationSpec) -> pd.DataFrame:
    """
    Aggregate one column per group, dropping geometry.

    Rows whose group value is missing are excluded.

    Args:
        df: Table or GeoDataFrame (geometry is discarded)
        spec: Grouping column, value column and aggregation

    Returns:
        Plain DataFrame with columns ``[group_by, output_column]``

    Raises:
        KeyError: If the grouping or value column is missing
    """
    for column in (spec.group_by, spec.value_column):
        if column not in df.columns:
            raise KeyError(f"Column '{column}' not found. Available columns: {list(df.columns)}")

    table = pd.DataFrame(df[[spec.group_by, spec.value_column]])
    summary = (
        table.groupby(spec.group_by, dropna=True)[spec.value_column]
        .agg(spec.agg)
        .reset_index()
        .rename(columns={spec.value_column: spec.output_column})
    )
    logger.info(
        f"Summarized {len(table)} rows into {len(summary)} groups "
        f"({spec.agg} of {spec.value_column} by {spec.group_by})"
    )
    return summary


def attach_summary(
    polygons: gpd.GeoDataFrame,
    summary: pd.DataFrame,
    key: str,
    fill_value: Optional[float] = 0,
) -> gpd.GeoDataFrame:
    """
    Left-join a per-group summary back onto the polygon layer.

    Polygons without a summary row get ``fill_value`` (or NaN when None).

    Raises:
        KeyError: If ``key`` is missing from either side
    """
    if key not in polygons.columns or key not in summary.columns:
        raise KeyError(f"Join key '{key}' must exist in both the polygons and the summary")

    merged = polygons.merge(summary, on=key, how="left")
    if fill_value is not None:
        value_columns = [c for c in summary.columns if c != key]
        merged[value_columns] = merged[value_columns].fillna(fill_value)
    return merged


def add_area(
    gdf: gpd.GeoDataFrame,
    column: str = "area_km2",
    units: Literal["m2", "km2"] = "km2",
) -> gpd.GeoDataFrame:
    """
    Add a polygon area column computed in the layer's projected CRS.

    Raises:
        ValueError: If the CRS is missing or geographic, or units are unknown
    """
    if units not in _AREA_DIVISORS:
        raise ValueError(f"Unsupported area units '{units}'. Use one of {sorted(_AREA_DIVISORS)}")
    require_projected(gdf, purpose="area calculation")

    result = gdf.copy()
    result[column] = result.geometry.area / _AREA_DIVISORS[units]
    return result


def add_density(
    gdf: gpd.GeoDataFrame,
    value_column: str,
    area_column: str = "area_km2",
    output_column: str = "density",
) -> gpd.GeoDataFrame:
    """
    Add ``value_column / area_column``; zero or missing areas give NaN.

    Raises:
        KeyError: If either input column is missing
    """
    for column in (value_column, area_column):
        if column not in gdf.columns:
            raise KeyError(f"Column '{column}' not found. Available columns: {list(gdf.columns)}")

    result = gdf.copy()
    area = result[area_column].where(result[area_column] > 0)
    result[output_column] = result[value_column] / area
    return result


def dissolve_by(
    gdf: gpd.GeoDataFrame,
    column: str,
    value_columns: Optional[Sequence[str]] = None,
    aggfunc: str = "sum",
) -> gpd.GeoDataFrame:
    """
    Union geometries per group and aggregate attribute columns.

    Args:
        gdf: Polygon layer
        column: Grouping column
        value_columns: Attributes to aggregate (default: all numeric columns)
        aggfunc: Aggregation applied to ``value_columns``

    Returns:
        One feature per group, with ``column`` as a regular column
    """
    if column not in gdf.columns:
        raise KeyError(f"Column '{column}' not found. Available columns: {list(gdf.columns)}")

    if value_columns is None:
        value_columns = [
            c for c in gdf.select_dtypes(include="number").columns if c != column
        ]
    keep = [column, *value_columns, gdf.geometry.name]
    dissolved = gdf[keep].dissolve(by=column, aggfunc=aggfunc, as_index=False)
    logger.info(f"Dissolved {len(gdf)} features into {len(dissolved)} by '{column}'")
    return dissolved
