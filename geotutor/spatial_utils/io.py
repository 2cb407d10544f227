# =============================================================================
# Vector I/O
# =============================================================================
# Reading and writing vector layers (shapefile, GeoJSON, GeoPackage,
# GeoParquet) and building point layers from coordinate tables.
# =============================================================================

import logging
from pathlib import Path
from typing import Any, Optional, Union

import geopandas as gpd
import pandas as pd

from geotutor.models import VectorFormat
from .crs import crs_label, same_crs

__all__ = [
    "read_vector",
    "points_from_table",
    "read_points_csv",
    "write_vector",
]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_vector(
    path: PathLike,
    *,
    layer: Optional[str] = None,
    crs: Any = None,
) -> gpd.GeoDataFrame:
    """
    Read a vector file into a GeoDataFrame.

    Args:
        path: Shapefile (.shp), GeoJSON, GeoPackage or GeoParquet file
        layer: Layer name for multi-layer sources (GeoPackage)
        crs: CRS to assign when the file carries none (e.g. a shapefile
             without its .prj sidecar)

    Returns:
        GeoDataFrame with the file's attributes and geometries

    Raises:
        FileNotFoundError: If the path does not exist
        ValueError: If ``crs`` contradicts the CRS stored in the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vector file not found: {path}")

    fmt = VectorFormat.from_suffix(path.suffix)
    if fmt is VectorFormat.GEOPARQUET:
        gdf = gpd.read_parquet(path)
    else:
        kwargs = {"layer": layer} if layer else {}
        gdf = gpd.read_file(path, **kwargs)

    if gdf.crs is None:
        if crs is not None:
            gdf = gdf.set_crs(crs)
        else:
            logger.warning(f"{path.name} has no CRS; assign one before reprojecting or joining")
    elif crs is not None and not same_crs(gdf.crs, crs):
        raise ValueError(
            f"{path.name} is stored in {crs_label(gdf.crs)}, not {crs_label(crs)}. "
            f"Use reproject() to change the CRS."
        )

    logger.info(f"Read {len(gdf)} features from {path.name} (crs={crs_label(gdf.crs)})")
    return gdf


def points_from_table(
    df: pd.DataFrame,
    lon_column: str = "lng",
    lat_column: str = "lat",
    crs: Any = "EPSG:4326",
) -> gpd.GeoDataFrame:
    """
    Convert a table with coordinate columns into a point GeoDataFrame.

    Rows with a missing coordinate are dropped.

    Args:
        df: Table with longitude/latitude (or x/y) columns
        lon_column: Column holding x / longitude
        lat_column: Column holding y / latitude
        crs: CRS the coordinates are expressed in

    Returns:
        Point GeoDataFrame; coordinate columns are kept as attributes

    Raises:
        KeyError: If a coordinate column is missing
    """
    missing = [c for c in (lon_column, lat_column) if c not in df.columns]
    if missing:
        raise KeyError(
            f"Coordinate column(s) {missing} not found. Available columns: {list(df.columns)}"
        )

    valid = df[lon_column].notna() & df[lat_column].notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.warning(f"Dropping {dropped} row(s) with missing coordinates")
    df = df.loc[valid]

    return gpd.GeoDataFrame(
        df.copy(),
        geometry=gpd.points_from_xy(df[lon_column], df[lat_column]),
        crs=crs,
    )


def read_points_csv(
    path: PathLike,
    lon_column: str = "lng",
    lat_column: str = "lat",
    crs: Any = "EPSG:4326",
    **read_csv_kwargs,
) -> gpd.GeoDataFrame:
    """
    Read a CSV of point records and build point geometries.

    Raises:
        FileNotFoundError: If the path does not exist
        KeyError: If a coordinate column is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    df = pd.read_csv(path, **read_csv_kwargs)
    logger.info(f"Read {len(df)} rows from {path.name}")
    return points_from_table(df, lon_column=lon_column, lat_column=lat_column, crs=crs)


def write_vector(
    gdf: gpd.GeoDataFrame,
    path: PathLike,
    fmt: Optional[VectorFormat] = None,
) -> Path:
    """
    Write a GeoDataFrame, inferring the format from the file suffix.

    Parent directories are created as needed.

    Returns:
        Path written
    """
    path = Path(path)
    fmt = fmt or VectorFormat.from_suffix(path.suffix)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt is VectorFormat.GEOPARQUET:
        gdf.to_parquet(path)
    else:
        gdf.to_file(path, driver=fmt.driver)

    logger.info(f"Wrote {len(gdf)} features to {path} ({fmt.value})")
    return path
