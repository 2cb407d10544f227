# =============================================================================
# Spatial Types Module
# =============================================================================
# Provides reusable spatial data types with validation:
# - CRS: Coordinate Reference System (EPSG, WKT, PROJ)
# - Bounds: Geographic bounding box
# - VectorFormat: Vector file formats and their drivers
# - MapOutputFormat: Supported rendered map outputs
# =============================================================================

import re
from enum import Enum
import math
from typing import Annotated, Optional, Sequence

from pydantic import BaseModel, Field, BeforeValidator, model_validator

__all__ = [
    "CRS",
    "Bounds",
    "VectorFormat",
    "MapOutputFormat",
    "validate_crs",
    "epsg_code",
]


_EPSG_PATTERN = re.compile(r"^EPSG:(\d{4,6})$", re.IGNORECASE)


# =============================================================================
# Enums
# =============================================================================

class VectorFormat(str, Enum):
    """Vector file formats readable and writable by the spatial utilities."""
    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    GPKG = "gpkg"
    GEOPARQUET = "geoparquet"

    @property
    def driver(self) -> Optional[str]:
        """GDAL/OGR driver name (None for GeoParquet, written via pyarrow)."""
        return {
            VectorFormat.SHAPEFILE: "ESRI Shapefile",
            VectorFormat.GEOJSON: "GeoJSON",
            VectorFormat.GPKG: "GPKG",
            VectorFormat.GEOPARQUET: None,
        }[self]

    @classmethod
    def from_suffix(cls, suffix: str) -> "VectorFormat":
        """
        Infer the vector format from a file suffix.

        Args:
            suffix: File suffix including the dot (e.g. ".shp")

        Returns:
            Matching VectorFormat

        Raises:
            ValueError: If the suffix is not a supported vector format
        """
        mapping = {
            ".shp": cls.SHAPEFILE,
            ".geojson": cls.GEOJSON,
            ".json": cls.GEOJSON,
            ".gpkg": cls.GPKG,
            ".parquet": cls.GEOPARQUET,
            ".geoparquet": cls.GEOPARQUET,
        }
        try:
            return mapping[suffix.lower()]
        except KeyError:
            raise ValueError(
                f"Unsupported vector file suffix '{suffix}'. "
                f"Expected one of: {sorted(mapping)}"
            ) from None


class MapOutputFormat(str, Enum):
    """Supported output formats for rendered maps."""
    PNG = "png"
    SVG = "svg"
    PDF = "pdf"
    HTML = "html"


# =============================================================================
# CRS (Coordinate Reference System)
# =============================================================================

def validate_crs(value: str) -> str:
    """
    Validate and normalize a Coordinate Reference System string.

    Supports three formats:
    1. EPSG codes: "EPSG:4326", "epsg:3338" (case-insensitive, normalized to uppercase)
    2. WKT strings: "PROJCS[...]", "GEOGCS[...]", "COMPD_CS[...]", "GEOCCS[...]"
    3. PROJ strings: "+proj=aea +lat_1=55 ..."

    Args:
        value: CRS string to validate

    Returns:
        Normalized CRS string (EPSG codes are uppercased)

    Raises:
        TypeError: If the value is not a string
        ValueError: If the CRS format is invalid
    """
    if not isinstance(value, str):
        raise TypeError(f"CRS must be a string, got {type(value).__name__}")

    value = value.strip()
    if not value:
        raise ValueError("CRS cannot be empty or whitespace only")

    if _EPSG_PATTERN.match(value):
        return value.upper()

    wkt_starts = ('PROJCS[', 'GEOGCS[', 'COMPD_CS[', 'GEOCCS[')
    if value.startswith(wkt_starts) and value.endswith(']'):
        if value.count('[') == value.count(']'):
            return value

    # PROJ strings need a projection name after "+proj="
    if value.startswith('+proj=') and value[6:].split(' ', 1)[0]:
        return value

    raise ValueError(
        f"Invalid CRS format. Must be one of:\n"
        f"  - EPSG code: 'EPSG:4326'\n"
        f"  - WKT string: 'PROJCS[...]' or 'GEOGCS[...]'\n"
        f"  - PROJ string: '+proj=aea +lat_1=55 ...'\n"
        f"Got: {value[:100]}{'...' if len(value) > 100 else ''}"
    )


def epsg_code(crs: str) -> Optional[int]:
    """
    Return the integer EPSG code of an "EPSG:nnnn" string, or None.

    Examples:
        >>> epsg_code("epsg:3338")
        3338
        >>> epsg_code("+proj=longlat") is None
        True
    """
    match = _EPSG_PATTERN.match(crs.strip())
    return int(match.group(1)) if match else None


CRS = Annotated[
    str,
    Field(..., description="Coordinate Reference System"),
    BeforeValidator(validate_crs)
]
"""
Coordinate Reference System type.

Validates and normalizes CRS strings supporting:
- EPSG codes: "EPSG:4326" (case-insensitive, normalized to uppercase)
- WKT strings: "PROJCS[...]", "GEOGCS[...]", etc.
- PROJ strings: "+proj=aea +lat_1=55 ..."
"""


# =============================================================================
# Bounds (Geographic Bounding Box)
# =============================================================================

class Bounds(BaseModel):
    """
    Bounding box defining a rectangular area in some CRS.

    Validates that minx <= maxx and miny <= maxy (allows point bounds).

    Attributes:
        minx: Minimum X coordinate (west)
        miny: Minimum Y coordinate (south)
        maxx: Maximum X coordinate (east)
        maxy: Maximum Y coordinate (north)
    """

    minx: float = Field(..., description="Minimum X coordinate (west)")
    miny: float = Field(..., description="Minimum Y coordinate (south)")
    maxx: float = Field(..., description="Maximum X coordinate (east)")
    maxy: float = Field(..., description="Maximum Y coordinate (north)")

    @model_validator(mode='after')
    def validate_bounds(self) -> 'Bounds':
        """
        Validate that coordinates are finite, minx <= maxx and miny <= maxy.

        Raises:
            ValueError: If bounds are invalid (NaN, infinite, or min > max)
        """
        if not all(math.isfinite(v) for v in (self.minx, self.miny, self.maxx, self.maxy)):
            raise ValueError("Invalid bounds: coordinates must be finite (empty layer?)")
        if self.minx > self.maxx:
            raise ValueError(
                f"Invalid bounds: minx ({self.minx}) must be less than or equal to maxx ({self.maxx})"
            )
        if self.miny > self.maxy:
            raise ValueError(
                f"Invalid bounds: miny ({self.miny}) must be less than or equal to maxy ({self.maxy})"
            )
        return self

    @classmethod
    def from_total_bounds(cls, total_bounds: Sequence[float]) -> "Bounds":
        """Build from a GeoDataFrame's ``total_bounds`` (minx, miny, maxx, maxy)."""
        minx, miny, maxx, maxy = (float(v) for v in total_bounds)
        return cls(minx=minx, miny=miny, maxx=maxx, maxy=maxy)

    @property
    def width(self) -> float:
        """Calculate the width (east-west extent) of the bounding box."""
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        """Calculate the height (north-south extent) of the bounding box."""
        return self.maxy - self.miny

    @property
    def area(self) -> float:
        """Calculate the area of the bounding box (width x height)."""
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        """Center point as (x, y)."""
        return ((self.minx + self.maxx) / 2, (self.miny + self.maxy) / 2)
