"""Column type normalization for describing tables and vector layers."""

import logging
from typing import TypedDict

import geopandas as gpd
import pandas as pd
import pyarrow as pa
import pyarrow.types as pat
from geopandas.array import GeometryDtype

__all__ = [
    "normalize_arrow_dtype",
    "describe_columns",
    "NormalizedType",
]

logger = logging.getLogger(__name__)


class NormalizedType(TypedDict):
    """Normalized type information for a column."""

    type_name: str  # Canonical category: STRING, INTEGER, FLOAT, etc.
    logical_type: str  # Detailed type: int64, float32, timestamp[ns]
    nullable: bool


# Canonical type vocabulary
TYPE_STRING = "STRING"
TYPE_INTEGER = "INTEGER"
TYPE_FLOAT = "FLOAT"
TYPE_BOOLEAN = "BOOLEAN"
TYPE_TIMESTAMP = "TIMESTAMP"
TYPE_DATE = "DATE"
TYPE_BINARY = "BINARY"
TYPE_ARRAY = "ARRAY"
TYPE_STRUCT = "STRUCT"
TYPE_GEOMETRY = "GEOMETRY"
TYPE_UNKNOWN = "UNKNOWN"


def normalize_arrow_dtype(
    field: pa.Field, is_geometry_hint: bool = False
) -> NormalizedType:
    """
    Normalize a PyArrow field to a canonical type category.

    Args:
        field: PyArrow Field with name and type information
        is_geometry_hint: Treat binary/struct storage as geometry (WKB / GeoArrow)

    Returns:
        NormalizedType dict with type_name, logical_type, nullable

    Example:
        >>> field = pa.field("population", pa.int64(), nullable=False)
        >>> normalize_arrow_dtype(field)
        {'type_name': 'INTEGER', 'logical_type': 'int64', 'nullable': False}
    """
    dtype = field.type

    if pat.is_string(dtype) or pat.is_large_string(dtype):
        type_name = TYPE_STRING
    elif pat.is_integer(dtype):
        type_name = TYPE_INTEGER
    elif pat.is_floating(dtype):
        type_name = TYPE_FLOAT
    elif pat.is_boolean(dtype):
        type_name = TYPE_BOOLEAN
    elif pat.is_timestamp(dtype):
        type_name = TYPE_TIMESTAMP
    elif pat.is_date(dtype):
        type_name = TYPE_DATE
    elif pat.is_binary(dtype) or pat.is_large_binary(dtype):
        type_name = TYPE_GEOMETRY if is_geometry_hint else TYPE_BINARY
    elif pat.is_list(dtype) or pat.is_large_list(dtype):
        type_name = TYPE_ARRAY
    elif pat.is_struct(dtype):
        type_name = TYPE_GEOMETRY if is_geometry_hint else TYPE_STRUCT
    else:
        type_name = TYPE_UNKNOWN

    # timestamp[ns, tz=UTC] -> timestamp[ns]
    logical_type = str(dtype)
    if "timestamp" in logical_type and ", tz=" in logical_type:
        logical_type = logical_type.split(", tz=")[0] + "]"

    return NormalizedType(
        type_name=type_name,
        logical_type=logical_type,
        nullable=field.nullable,
    )


def describe_columns(df: pd.DataFrame) -> dict[str, NormalizedType]:
    """
    Describe every column of a DataFrame or GeoDataFrame.

    Geometry columns report GEOMETRY with the geometry types present as the
    logical type (e.g. ``geometry(MultiPolygon,Polygon)``). Attribute columns
    are typed through Arrow's pandas conversion.

    Args:
        df: Table or vector layer

    Returns:
        Dict mapping column name to NormalizedType, in column order
    """
    geometry_columns = set()
    if isinstance(df, gpd.GeoDataFrame):
        geometry_columns = {
            name for name, dtype in df.dtypes.items() if isinstance(dtype, GeometryDtype)
        }

    attributes = pd.DataFrame(df.drop(columns=list(geometry_columns)))
    try:
        schema = pa.Schema.from_pandas(attributes, preserve_index=False)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        logger.warning(f"Could not infer Arrow types for all columns: {e}")
        schema = pa.schema(
            [pa.field(str(c), pa.string()) for c in attributes.columns]
        )
    attribute_types = {field.name: normalize_arrow_dtype(field) for field in schema}

    described: dict[str, NormalizedType] = {}
    for name in df.columns:
        if name in geometry_columns:
            geom_types = sorted(set(df[name].geom_type.dropna()))
            described[name] = NormalizedType(
                type_name=TYPE_GEOMETRY,
                logical_type=f"geometry({','.join(geom_types)})",
                nullable=bool(df[name].isna().any()),
            )
        else:
            described[name] = attribute_types.get(
                str(name),
                NormalizedType(type_name=TYPE_UNKNOWN, logical_type="unknown", nullable=True),
            )
    return described
