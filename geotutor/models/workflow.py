# =============================================================================
# Workflow Models Module
# =============================================================================
# Pydantic models describing the spatial analysis workflow inputs:
# - SpatialJoinConfig: Predicate-based join settings
# - AggregationSpec: Group-by / summarize settings
# - RegionalPopulationConfig: End-to-end regional population workflow
# - RepositoryDownloadConfig: Search-then-download workflow
# =============================================================================

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .repository import SolrQuery
from .spatial import CRS

__all__ = [
    "SpatialJoinConfig",
    "AggregationSpec",
    "RegionalPopulationConfig",
    "RepositoryDownloadConfig",
]


class SpatialJoinConfig(BaseModel):
    """Settings for a spatial (predicate) join.

    Attributes:
        predicate: Geometric predicate tested left-against-right
        how: Which side's rows are kept
        drop_index_right: Drop the ``index_right`` column geopandas adds
    """

    predicate: Literal["within", "intersects", "contains"] = Field(
        "within",
        description="Geometric predicate (left <predicate> right)",
    )
    how: Literal["inner", "left", "right"] = Field("inner", description="Join strategy")
    drop_index_right: bool = Field(True, description="Drop geopandas' index_right column")

    model_config = ConfigDict(extra="forbid")


class AggregationSpec(BaseModel):
    """Group-by / summarize settings.

    ``output_column`` defaults to ``total_<value_column>`` for sums and
    ``<agg>_<value_column>`` otherwise.
    """

    group_by: str = Field(..., min_length=1, description="Grouping column")
    value_column: str = Field(..., min_length=1, description="Column to aggregate")
    agg: Literal["sum", "mean", "count", "min", "max", "median"] = Field(
        "sum",
        description="Aggregation function",
    )
    output_column: Optional[str] = Field(None, description="Name of the aggregated column")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def default_output_column(self) -> "AggregationSpec":
        if self.output_column is None:
            prefix = "total" if self.agg == "sum" else self.agg
            self.output_column = f"{prefix}_{self.value_column}"
        return self


class RegionalPopulationConfig(BaseModel):
    """Inputs of the regional population workflow.

    Polygons (regions) are read from a vector file, population points from a
    CSV with coordinate columns. Both are reprojected to an equal-area CRS,
    joined by containment and summarized per region.
    """

    regions_path: str = Field(..., description="Vector file with region polygons")
    points_path: str = Field(..., description="CSV with point records")
    lon_column: str = Field("lng", description="Longitude column in the CSV")
    lat_column: str = Field("lat", description="Latitude column in the CSV")
    points_crs: CRS = Field("EPSG:4326", description="CRS of the CSV coordinates")
    analysis_crs: CRS = Field("EPSG:3338", description="Equal-area CRS for analysis")
    region_column: str = Field("region", description="Region name column")
    population_column: str = Field("population", description="Population column")
    join: SpatialJoinConfig = Field(default_factory=SpatialJoinConfig)
    dissolve_column: Optional[str] = Field(
        None,
        description="Optional column to dissolve the regional summary by (e.g. mgmt_area)",
    )
    output_dir: str = Field("output", description="Directory for outputs")
    intent: str = Field("equal_area_analysis", description="Transformation recipe name")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "regions_path": "data/ak_regions_simp.shp",
                "points_path": "data/alaska_population.csv",
                "lon_column": "lng",
                "lat_column": "lat",
                "analysis_crs": "EPSG:3338",
                "region_column": "region",
                "population_column": "population",
                "dissolve_column": "mgmt_area",
            }
        },
    )

    @property
    def aggregation(self) -> AggregationSpec:
        return AggregationSpec(
            group_by=self.region_column,
            value_column=self.population_column,
            agg="sum",
        )


class RepositoryDownloadConfig(BaseModel):
    """Inputs of the repository search-and-download workflow.

    Either every search hit is downloaded, or (``packages=True``) each hit's
    resource maps are resolved and whole data packages are fetched.
    """

    query: SolrQuery = Field(default_factory=SolrQuery, description="Search to run")
    max_results: Optional[int] = Field(None, ge=1, description="Stop after this many hits")
    dest_dir: Optional[str] = Field(
        None,
        description="Download directory (default: REPOSITORY_DOWNLOAD_DIR)",
    )
    packages: bool = Field(False, description="Download whole packages via resource maps")
    include_metadata: bool = Field(True, description="Fetch metadata documents of packages")
    overwrite: bool = Field(False, description="Re-download files that already exist")
    continue_on_error: bool = Field(False, description="Record failures and keep going")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "query": {
                    "q": "title:*soil* AND formatType:METADATA",
                    "rows": 5,
                    "fl": ["identifier", "title", "resourceMap"],
                    "sort": "dateUploaded desc",
                },
                "max_results": 5,
                "packages": True,
            }
        },
    )
