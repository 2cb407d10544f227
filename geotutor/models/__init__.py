# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the tutorial workflows.
# =============================================================================

"""
Data models for the tutorial workflows.

This library provides:
- Spatial types: CRS, Bounds, vector and map output formats
- Repository models: Solr queries, search results, resource maps, downloads
- Workflow models: Spatial join, aggregation and regional population config
- Configuration models
"""

# Spatial types
from .spatial import (
    CRS,
    Bounds,
    MapOutputFormat,
    VectorFormat,
    epsg_code,
    validate_crs,
)

# Repository models
from .repository import (
    DEFAULT_FIELDS,
    DownloadRecord,
    DownloadReport,
    ResourceMap,
    SearchResult,
    SolrDocument,
    SolrQuery,
    quote_term,
)

# Workflow models
from .workflow import (
    AggregationSpec,
    RegionalPopulationConfig,
    RepositoryDownloadConfig,
    SpatialJoinConfig,
)

# Configuration models
from .config import (
    RepositorySettings,
    SpatialSettings,
)

__all__ = [
    # Spatial types
    "CRS",
    "Bounds",
    "MapOutputFormat",
    "VectorFormat",
    "epsg_code",
    "validate_crs",
    # Repository models
    "DEFAULT_FIELDS",
    "DownloadRecord",
    "DownloadReport",
    "ResourceMap",
    "SearchResult",
    "SolrDocument",
    "SolrQuery",
    "quote_term",
    # Workflow models
    "AggregationSpec",
    "RegionalPopulationConfig",
    "RepositoryDownloadConfig",
    "SpatialJoinConfig",
    # Configuration models
    "RepositorySettings",
    "SpatialSettings",
]
