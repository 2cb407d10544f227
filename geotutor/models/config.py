# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the tutorial workflows:
# - RepositorySettings: Solr search / object download endpoints
# - SpatialSettings: Data locations and default CRSs
# =============================================================================

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .spatial import CRS

__all__ = [
    "RepositorySettings",
    "SpatialSettings",
]


# =============================================================================
# Repository Settings (Metadata and Data Repository)
# =============================================================================

class RepositorySettings(BaseSettings):
    """
    Configuration for the metadata-and-data repository.

    The coordinating node hosts the search index across all member nodes;
    the member node serves the objects themselves.

    Maps environment variables with prefix "REPOSITORY_":
    - REPOSITORY_BASE_URL → base_url
    - REPOSITORY_NODE_URL → node_url
    - REPOSITORY_TOKEN → token
    - REPOSITORY_TIMEOUT → timeout
    - REPOSITORY_DOWNLOAD_DIR → download_dir

    Attributes:
        base_url: Coordinating node REST base (search endpoint host)
        node_url: Member node REST base (object endpoint host)
        token: Optional bearer token for private content
        timeout: HTTP timeout in seconds (default: 30)
        download_dir: Default directory for bulk downloads
    """

    base_url: str = Field(
        "https://cn.dataone.org/cn/v2",
        validation_alias="REPOSITORY_BASE_URL",
        description="Coordinating node REST base URL",
    )
    node_url: str = Field(
        "https://arcticdata.io/metacat/d1/mn/v2",
        validation_alias="REPOSITORY_NODE_URL",
        description="Member node REST base URL",
    )
    token: Optional[str] = Field(None, validation_alias="REPOSITORY_TOKEN", description="Bearer token")
    timeout: float = Field(30.0, gt=0, validation_alias="REPOSITORY_TIMEOUT", description="HTTP timeout (s)")
    download_dir: str = Field("downloads", validation_alias="REPOSITORY_DOWNLOAD_DIR", description="Download directory")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )


# =============================================================================
# Spatial Settings
# =============================================================================

class SpatialSettings(BaseSettings):
    """
    Configuration for the spatial analysis tutorial.

    Maps environment variables with prefix "SPATIAL_":
    - SPATIAL_DATA_DIR → data_dir
    - SPATIAL_OUTPUT_DIR → output_dir
    - SPATIAL_ANALYSIS_CRS → analysis_crs
    - SPATIAL_WEB_CRS → web_crs

    Attributes:
        data_dir: Directory holding input shapefiles and CSVs
        output_dir: Directory for written maps and vector outputs
        analysis_crs: Equal-area CRS used for area calculations (default: Alaska Albers)
        web_crs: CRS expected by web map tiles (default: WGS 84)
    """

    data_dir: str = Field("data", validation_alias="SPATIAL_DATA_DIR", description="Input data directory")
    output_dir: str = Field("output", validation_alias="SPATIAL_OUTPUT_DIR", description="Output directory")
    analysis_crs: CRS = Field("EPSG:3338", validation_alias="SPATIAL_ANALYSIS_CRS", description="Equal-area analysis CRS")
    web_crs: CRS = Field("EPSG:4326", validation_alias="SPATIAL_WEB_CRS", description="Web map CRS")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
