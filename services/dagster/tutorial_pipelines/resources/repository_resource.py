# =============================================================================
# Repository Resource - Solr Search and Object Downloads
# =============================================================================
# Dagster wrapper around geotutor.repository.RepositoryClient.
# Searches hit the coordinating node, objects come from the member node.
# =============================================================================

import os
from typing import Optional

from dagster import ConfigurableResource, EnvVar
from pydantic import Field

from geotutor.models import RepositorySettings
from geotutor.repository import RepositoryClient

__all__ = ["RepositoryResource"]


class RepositoryResource(ConfigurableResource):
    """
    Dagster resource for a DataONE-style metadata and data repository.

    Configuration matches RepositorySettings from geotutor.models.config.

    Attributes:
        base_url: Coordinating node API root (Solr search)
        node_url: Member node API root (object retrieval); defaults to base_url
        token: Optional bearer token for restricted objects
        timeout: Per-request timeout in seconds
        download_dir: Default directory for downloaded objects
    """

    base_url: str = Field(
        "https://cn.dataone.org/cn/v2",
        description="Coordinating node API root",
    )
    node_url: Optional[str] = Field(
        None,
        description="Member node API root for object downloads",
    )
    token: Optional[str] = Field(None, description="Bearer token")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    download_dir: str = Field("downloads", description="Default download directory")

    @classmethod
    def from_settings(cls, settings: RepositorySettings) -> "RepositoryResource":
        """
        Build the resource from REPOSITORY_* settings.

        Unset variables keep their defaults. A token exported in the process
        environment is passed as an EnvVar so it is not stored in run config.
        """
        if os.environ.get("REPOSITORY_TOKEN"):
            token = EnvVar("REPOSITORY_TOKEN")
        else:
            token = settings.token or None
        return cls(
            base_url=settings.base_url,
            node_url=settings.node_url,
            token=token,
            timeout=settings.timeout,
            download_dir=settings.download_dir,
        )

    def get_client(self) -> RepositoryClient:
        """
        Create a repository client.

        Callers should close it (or use it as a context manager).

        Returns:
            Configured RepositoryClient
        """
        return RepositoryClient(
            base_url=self.base_url,
            node_url=self.node_url or None,
            token=self.token or None,
            timeout=self.timeout,
        )
