# =============================================================================
# Repository Library
# =============================================================================
# Solr search and object download for the metadata-and-data repository.
# =============================================================================

"""
Repository access for the tutorial workflows.

This library provides:
- RepositoryClient: Solr search, object retrieval, resource map parsing
- RepositoryError: HTTP / payload errors with status code and URL
- Bulk download helpers: download_objects, download_query_results,
  download_package (serial, no retries)
"""

from .client import QueryLike, RepositoryClient, RepositoryError, coerce_query
from .download import (
    download_objects,
    download_package,
    download_query_results,
    safe_filename,
)

__all__ = [
    "QueryLike",
    "RepositoryClient",
    "RepositoryError",
    "coerce_query",
    "download_objects",
    "download_package",
    "download_query_results",
    "safe_filename",
]
