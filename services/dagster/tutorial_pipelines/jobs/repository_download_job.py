"""Repository search-and-download workflow (op-based)."""

from dagster import job

from ..ops import download_search_results, search_repository


@job(
    name="repository_download_job",
    description="Query the repository's Solr index and download the matching objects or data packages one at a time",
)
def repository_download_job():
    """
    Repository download pipeline.

    Flow:
    1. search_repository: Runs the configured Solr query (paged, serial)
    2. download_search_results: Streams each hit (or package member) to disk

    The RepositoryDownloadConfig is passed as an op input to
    search_repository via run config.
    """
    search_info = search_repository()
    download_search_results(search_info)
