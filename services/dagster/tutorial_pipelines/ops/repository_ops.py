# =============================================================================
# Repository Ops - Search and Bulk Download
# =============================================================================
# Runs a Solr search against the repository, then downloads each hit (or
# each hit's data package) one at a time.
# =============================================================================

from pathlib import Path
from typing import Any, Dict, Optional

from dagster import In, OpExecutionContext, Out, op

from geotutor.models import DownloadRecord, DownloadReport, RepositoryDownloadConfig
from geotutor.repository import (
    RepositoryClient,
    RepositoryError,
    download_objects,
    download_package,
)

__all__ = ["search_repository", "download_search_results"]


def _search_repository(
    client: RepositoryClient,
    search_config: Dict[str, Any],
    log,
) -> Dict[str, Any]:
    """
    Core logic for the repository search.

    ``fileName`` (and ``resourceMap`` for package downloads) are added to the
    field list so the download step has what it needs.

    Args:
        client: RepositoryClient instance
        search_config: RepositoryDownloadConfig fields (from run config)
        log: Logger instance (context.log)

    Returns:
        Dict containing:
        - config: Validated config dict
        - documents: Search hits as dicts (Solr field names)
        - identifiers: Hit PIDs in result order
        - resource_maps: Unique resource map PIDs of the hits
        - file_names: PID -> original file name, where indexed

    Raises:
        RepositoryError: If the search request fails
    """
    config = RepositoryDownloadConfig(**search_config)
    query = config.query.with_fields("fileName")
    if config.packages:
        query = query.with_fields("resourceMap")

    log.info(f"Searching {client.search_url} with {query.to_params()}")
    docs = list(client.iter_query(query, max_results=config.max_results))

    resource_maps = list(dict.fromkeys(rm for doc in docs for rm in doc.resource_map))
    log.info(f"Found {len(docs)} document(s) in {len(resource_maps)} package(s)")
    for doc in docs:
        log.info(f"  {doc.identifier}: {doc.title or '(untitled)'}")

    return {
        "config": config.model_dump(),
        "documents": [doc.model_dump(by_alias=True, exclude_none=True) for doc in docs],
        "identifiers": [doc.identifier for doc in docs],
        "resource_maps": resource_maps,
        "file_names": {doc.identifier: doc.file_name for doc in docs if doc.file_name},
    }


def _download_packages(
    client: RepositoryClient,
    resource_maps: list[str],
    dest_dir: Path,
    config: RepositoryDownloadConfig,
    log,
) -> DownloadReport:
    report = DownloadReport()
    for i, resource_map_id in enumerate(resource_maps, start=1):
        log.info(f"Package {i}/{len(resource_maps)}: {resource_map_id}")
        try:
            package_report = download_package(
                client,
                resource_map_id,
                dest_dir,
                include_metadata=config.include_metadata,
                overwrite=config.overwrite,
                continue_on_error=config.continue_on_error,
                log=log,
            )
        except RepositoryError as e:
            if not config.continue_on_error:
                raise
            log.warning(f"Failed to resolve package {resource_map_id}: {e}")
            report.records.append(
                DownloadRecord(identifier=resource_map_id, success=False, error=str(e))
            )
            continue
        report.records.extend(package_report.records)
    return report


def _download_search_results(
    client: RepositoryClient,
    search_info: Dict[str, Any],
    log,
    default_dest_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Core logic for downloading search hits.

    Args:
        client: RepositoryClient instance
        search_info: Output of search_repository
        log: Logger instance (context.log)
        default_dest_dir: Used when the config names no dest_dir

    Returns:
        Dict with dest_dir, records, downloaded, skipped, failed, total_bytes

    Raises:
        RepositoryError: On the first failure unless continue_on_error
    """
    config = RepositoryDownloadConfig(**search_info["config"])
    dest_dir = Path(config.dest_dir or default_dest_dir or "downloads")

    if config.packages:
        if not search_info["resource_maps"]:
            log.warning("No resource maps in the search results; nothing to download")
        report = _download_packages(client, search_info["resource_maps"], dest_dir, config, log)
    else:
        report = download_objects(
            client,
            search_info["identifiers"],
            dest_dir,
            file_names=search_info.get("file_names"),
            overwrite=config.overwrite,
            continue_on_error=config.continue_on_error,
            log=log,
        )

    skipped = [r for r in report.records if r.skipped]
    return {
        "dest_dir": str(dest_dir),
        "records": [r.model_dump() for r in report.records],
        "downloaded": len(report.succeeded) - len(skipped),
        "skipped": len(skipped),
        "failed": len(report.failed),
        "total_bytes": report.total_bytes,
    }


@op(
    ins={"search_config": In(dagster_type=dict)},
    out={"search_info": Out(dagster_type=dict)},
    required_resource_keys={"repository"},
)
def search_repository(context: OpExecutionContext, search_config: dict) -> dict:
    """
    Run the configured Solr search.

    The config is supplied through run config, e.g.
    ``{"ops": {"search_repository": {"inputs": {"search_config": {"value": {...}}}}}}``.

    Returns:
        Dict with config, documents, identifiers, resource_maps, file_names
    """
    with context.resources.repository.get_client() as client:
        return _search_repository(client=client, search_config=search_config, log=context.log)


@op(
    ins={"search_info": In(dagster_type=dict)},
    out={"download_info": Out(dagster_type=dict)},
    required_resource_keys={"repository"},
)
def download_search_results(context: OpExecutionContext, search_info: dict) -> dict:
    """
    Download every search hit (or package) serially.

    Returns:
        Dict with dest_dir, records and counts
    """
    repository = context.resources.repository
    with repository.get_client() as client:
        return _download_search_results(
            client=client,
            search_info=search_info,
            log=context.log,
            default_dest_dir=repository.download_dir,
        )
