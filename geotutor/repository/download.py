# =============================================================================
# Bulk Download
# =============================================================================
# Serial download helpers: one object at a time, in order, no retries.
# =============================================================================

import hashlib
import logging
import re
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from geotutor.models import DownloadRecord, DownloadReport
from .client import QueryLike, RepositoryClient, RepositoryError, coerce_query

__all__ = [
    "safe_filename",
    "download_objects",
    "download_query_results",
    "download_package",
]

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(identifier: str, max_length: int = 200) -> str:
    """
    Turn a PID into a portable file name.

    Runs of characters outside ``[A-Za-z0-9._-]`` become a single underscore.

    Examples:
        >>> safe_filename("urn:uuid:1234-abcd")
        'urn_uuid_1234-abcd'
        >>> safe_filename("doi:10.18739/A2RZ6X")
        'doi_10.18739_A2RZ6X'
    """
    name = _UNSAFE_CHARS.sub("_", identifier).strip("._")
    if not name:
        raise ValueError(f"Cannot derive a file name from identifier {identifier!r}")
    return name[:max_length]


def _target_name(identifier: str, preferred: Optional[str], claimed: set[str]) -> str:
    """
    Pick a file name no other object in this run has claimed.

    Tries the preferred name (e.g. Solr ``fileName``), then the PID, then a
    digest of the PID. If all are taken, ``_<n>`` is appended to the first.
    """
    candidates = []
    for raw in (preferred, identifier):
        if not raw:
            continue
        try:
            candidates.append(safe_filename(raw))
        except ValueError:
            continue
    candidates.append(f"object_{hashlib.sha256(identifier.encode()).hexdigest()[:16]}")

    for name in candidates:
        if name not in claimed:
            return name

    first = Path(candidates[0])
    n = 1
    while f"{first.stem}_{n}{first.suffix}" in claimed:
        n += 1
    return f"{first.stem}_{n}{first.suffix}"


def download_objects(
    client: RepositoryClient,
    identifiers: Iterable[str],
    dest_dir: Union[str, Path],
    *,
    file_names: Optional[Mapping[str, str]] = None,
    overwrite: bool = False,
    continue_on_error: bool = False,
    log: Optional[logging.Logger] = None,
) -> DownloadReport:
    """
    Download objects one after another into ``dest_dir``.

    Args:
        client: Repository client
        identifiers: PIDs to fetch (duplicates are fetched once)
        dest_dir: Target directory (created if missing)
        file_names: Optional PID -> file name overrides (e.g. Solr ``fileName``);
            a name already used in this run falls back to the PID
        overwrite: Re-download files that already exist
        continue_on_error: Record failures and keep going instead of raising
        log: Logger to report progress on (default: module logger)

    Returns:
        DownloadReport with one record per identifier

    Raises:
        RepositoryError: On the first failure unless ``continue_on_error``
    """
    log = log or logger
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    file_names = file_names or {}

    report = DownloadReport()
    claimed: set[str] = set()
    unique_ids = list(dict.fromkeys(identifiers))
    for i, identifier in enumerate(unique_ids, start=1):
        name = _target_name(identifier, file_names.get(identifier), claimed)
        claimed.add(name)
        target = dest_dir / name

        if target.exists() and not overwrite:
            log.info(f"[{i}/{len(unique_ids)}] Skipping {identifier}: {target} exists")
            report.records.append(
                DownloadRecord(
                    identifier=identifier,
                    path=str(target),
                    size_bytes=target.stat().st_size,
                    skipped=True,
                )
            )
            continue

        log.info(f"[{i}/{len(unique_ids)}] Downloading {identifier} -> {target}")
        try:
            size = client.stream_object(identifier, target)
        except RepositoryError as e:
            if not continue_on_error:
                raise
            log.warning(f"Failed to download {identifier}: {e}")
            report.records.append(
                DownloadRecord(identifier=identifier, success=False, error=str(e))
            )
            continue

        report.records.append(
            DownloadRecord(identifier=identifier, path=str(target), size_bytes=size)
        )

    log.info(
        f"Downloaded {len(report.succeeded)}/{len(report.records)} object(s), "
        f"{report.total_bytes} bytes, {len(report.failed)} failed"
    )
    return report


def download_query_results(
    client: RepositoryClient,
    query: QueryLike,
    dest_dir: Union[str, Path],
    *,
    max_results: Optional[int] = None,
    overwrite: bool = False,
    continue_on_error: bool = False,
    log: Optional[logging.Logger] = None,
) -> DownloadReport:
    """
    Search, then download every hit.

    ``fileName`` is added to the field list so objects keep their original
    names on disk when the index knows them.
    """
    solr_query = coerce_query(query).with_fields("fileName")
    docs = list(client.iter_query(solr_query, max_results=max_results))
    file_names = {doc.identifier: doc.file_name for doc in docs if doc.file_name}
    return download_objects(
        client,
        [doc.identifier for doc in docs],
        dest_dir,
        file_names=file_names,
        overwrite=overwrite,
        continue_on_error=continue_on_error,
        log=log,
    )


def download_package(
    client: RepositoryClient,
    resource_map_id: str,
    dest_dir: Union[str, Path],
    *,
    include_metadata: bool = True,
    overwrite: bool = False,
    continue_on_error: bool = False,
    log: Optional[logging.Logger] = None,
) -> DownloadReport:
    """
    Download the members of a data package into ``dest_dir/<package>``.

    Args:
        resource_map_id: PID of the package's resource map
        include_metadata: Also fetch the science metadata documents
    """
    resource_map = client.get_resource_map(resource_map_id)
    members = list(resource_map.data_identifiers)
    if include_metadata:
        members = list(resource_map.metadata_identifiers) + members

    package_dir = Path(dest_dir) / safe_filename(resource_map_id)
    return download_objects(
        client,
        members,
        package_dir,
        overwrite=overwrite,
        continue_on_error=continue_on_error,
        log=log,
    )
