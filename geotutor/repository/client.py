# =============================================================================
# Repository Client - Solr Search and Object Retrieval
# =============================================================================
# Thin requests-based wrapper around a DataONE-style REST API:
# - GET {base_url}/query/solr/?q=...&rows=...&fl=...&sort=...
# - GET {node_url}/object/{pid}
# =============================================================================

import logging
from pathlib import Path
from typing import Any, Iterator, Optional, Union
from urllib.parse import quote

import requests

from geotutor.models import (
    RepositorySettings,
    ResourceMap,
    SearchResult,
    SolrDocument,
    SolrQuery,
    quote_term,
)

__all__ = ["RepositoryClient", "RepositoryError", "QueryLike", "coerce_query"]

logger = logging.getLogger(__name__)

QueryLike = Union[SolrQuery, dict, str]


class RepositoryError(RuntimeError):
    """
    An HTTP or payload error returned by the repository.

    Attributes:
        status_code: HTTP status (None for transport or parse errors)
        url: Request URL
    """

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


def coerce_query(query: QueryLike) -> SolrQuery:
    """Accept a SolrQuery, a dict of its fields, or a bare ``q`` string."""
    if isinstance(query, SolrQuery):
        return query
    if isinstance(query, str):
        return SolrQuery(q=query)
    return SolrQuery(**query)


class RepositoryClient:
    """
    Client for the repository's search index and object store.

    Searches go to ``base_url`` (the coordinating node indexes every member
    node); objects are fetched from ``node_url`` when set, else ``base_url``.
    Requests are made one at a time with no retries.

    Example:
        >>> with RepositoryClient.from_settings(RepositorySettings()) as client:
        ...     result = client.query(SolrQuery(q="title:*soil*", rows=5))
        ...     for doc in result.docs:
        ...         print(doc.identifier, doc.title)
    """

    def __init__(
        self,
        base_url: str,
        node_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.node_url = (node_url or base_url).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: RepositorySettings) -> "RepositoryClient":
        return cls(
            base_url=settings.base_url,
            node_url=settings.node_url,
            token=settings.token,
            timeout=settings.timeout,
        )

    def __enter__(self) -> "RepositoryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    @property
    def search_url(self) -> str:
        return f"{self.base_url}/query/solr/"

    def object_url(self, identifier: str) -> str:
        """Object endpoint for a PID (PIDs are percent-encoded, including '/')."""
        return f"{self.node_url}/object/{quote(identifier, safe='')}"

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _get(self, url: str, *, params: Optional[dict] = None, stream: bool = False) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout, stream=stream)
        except requests.RequestException as e:
            raise RepositoryError(f"Request to {url} failed: {e}", url=url) from e

        if response.status_code >= 400:
            body = "" if stream else (response.text or "")[:200]
            response.close()
            raise RepositoryError(
                f"Repository returned HTTP {response.status_code} for {url}"
                + (f": {body}" if body else ""),
                status_code=response.status_code,
                url=url,
            )
        return response

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def query(self, query: QueryLike) -> SearchResult:
        """
        Run one Solr search request.

        Args:
            query: SolrQuery, a dict of SolrQuery fields, or a bare ``q`` string

        Returns:
            Parsed SearchResult

        Raises:
            RepositoryError: On HTTP errors or a non-JSON / malformed response
        """
        solr_query = coerce_query(query)
        response = self._get(self.search_url, params=solr_query.to_params())
        try:
            payload = response.json()
            result = SearchResult.from_response(payload)
        except ValueError as e:
            raise RepositoryError(
                f"Unexpected search response from {self.search_url}: {e}",
                status_code=response.status_code,
                url=self.search_url,
            ) from e

        logger.info(
            f"Query q={solr_query.q!r} start={solr_query.start}: "
            f"{len(result.docs)} of {result.num_found} document(s)"
        )
        return result

    def iter_query(
        self,
        query: QueryLike,
        page_size: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> Iterator[SolrDocument]:
        """
        Yield documents across pages, one request per page.

        Args:
            query: Starting query (its ``start`` is honoured)
            page_size: Rows per request (default: the query's ``rows``)
            max_results: Stop after this many documents
        """
        solr_query = coerce_query(query)
        if page_size is not None:
            solr_query = solr_query.model_copy(update={"rows": page_size})

        yielded = 0
        while True:
            result = self.query(solr_query)
            for doc in result.docs:
                if max_results is not None and yielded >= max_results:
                    return
                yield doc
                yielded += 1
            if not result.docs or not result.has_more:
                return
            if max_results is not None and yielded >= max_results:
                return
            solr_query = solr_query.next_page()

    # -------------------------------------------------------------------------
    # Objects
    # -------------------------------------------------------------------------

    def get_object(self, identifier: str) -> bytes:
        """
        Fetch an object's bytes by PID.

        Raises:
            RepositoryError: On HTTP errors
        """
        response = self._get(self.object_url(identifier))
        logger.info(f"Fetched {identifier} ({len(response.content)} bytes)")
        return response.content

    def stream_object(
        self,
        identifier: str,
        dest_path: Union[str, Path],
        chunk_size: int = 1024 * 1024,
    ) -> int:
        """
        Stream an object to disk.

        A partially written file is removed when the transfer fails.

        Returns:
            Number of bytes written

        Raises:
            RepositoryError: On HTTP or transfer errors
        """
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        url = self.object_url(identifier)
        response = self._get(url, stream=True)

        written = 0
        try:
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except (requests.RequestException, OSError) as e:
            dest_path.unlink(missing_ok=True)
            raise RepositoryError(f"Transfer of {identifier} failed: {e}", url=url) from e
        finally:
            response.close()

        logger.info(f"Downloaded {identifier} -> {dest_path} ({written} bytes)")
        return written

    def get_resource_map(self, identifier: str) -> ResourceMap:
        """
        Fetch and parse a resource map.

        Raises:
            RepositoryError: On HTTP errors or unparseable RDF/XML
        """
        content = self.get_object(identifier)
        try:
            return ResourceMap.from_rdf_xml(identifier, content)
        except ValueError as e:
            raise RepositoryError(str(e), url=self.object_url(identifier)) from e

    def get_package_members(self, identifier: str) -> list[str]:
        """All PIDs aggregated by a resource map (metadata first)."""
        return self.get_resource_map(identifier).members

    def find_resource_maps(self, identifier: str) -> list[str]:
        """Resource maps that aggregate ``identifier``, found via the search index."""
        result = self.query(
            SolrQuery(q=f"identifier:{quote_term(identifier)}", fl=["identifier", "resourceMap"], rows=1)
        )
        return result.resource_maps

    def describe(self) -> dict[str, Any]:
        """Endpoints in use (for logging and op metadata)."""
        return {"search_url": self.search_url, "node_url": self.node_url, "timeout": self.timeout}
