# =============================================================================
# Repository Models Module
# =============================================================================
# Pydantic models for the Solr-backed metadata repository:
# - SolrQuery: Search parameters (q, rows, fl, sort, start, fq)
# - SolrDocument / SearchResult: Parsed search responses
# - ResourceMap: OAI-ORE package membership
# - DownloadRecord / DownloadReport: Bulk download bookkeeping
# =============================================================================

import re
import xml.etree.ElementTree as ET
from typing import Any, Optional
from urllib.parse import unquote

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from .base import DescriptiveMetadataMixin

__all__ = [
    "DEFAULT_FIELDS",
    "SolrQuery",
    "SolrDocument",
    "SearchResult",
    "ResourceMap",
    "DownloadRecord",
    "DownloadReport",
    "quote_term",
]

DEFAULT_FIELDS = ["identifier", "title", "resourceMap"]

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_SORT_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_.]*)\s+(asc|desc)$", re.IGNORECASE)

# Solr query syntax special characters (escaped inside quoted terms)
_SOLR_QUOTE_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"'})

# RDF/XML namespaces used by DataONE resource maps
_NS = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "ore": "http://www.openarchives.org/ore/terms/",
    "dcterms": "http://purl.org/dc/terms/",
    "cito": "http://purl.org/spar/cito/",
}
_RDF_ABOUT = f"{{{_NS['rdf']}}}about"
_RDF_RESOURCE = f"{{{_NS['rdf']}}}resource"


def quote_term(value: str) -> str:
    """
    Quote a literal term for use inside a Solr ``q`` expression.

    Identifiers routinely contain ``:`` and ``/`` which Solr would otherwise
    parse as field separators or regex delimiters.

    Examples:
        >>> quote_term("doi:10.18739/A2RZ6X")
        '"doi:10.18739/A2RZ6X"'
    """
    return f'"{value.translate(_SOLR_QUOTE_ESCAPES)}"'


# =============================================================================
# Search Query
# =============================================================================

class SolrQuery(BaseModel):
    """
    Parameters for a Solr search request.

    Attributes:
        q: Main query expression (default: match everything)
        rows: Page size (1-10000)
        fl: Field list to return (``identifier`` is always requested)
        sort: Sort clause(s), e.g. "dateUploaded desc"
        start: Offset of the first result
        fq: Filter queries (each sent as a separate ``fq`` parameter)
    """

    q: str = Field("*:*", min_length=1, description="Solr query expression")
    rows: int = Field(10, ge=1, le=10000, description="Number of rows to return")
    fl: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FIELDS),
        description="Fields to return",
    )
    sort: Optional[str] = Field(None, description="Sort clause, e.g. 'dateUploaded desc'")
    start: int = Field(0, ge=0, description="Offset of the first result")
    fq: list[str] = Field(default_factory=list, description="Filter queries")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "q": "title:*soil*",
                "rows": 10,
                "fl": ["identifier", "title", "resourceMap"],
                "sort": "dateUploaded desc",
            }
        },
    )

    @field_validator("fl", mode="before")
    @classmethod
    def split_field_list(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("fl")
    @classmethod
    def validate_field_names(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("fl must name at least one field")
        for name in v:
            if name != "*" and not _FIELD_RE.match(name):
                raise ValueError(f"Invalid field name in fl: {name!r}")
        # Every hit is parsed into a SolrDocument, which needs the PID
        if "*" not in v and "identifier" not in v:
            v = ["identifier", *v]
        return list(dict.fromkeys(v))

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v: Optional[str]) -> Optional[str]:
        """
        Normalize sort clauses.

        "dateUploaded+desc" (URL-encoded form copied from examples) becomes
        "dateUploaded desc". Multiple clauses are comma separated.
        """
        if v is None:
            return None
        clauses = []
        for raw in v.split(","):
            clause = " ".join(raw.replace("+", " ").split())
            if not _SORT_RE.match(clause):
                raise ValueError(
                    f"Invalid sort clause {raw!r}. Expected '<field> asc|desc'"
                )
            field_name, direction = clause.split(" ")
            clauses.append(f"{field_name} {direction.lower()}")
        return ",".join(clauses)

    def to_params(self) -> dict[str, Any]:
        """
        Build the request parameters for ``requests``.

        Returns:
            Dict with q, rows, start, fl (comma joined), wt=json and optional
            sort / fq (a list, so requests repeats the key).
        """
        params: dict[str, Any] = {
            "q": self.q,
            "rows": self.rows,
            "start": self.start,
            "fl": ",".join(self.fl),
            "wt": "json",
        }
        if self.sort:
            params["sort"] = self.sort
        if self.fq:
            params["fq"] = list(self.fq)
        return params

    def with_fields(self, *fields: str) -> "SolrQuery":
        """Return a copy whose ``fl`` also requests ``fields`` (no-op for ``*``)."""
        if "*" in self.fl:
            return self
        missing = [f for f in fields if f not in self.fl]
        if not missing:
            return self
        return self.model_copy(update={"fl": [*self.fl, *missing]})

    def next_page(self) -> "SolrQuery":
        """Return a copy positioned at the following page."""
        return self.model_copy(update={"start": self.start + self.rows})


# =============================================================================
# Search Results
# =============================================================================

class SolrDocument(DescriptiveMetadataMixin):
    """
    A single search hit.

    Only ``identifier`` is guaranteed; every other field depends on the
    requested field list. Unrequested fields the index returns are kept as
    extra attributes.
    """

    identifier: str = Field(..., min_length=1, description="Persistent identifier (PID)")
    resource_map: list[str] = Field(
        default_factory=list,
        alias="resourceMap",
        description="Resource maps aggregating this object",
    )
    format_id: Optional[str] = Field(None, alias="formatId")
    format_type: Optional[str] = Field(None, alias="formatType")
    size: Optional[int] = Field(None, ge=0)
    date_uploaded: Optional[str] = Field(None, alias="dateUploaded")
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("resource_map", mode="before")
    @classmethod
    def coerce_resource_map(cls, v: Any) -> Any:
        """Solr returns single-valued fields as scalars."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @property
    def is_metadata(self) -> bool:
        return (self.format_type or "").upper() == "METADATA"


class SearchResult(BaseModel):
    """
    Parsed Solr search response.

    Attributes:
        num_found: Total number of matching documents
        start: Offset of the first returned document
        docs: Returned documents
    """

    num_found: int = Field(..., ge=0)
    start: int = Field(0, ge=0)
    docs: list[SolrDocument] = Field(default_factory=list)

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "SearchResult":
        """
        Parse the standard ``{"response": {...}}`` Solr envelope.

        Raises:
            ValueError: If the payload has no ``response`` object
        """
        response = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(response, dict):
            raise ValueError("Solr payload is missing the 'response' object")
        return cls(
            num_found=response.get("numFound", 0),
            start=response.get("start", 0),
            docs=[SolrDocument(**doc) for doc in response.get("docs", [])],
        )

    @property
    def identifiers(self) -> list[str]:
        return [doc.identifier for doc in self.docs]

    @property
    def resource_maps(self) -> list[str]:
        """Unique resource map identifiers across all docs, in order of appearance."""
        seen: dict[str, None] = {}
        for doc in self.docs:
            for rm in doc.resource_map:
                seen.setdefault(rm, None)
        return list(seen)

    @property
    def has_more(self) -> bool:
        return self.start + len(self.docs) < self.num_found


# =============================================================================
# Resource Map (OAI-ORE)
# =============================================================================

class ResourceMap(BaseModel):
    """
    Package membership described by an OAI-ORE resource map.

    Attributes:
        identifier: PID of the resource map itself
        metadata_identifiers: Members that document other members (science metadata)
        data_identifiers: Remaining members (data objects)
    """

    identifier: str = Field(..., min_length=1)
    metadata_identifiers: list[str] = Field(default_factory=list)
    data_identifiers: list[str] = Field(default_factory=list)

    @property
    def members(self) -> list[str]:
        return list(dict.fromkeys(self.metadata_identifiers + self.data_identifiers))

    @classmethod
    def from_rdf_xml(cls, identifier: str, xml_text: str | bytes) -> "ResourceMap":
        """
        Parse a resource map serialized as RDF/XML.

        Aggregated resources come from ``ore:aggregates``. Each member's PID is
        its ``dcterms:identifier`` when present, otherwise the URL-decoded
        final path segment of its URI (``.../resolve/<pid>``). Members with a
        ``cito:documents`` statement are metadata.

        Raises:
            ValueError: If the document is not well-formed XML
        """
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as e:
            raise ValueError(f"Resource map {identifier} is not valid RDF/XML: {e}") from e

        # A subject may be described by several rdf:Description elements
        descriptions: dict[str, list[ET.Element]] = {}
        for desc in root.iter(f"{{{_NS['rdf']}}}Description"):
            about = desc.get(_RDF_ABOUT)
            if about:
                descriptions.setdefault(about, []).append(desc)

        aggregated_uris: list[str] = []
        for agg in root.iter(f"{{{_NS['ore']}}}aggregates"):
            uri = agg.get(_RDF_RESOURCE)
            if uri and uri not in aggregated_uris:
                aggregated_uris.append(uri)

        metadata_ids: list[str] = []
        data_ids: list[str] = []
        for uri in aggregated_uris:
            pid = None
            documents = False
            for desc in descriptions.get(uri, []):
                id_el = desc.find("dcterms:identifier", _NS)
                if pid is None and id_el is not None and id_el.text and id_el.text.strip():
                    pid = id_el.text.strip()
                documents = documents or desc.find("cito:documents", _NS) is not None
            if pid is None:
                pid = unquote(uri.rstrip("/").rsplit("/", 1)[-1])
            (metadata_ids if documents else data_ids).append(pid)

        return cls(
            identifier=identifier,
            metadata_identifiers=metadata_ids,
            data_identifiers=data_ids,
        )


# =============================================================================
# Download bookkeeping
# =============================================================================

class DownloadRecord(BaseModel):
    """Outcome of downloading a single object."""

    identifier: str
    path: Optional[str] = None
    size_bytes: int = Field(0, ge=0)
    success: bool = True
    skipped: bool = False
    error: Optional[str] = None


class DownloadReport(BaseModel):
    """Aggregate outcome of a serial bulk download."""

    records: list[DownloadRecord] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[DownloadRecord]:
        return [r for r in self.records if r.success]

    @property
    def failed(self) -> list[DownloadRecord]:
        return [r for r in self.records if not r.success]

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.records if r.success)
