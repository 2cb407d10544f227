"""
Unit tests for data models.

Tests validation logic, normalization and parsing for the Pydantic models.
"""

import pytest
from pydantic import ValidationError

from geotutor.models import (
    AggregationSpec,
    Bounds,
    DownloadRecord,
    DownloadReport,
    MapOutputFormat,
    RegionalPopulationConfig,
    RepositoryDownloadConfig,
    RepositorySettings,
    ResourceMap,
    SearchResult,
    SolrDocument,
    SolrQuery,
    SpatialJoinConfig,
    SpatialSettings,
    VectorFormat,
    epsg_code,
    quote_term,
    validate_crs,
)


# =============================================================================
# CRS Validation Tests
# =============================================================================


class TestCRSValidation:
    """Test CRS validation logic."""

    def test_valid_epsg_codes(self):
        """Test that valid EPSG codes pass validation and are uppercased."""
        assert validate_crs("EPSG:4326") == "EPSG:4326"
        assert validate_crs("epsg:3338") == "EPSG:3338"
        assert validate_crs("  Epsg:3338 ") == "EPSG:3338"

    def test_valid_wkt_strings(self, sample_wkt_crs):
        """Test that balanced WKT strings pass validation."""
        assert validate_crs(sample_wkt_crs) == sample_wkt_crs

    def test_unbalanced_wkt_rejected(self):
        """Test that WKT with unbalanced brackets is rejected."""
        with pytest.raises(ValueError):
            validate_crs('GEOGCS["WGS 84",DATUM["WGS_1984"]')

    def test_valid_proj_strings(self, sample_proj_crs):
        """Test that PROJ strings pass validation."""
        assert validate_crs(sample_proj_crs) == sample_proj_crs

    def test_proj_string_without_projection_rejected(self):
        """Test that '+proj=' alone is not a CRS."""
        with pytest.raises(ValueError):
            validate_crs("+proj=")

    def test_invalid_format_rejection(self):
        """Test that invalid CRS formats are rejected."""
        for value in ["WGS84", "EPSG:", "EPSG:abc", "3338"]:
            with pytest.raises(ValueError):
                validate_crs(value)

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            validate_crs("   ")

    def test_non_string_rejected(self):
        with pytest.raises(TypeError):
            validate_crs(3338)

    def test_epsg_code(self):
        assert epsg_code("epsg:3338") == 3338
        assert epsg_code("+proj=longlat") is None


# =============================================================================
# Bounds and Format Tests
# =============================================================================


class TestBounds:
    """Test Bounds validation and helpers."""

    def test_from_total_bounds(self):
        bounds = Bounds.from_total_bounds([0, 0, 20_000, 10_000])
        assert bounds.width == 20_000
        assert bounds.height == 10_000
        assert bounds.area == 200_000_000
        assert bounds.center == (10_000, 5_000)

    def test_empty_layer_bounds_rejected(self):
        """Test that NaN total_bounds from an empty GeoDataFrame are rejected."""
        nan = float("nan")
        with pytest.raises(ValidationError, match="finite"):
            Bounds.from_total_bounds([nan, nan, nan, nan])

    def test_infinite_bounds_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Bounds(minx=0, miny=0, maxx=float("inf"), maxy=1)

    def test_point_bounds_allowed(self):
        bounds = Bounds(minx=1, miny=1, maxx=1, maxy=1)
        assert bounds.area == 0

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError, match="minx"):
            Bounds(minx=10, miny=0, maxx=0, maxy=10)
        with pytest.raises(ValidationError, match="miny"):
            Bounds(minx=0, miny=10, maxx=10, maxy=0)


class TestFormats:
    """Test vector and map output format enums."""

    @pytest.mark.parametrize(
        "suffix, expected",
        [
            (".shp", VectorFormat.SHAPEFILE),
            (".GeoJSON", VectorFormat.GEOJSON),
            (".json", VectorFormat.GEOJSON),
            (".gpkg", VectorFormat.GPKG),
            (".parquet", VectorFormat.GEOPARQUET),
        ],
    )
    def test_from_suffix(self, suffix, expected):
        assert VectorFormat.from_suffix(suffix) is expected

    def test_unknown_suffix(self):
        with pytest.raises(ValueError, match="Unsupported vector file suffix"):
            VectorFormat.from_suffix(".kml")

    def test_drivers(self):
        assert VectorFormat.SHAPEFILE.driver == "ESRI Shapefile"
        assert VectorFormat.GPKG.driver == "GPKG"
        assert VectorFormat.GEOPARQUET.driver is None

    def test_map_output_format_values(self):
        assert MapOutputFormat("png") is MapOutputFormat.PNG
        with pytest.raises(ValueError):
            MapOutputFormat("tiff")


# =============================================================================
# Solr Query Tests
# =============================================================================


class TestSolrQuery:
    """Test search parameter validation and request building."""

    def test_defaults(self):
        query = SolrQuery()
        assert query.q == "*:*"
        assert query.rows == 10
        assert query.fl == ["identifier", "title", "resourceMap"]
        assert query.start == 0

    def test_to_params(self):
        query = SolrQuery(q="title:*soil*", rows=5, sort="dateUploaded desc", fq=["formatType:METADATA"])
        params = query.to_params()
        assert params == {
            "q": "title:*soil*",
            "rows": 5,
            "start": 0,
            "fl": "identifier,title,resourceMap",
            "wt": "json",
            "sort": "dateUploaded desc",
            "fq": ["formatType:METADATA"],
        }

    def test_optional_params_omitted(self):
        params = SolrQuery().to_params()
        assert "sort" not in params
        assert "fq" not in params

    def test_sort_normalization(self):
        """Test that URL-encoded and mixed-case sort clauses are normalized."""
        assert SolrQuery(sort="dateUploaded+desc").sort == "dateUploaded desc"
        assert SolrQuery(sort="dateUploaded DESC, title asc").sort == "dateUploaded desc,title asc"

    def test_invalid_sort_rejected(self):
        with pytest.raises(ValidationError, match="sort"):
            SolrQuery(sort="dateUploaded sideways")

    def test_field_list_from_string(self):
        query = SolrQuery(fl="identifier, title,identifier")
        assert query.fl == ["identifier", "title"]

    def test_field_list_always_requests_identifier(self):
        query = SolrQuery(fl="title")
        assert query.fl == ["identifier", "title"]
        assert query.to_params()["fl"] == "identifier,title"

    def test_field_list_wildcard_left_alone(self):
        assert SolrQuery(fl="*").to_params()["fl"] == "*"

    def test_invalid_field_name_rejected(self):
        with pytest.raises(ValidationError):
            SolrQuery(fl=["identifier", "bad field"])

    def test_rows_bounds(self):
        with pytest.raises(ValidationError):
            SolrQuery(rows=0)
        with pytest.raises(ValidationError):
            SolrQuery(rows=10_001)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            SolrQuery(query="title:*soil*")

    def test_next_page(self):
        query = SolrQuery(rows=25, start=50)
        page = query.next_page()
        assert page.start == 75
        assert query.start == 50

    def test_with_fields(self):
        query = SolrQuery(fl=["identifier"])
        assert query.with_fields("fileName", "identifier").fl == ["identifier", "fileName"]
        assert query.fl == ["identifier"]

    def test_with_fields_wildcard_unchanged(self):
        query = SolrQuery(fl=["*"])
        assert query.with_fields("fileName") is query

    def test_quote_term(self):
        assert quote_term("doi:10.18739/A2RZ6X") == '"doi:10.18739/A2RZ6X"'
        assert quote_term('a"b\\c') == '"a\\"b\\\\c"'


# =============================================================================
# Search Result Tests
# =============================================================================


class TestSearchResult:
    """Test parsing of Solr responses."""

    def test_from_response(self, solr_payload):
        result = SearchResult.from_response(solr_payload)
        assert result.num_found == 5
        assert result.start == 0
        assert result.identifiers == ["doi:10.18739/A2RZ6X", "urn:uuid:1234-abcd"]
        assert result.has_more is True

    def test_scalar_resource_map_coerced(self, solr_payload):
        result = SearchResult.from_response(solr_payload)
        assert result.docs[1].resource_map == ["resource_map_urn:uuid:9999"]
        assert result.resource_maps == [
            "resource_map_doi:10.18739/A2RZ6X",
            "resource_map_urn:uuid:9999",
        ]

    def test_aliases_and_metadata_flag(self, solr_payload):
        result = SearchResult.from_response(solr_payload)
        assert result.docs[0].is_metadata is True
        assert result.docs[1].is_metadata is False
        assert result.docs[1].file_name == "soil moisture.csv"

    def test_missing_response_rejected(self):
        with pytest.raises(ValueError, match="response"):
            SearchResult.from_response({"error": {"msg": "undefined field"}})

    def test_last_page(self):
        result = SearchResult.from_response(
            {"response": {"numFound": 1, "start": 0, "docs": [{"identifier": "a"}]}}
        )
        assert result.has_more is False

    def test_document_keywords_cleaned(self):
        doc = SolrDocument(identifier="a", keywords=[" soil ", "soil", "", "permafrost"])
        assert doc.keywords == ["soil", "permafrost"]

    def test_document_extra_fields_kept(self):
        doc = SolrDocument(identifier="a", authoritativeMN="urn:node:ARCTIC")
        assert doc.model_extra["authoritativeMN"] == "urn:node:ARCTIC"


# =============================================================================
# Resource Map Tests
# =============================================================================


class TestResourceMap:
    """Test OAI-ORE resource map parsing."""

    def test_members_split_by_role(self, resource_map_xml):
        rm = ResourceMap.from_rdf_xml("resource_map_doi:10.5063/F1", resource_map_xml)
        assert rm.metadata_identifiers == ["doi:10.5063/F1"]
        assert rm.data_identifiers == ["urn:uuid:aaa", "urn:uuid:bbb"]
        assert rm.members == ["doi:10.5063/F1", "urn:uuid:aaa", "urn:uuid:bbb"]

    def test_bytes_input(self, resource_map_xml):
        rm = ResourceMap.from_rdf_xml("rm", resource_map_xml.encode("utf-8"))
        assert len(rm.members) == 3

    def test_invalid_xml(self):
        with pytest.raises(ValueError, match="not valid RDF/XML"):
            ResourceMap.from_rdf_xml("rm", "<rdf:RDF")


# =============================================================================
# Download Report Tests
# =============================================================================


def test_download_report_totals():
    report = DownloadReport(
        records=[
            DownloadRecord(identifier="a", path="a", size_bytes=10),
            DownloadRecord(identifier="b", path="b", size_bytes=5, skipped=True),
            DownloadRecord(identifier="c", success=False, error="HTTP 404"),
        ]
    )
    assert [r.identifier for r in report.succeeded] == ["a", "b"]
    assert [r.identifier for r in report.failed] == ["c"]
    assert report.total_bytes == 15


# =============================================================================
# Workflow Model Tests
# =============================================================================


class TestWorkflowModels:
    """Test workflow configuration models."""

    def test_join_defaults(self):
        config = SpatialJoinConfig()
        assert config.predicate == "within"
        assert config.how == "inner"
        assert config.drop_index_right is True

    def test_join_invalid_predicate(self):
        with pytest.raises(ValidationError):
            SpatialJoinConfig(predicate="touches")

    def test_aggregation_default_output_column(self):
        assert AggregationSpec(group_by="region", value_column="population").output_column == "total_population"
        spec = AggregationSpec(group_by="region", value_column="population", agg="mean")
        assert spec.output_column == "mean_population"

    def test_aggregation_explicit_output_column(self):
        spec = AggregationSpec(group_by="region", value_column="population", output_column="pop")
        assert spec.output_column == "pop"

    def test_regional_config_defaults(self):
        config = RegionalPopulationConfig(regions_path="r.shp", points_path="p.csv")
        assert config.lon_column == "lng"
        assert config.lat_column == "lat"
        assert config.points_crs == "EPSG:4326"
        assert config.analysis_crs == "EPSG:3338"
        assert config.intent == "equal_area_analysis"
        assert config.dissolve_column is None
        assert config.aggregation.output_column == "total_population"

    def test_regional_config_crs_normalized(self):
        config = RegionalPopulationConfig(regions_path="r.shp", points_path="p.csv", analysis_crs="epsg:3338")
        assert config.analysis_crs == "EPSG:3338"

    def test_regional_config_round_trips_through_dict(self):
        config = RegionalPopulationConfig(
            regions_path="r.shp",
            points_path="p.csv",
            join={"predicate": "intersects"},
        )
        again = RegionalPopulationConfig(**config.model_dump())
        assert again.join.predicate == "intersects"

    def test_regional_config_requires_paths(self):
        with pytest.raises(ValidationError):
            RegionalPopulationConfig(regions_path="r.shp")

    def test_download_config_nested_query(self):
        config = RepositoryDownloadConfig(
            query={"q": "title:*soil*", "rows": 5, "sort": "dateUploaded+desc"},
            max_results=5,
        )
        assert config.query.sort == "dateUploaded desc"
        assert config.packages is False
        assert config.continue_on_error is False

    def test_download_config_max_results_positive(self):
        with pytest.raises(ValidationError):
            RepositoryDownloadConfig(max_results=0)


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Test environment-driven settings."""

    def test_repository_defaults(self, monkeypatch):
        for name in ["REPOSITORY_BASE_URL", "REPOSITORY_NODE_URL", "REPOSITORY_TOKEN", "REPOSITORY_TIMEOUT"]:
            monkeypatch.delenv(name, raising=False)
        settings = RepositorySettings(_env_file=None)
        assert settings.base_url == "https://cn.dataone.org/cn/v2"
        assert settings.node_url == "https://arcticdata.io/metacat/d1/mn/v2"
        assert settings.token is None
        assert settings.timeout == 30.0

    def test_repository_from_env(self, monkeypatch):
        monkeypatch.setenv("REPOSITORY_BASE_URL", "https://search.example.org/v2")
        monkeypatch.setenv("REPOSITORY_TOKEN", "secret")
        monkeypatch.setenv("REPOSITORY_TIMEOUT", "5")
        settings = RepositorySettings(_env_file=None)
        assert settings.base_url == "https://search.example.org/v2"
        assert settings.token == "secret"
        assert settings.timeout == 5.0

    def test_spatial_crs_validated(self, monkeypatch):
        monkeypatch.setenv("SPATIAL_ANALYSIS_CRS", "epsg:3338")
        assert SpatialSettings(_env_file=None).analysis_crs == "EPSG:3338"

        monkeypatch.setenv("SPATIAL_ANALYSIS_CRS", "Alaska Albers")
        with pytest.raises(ValidationError):
            SpatialSettings(_env_file=None)
