"""
Shared pytest fixtures.

Provides small in-memory layers (two adjacent 10 km square regions in Alaska
Albers and a handful of population points), a population CSV, and canned
repository responses (Solr JSON and an OAI-ORE resource map).
"""

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point, box


ANALYSIS_CRS = "EPSG:3338"


# =============================================================================
# Spatial Fixtures
# =============================================================================

@pytest.fixture
def regions_3338():
    """Two adjacent 10 km x 10 km regions in EPSG:3338, one management area."""
    return gpd.GeoDataFrame(
        {
            "region_id": [1, 2],
            "region": ["North", "South"],
            "mgmt_area": ["Interior", "Interior"],
        },
        geometry=[box(0, 0, 10_000, 10_000), box(10_000, 0, 20_000, 10_000)],
        crs=ANALYSIS_CRS,
    )


@pytest.fixture
def regions_4326(regions_3338):
    """The same regions in WGS 84."""
    return regions_3338.to_crs("EPSG:4326")


@pytest.fixture
def points_3338():
    """Population points: two in North, one in South, one outside both."""
    return gpd.GeoDataFrame(
        {
            "city": ["Alpha", "Bravo", "Charlie", "Delta"],
            "population": [100, 50, 30, 999],
        },
        geometry=[
            Point(1_000, 1_000),
            Point(2_000, 2_000),
            Point(15_000, 5_000),
            Point(50_000, 50_000),
        ],
        crs=ANALYSIS_CRS,
    )


@pytest.fixture
def population_csv(tmp_path, points_3338):
    """CSV with city, lat, lng, population (WGS 84 coordinates)."""
    wgs84 = points_3338.to_crs("EPSG:4326")
    df = pd.DataFrame(
        {
            "city": wgs84["city"],
            "lat": wgs84.geometry.y,
            "lng": wgs84.geometry.x,
            "population": wgs84["population"],
        }
    )
    path = tmp_path / "alaska_population.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def regions_file(tmp_path, regions_3338):
    """Regions written to a GeoPackage."""
    path = tmp_path / "ak_regions.gpkg"
    regions_3338.to_file(path, driver="GPKG")
    return path


@pytest.fixture
def sample_wkt_crs():
    """Example WKT string for CRS tests."""
    return (
        'GEOGCS["WGS 84",'
        'DATUM["WGS_1984",'
        'SPHEROID["WGS 84",6378137,298.257223563]],'
        'PRIMEM["Greenwich",0],'
        'UNIT["degree",0.0174532925199433]]'
    )


@pytest.fixture
def sample_proj_crs():
    """Example PROJ string for CRS tests (Alaska Albers)."""
    return (
        "+proj=aea +lat_0=50 +lon_0=-154 +lat_1=55 +lat_2=65 "
        "+x_0=0 +y_0=0 +datum=NAD83 +units=m +no_defs"
    )


# =============================================================================
# Repository Fixtures
# =============================================================================

@pytest.fixture
def solr_payload():
    """Solr JSON envelope with two hits out of five."""
    return {
        "responseHeader": {"status": 0, "QTime": 3},
        "response": {
            "numFound": 5,
            "start": 0,
            "docs": [
                {
                    "identifier": "doi:10.18739/A2RZ6X",
                    "title": "Soil temperature, Toolik Lake",
                    "resourceMap": ["resource_map_doi:10.18739/A2RZ6X"],
                    "formatType": "METADATA",
                },
                {
                    "identifier": "urn:uuid:1234-abcd",
                    "title": "Soil moisture",
                    "resourceMap": "resource_map_urn:uuid:9999",
                    "fileName": "soil moisture.csv",
                },
            ],
        },
    }


@pytest.fixture
def resource_map_xml():
    """OAI-ORE resource map aggregating one metadata and two data objects."""
    base = "https://cn.dataone.org/cn/v2/resolve"
    return f"""<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns:ore="http://www.openarchives.org/ore/terms/"
         xmlns:dcterms="http://purl.org/dc/terms/"
         xmlns:cito="http://purl.org/spar/cito/">
  <rdf:Description rdf:about="{base}/resource_map_doi%3A10.5063%2FF1">
    <ore:describes rdf:resource="{base}/resource_map_doi%3A10.5063%2FF1#aggregation"/>
  </rdf:Description>
  <rdf:Description rdf:about="{base}/resource_map_doi%3A10.5063%2FF1#aggregation">
    <ore:aggregates rdf:resource="{base}/doi%3A10.5063%2FF1"/>
    <ore:aggregates rdf:resource="{base}/urn%3Auuid%3Aaaa"/>
    <ore:aggregates rdf:resource="{base}/urn%3Auuid%3Abbb"/>
  </rdf:Description>
  <rdf:Description rdf:about="{base}/doi%3A10.5063%2FF1">
    <dcterms:identifier>doi:10.5063/F1</dcterms:identifier>
  </rdf:Description>
  <rdf:Description rdf:about="{base}/doi%3A10.5063%2FF1">
    <cito:documents rdf:resource="{base}/urn%3Auuid%3Aaaa"/>
    <cito:documents rdf:resource="{base}/urn%3Auuid%3Abbb"/>
  </rdf:Description>
  <rdf:Description rdf:about="{base}/urn%3Auuid%3Aaaa">
    <dcterms:identifier>urn:uuid:aaa</dcterms:identifier>
    <cito:isDocumentedBy rdf:resource="{base}/doi%3A10.5063%2FF1"/>
  </rdf:Description>
</rdf:RDF>
"""
