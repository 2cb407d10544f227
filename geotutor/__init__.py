# =============================================================================
# Open Geo Tutorials Shared Library
# =============================================================================
# Shared library behind the spatial analysis and data repository tutorials.
# See individual sub-packages for detailed documentation.
# =============================================================================

"""
Open Geo Tutorials shared library.

Sub-packages:
- models: Pydantic data models, workflow config and settings
- spatial_utils: Vector I/O, CRS handling, spatial joins, aggregation
- transformations: Recipe-based GeoDataFrame transformation steps
- rendering: Static (matplotlib) and interactive (folium) maps
- repository: Solr search and object download client
"""

__version__ = "0.1.0"
